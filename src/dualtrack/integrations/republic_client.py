"""Republic integration helpers."""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Sequence
from typing import Any

from loguru import logger
from pydantic import ValidationError
from republic import LLM

from ..config import Settings
from ..core.prompt import build_messages
from ..core.reasoning import GroundedAnswer, GroundingRequest
from ..core.state import ChatMessage
from ..errors import ModelNotConfiguredError

MODEL_NOT_CONFIGURED_ERROR = "Model not configured. Set DUALTRACK_MODEL (e.g., 'openai:gpt-4o-mini')."
_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)


def build_llm(settings: Settings) -> LLM:
    """Build Republic LLM client configured from settings."""
    if not settings.model:
        raise ModelNotConfiguredError(MODEL_NOT_CONFIGURED_ERROR)
    return LLM(
        settings.model,
        api_key=settings.api_key,
        api_base=settings.api_base,
    )


class RepublicReasoner:
    """Grounded reasoner backed by a Republic chat completion."""

    def __init__(self, llm: LLM, *, max_tokens: int = 2048) -> None:
        self._llm = llm
        self._max_tokens = max_tokens

    async def generate_grounded_response(
        self,
        user_text: str,
        history: Sequence[ChatMessage],
        request: GroundingRequest,
    ) -> GroundedAnswer | None:
        messages = build_messages(user_text, history, request)
        try:
            response = await asyncio.to_thread(self._llm.chat.raw, messages=messages, max_tokens=self._max_tokens)
        except Exception:
            # Provider errors mean "no grounded answer"; the graph falls back to its apology plan.
            logger.opt(exception=True).warning("reasoner.call_failed file={}", request.file_path)
            return None

        text = _extract_text(response).strip()
        if not text:
            logger.warning("reasoner.empty_response file={}", request.file_path)
            return None
        return parse_answer(text)


def build_reasoner(settings: Settings) -> RepublicReasoner | None:
    """Return a reasoner when a model is configured, else None."""
    if not settings.model:
        logger.info("reasoner.disabled reason=no_model")
        return None
    return RepublicReasoner(build_llm(settings), max_tokens=settings.max_tokens)


def parse_answer(text: str) -> GroundedAnswer:
    """Parse the two-channel JSON answer; raw text fills both channels when it is not usable JSON."""
    fenced = _FENCED_JSON_RE.search(text)
    candidate = fenced.group(1) if fenced else text
    try:
        payload = json.loads(candidate)
        answer = GroundedAnswer.model_validate(payload)
    except (json.JSONDecodeError, ValidationError):
        logger.warning("reasoner.unstructured_response length={}", len(text))
        return GroundedAnswer(voice=text, screen=text)
    if not answer.voice or not answer.screen:
        return GroundedAnswer(voice=answer.voice or text, screen=answer.screen or text)
    return answer


def _extract_text(response: Any) -> str:
    if isinstance(response, str):
        return response
    choices = getattr(response, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    if message is None:
        return ""
    return getattr(message, "content", "") or ""
