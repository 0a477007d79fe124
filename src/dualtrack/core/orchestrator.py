"""Orchestrator facade: one object per conversation surface, one graph run per turn."""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from loguru import logger

from ..config import Settings
from ..events import AgentSpeakEvent, AgentThinkingEvent, EventChannel
from ..logging_utils import turn_context
from .bridge import CommandBridge
from .graph import TurnGraph, build_graph
from .reasoning import FileContentProvider, GroundedReasoner, NoFiles
from .state import (
    ActiveContext,
    ChatMessage,
    PullRequestInfo,
    ResponsePlan,
    ScreenPlan,
    TextMessage,
    TurnState,
    UserIntent,
)


class Orchestrator:
    """Answer user turns through the orchestration graph.

    Collaborators are owned by the instance, never shared through module
    globals, so separate orchestrators (and tests) are isolated.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        channel: EventChannel | None = None,
        files: FileContentProvider | None = None,
        reasoner: GroundedReasoner | None = None,
        bridge: CommandBridge | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.channel = channel or EventChannel(history_limit=self.settings.event_history_limit)
        self.files = files or NoFiles()
        self.reasoner = reasoner
        self.bridge = bridge or CommandBridge(self.channel, timeout_seconds=self.settings.command_timeout_seconds)
        self.graph: TurnGraph = build_graph(self.channel, self.files, self.reasoner, self.bridge)

    async def respond(self, intent: UserIntent, history: Sequence[ChatMessage] = ()) -> TurnState:
        """Run one turn. Failures are reported in ``response_plan``; this never raises."""
        turn_id = uuid.uuid4().hex[:12]
        initial = TurnState(history=list(history), user_intent=intent)
        with turn_context(turn_id):
            logger.info("turn.start intent={}", intent.type)
            try:
                state = await self.graph.invoke(initial)
            except Exception as exc:
                logger.opt(exception=True).error("turn.failed")
                self.channel.emit(AgentThinkingEvent(stage="completed", message="Turn failed."), source="agent")
                state = initial.model_copy(update={"response_plan": system_error_plan(exc)})

            if state.response_plan is not None:
                self.channel.emit(AgentSpeakEvent(content=state.response_plan.voice), source="agent")
            logger.info("turn.done classification={}", state.classification.value if state.classification else "-")
        return state

    async def respond_text(
        self,
        text: str,
        *,
        active_file: str | None = None,
        pr_title: str | None = None,
        pr_description: str = "",
        requirements: Sequence[str] = (),
        history: Sequence[ChatMessage] = (),
    ) -> TurnState:
        intent = TextMessage(
            text=text,
            context=ActiveContext(active_file=active_file) if active_file else None,
            pr=PullRequestInfo(title=pr_title, description=pr_description) if pr_title else None,
            requirements=list(requirements),
        )
        return await self.respond(intent, history)


def system_error_plan(exc: BaseException) -> ResponsePlan:
    return ResponsePlan(
        voice=f"System error: {exc}",
        screen=ScreenPlan(action="error", payload={"message": str(exc)}),
    )
