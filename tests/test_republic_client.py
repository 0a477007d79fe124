from types import SimpleNamespace

import pytest

from dualtrack.config import Settings
from dualtrack.core.prompt import build_context_snapshot, build_messages
from dualtrack.core.reasoning import GroundedAnswer, GroundingRequest
from dualtrack.core.state import ChatMessage
from dualtrack.errors import ModelNotConfiguredError
from dualtrack.integrations.republic_client import (
    RepublicReasoner,
    _extract_text,
    build_llm,
    build_reasoner,
    parse_answer,
)


class FakeChat:
    def __init__(self, reply) -> None:
        self.reply = reply
        self.calls: list[dict] = []

    def raw(self, *, messages, max_tokens):
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


class FakeLLM:
    def __init__(self, reply) -> None:
        self.chat = FakeChat(reply)


REQUEST = GroundingRequest(
    file_path="src/auth.ts",
    file_content="export function login() {}\n",
    pr_title="Add login",
    requirements=["Login must log"],
)


def test_parse_answer_reads_plain_json() -> None:
    answer = parse_answer('{"voice": "It logs in.", "screen": "## Login"}')

    assert answer == GroundedAnswer(voice="It logs in.", screen="## Login")


def test_parse_answer_reads_fenced_json() -> None:
    text = 'Here you go:\n```json\n{"voice": "Short.", "screen": "Long."}\n```'

    assert parse_answer(text) == GroundedAnswer(voice="Short.", screen="Long.")


def test_parse_answer_falls_back_to_raw_text() -> None:
    assert parse_answer("just prose") == GroundedAnswer(voice="just prose", screen="just prose")


def test_parse_answer_fills_missing_channel() -> None:
    answer = parse_answer('{"voice": "", "screen": "Details"}')

    assert answer.screen == "Details"
    assert answer.voice == '{"voice": "", "screen": "Details"}'


@pytest.mark.asyncio
async def test_reasoner_sends_grounded_prompt() -> None:
    llm = FakeLLM('{"voice": "It logs in.", "screen": "## Login"}')
    reasoner = RepublicReasoner(llm, max_tokens=128)  # type: ignore[arg-type]
    history = [ChatMessage(role="user", content="earlier"), ChatMessage(role="system", content="hidden")]

    answer = await reasoner.generate_grounded_response("What does login do?", history, REQUEST)

    assert answer == GroundedAnswer(voice="It logs in.", screen="## Login")
    call = llm.chat.calls[0]
    assert call["max_tokens"] == 128
    messages = call["messages"]
    assert messages[0]["role"] == "system"
    assert "export function login() {}" in messages[0]["content"]
    assert "- Login must log" in messages[0]["content"]
    assert messages[1:] == [
        {"role": "user", "content": "earlier"},
        {"role": "user", "content": "What does login do?"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [RuntimeError("rate limited"), "", "   "])
async def test_reasoner_returns_none_without_answer(reply) -> None:
    reasoner = RepublicReasoner(FakeLLM(reply))  # type: ignore[arg-type]

    assert await reasoner.generate_grounded_response("q", [], REQUEST) is None


def test_extract_text_from_completion_object() -> None:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content="hello"))])

    assert _extract_text(response) == "hello"
    assert _extract_text(SimpleNamespace(choices=[])) == ""


def test_reasoner_is_disabled_without_model() -> None:
    assert build_reasoner(Settings()) is None
    with pytest.raises(ModelNotConfiguredError):
        build_llm(Settings())


def test_system_prompt_defaults() -> None:
    messages = build_messages("q", [], GroundingRequest())

    assert "(No requirements loaded)" in messages[0]["content"]
    assert "File: (none)" in messages[0]["content"]
    assert "PR: Unknown PR" in messages[0]["content"]


def test_context_snapshot_lists_history() -> None:
    snapshot = build_context_snapshot([ChatMessage(role="user", content="m1")])

    assert snapshot.startswith("=== CONTEXT SNAPSHOT ===")
    assert "user: m1" in snapshot
