"""Turn state threaded through the orchestration graph, and its merge rules."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Annotated, Any, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..errors import GraphError

T = TypeVar("T")


class _Model(BaseModel):
    # Accept both snake_case and the camelCase wire names used by UI callers.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Classification(str, Enum):
    CODE_QUERY = "code_query"
    COMMAND = "command"
    CHITCHAT = "chitchat"
    AMBIGUOUS = "ambiguous"


class ReasoningMode(str, Enum):
    STANDARD = "standard"
    DEEP = "deep"


class ChatMessage(_Model):
    role: Literal["user", "assistant", "system"]
    content: str


class ActiveContext(_Model):
    active_file: str | None = None


class PullRequestInfo(_Model):
    title: str = "Unknown PR"
    description: str = ""


class TextMessage(_Model):
    """Typed or pasted user message, optionally scoped to the file on screen."""

    type: Literal["USER_MESSAGE"] = "USER_MESSAGE"
    text: str
    context: ActiveContext | None = None
    pr: PullRequestInfo | None = None
    requirements: list[str] = Field(default_factory=list)


class VoiceUtterance(_Model):
    """Transcribed speech. Carries no screen context."""

    type: Literal["VOICE_INPUT"] = "VOICE_INPUT"
    text: str


UserIntent = Annotated[Union[TextMessage, VoiceUtterance], Field(discriminator="type")]


class TurnContext(_Model):
    active_file: str = ""
    active_file_content: str = ""
    relevant_files: list[str] = Field(default_factory=list)


class CommandResult(_Model):
    stdout: str = ""
    stderr: str = ""
    exit_code: int


class ToolOutput(_Model):
    success: bool
    data: CommandResult | str | None = None
    error: str | None = None


class ScreenPlan(_Model):
    action: Literal["none", "markdown_response", "error"]
    payload: dict[str, Any] = Field(default_factory=dict)


class ResponsePlan(_Model):
    """The two-channel answer: a line to speak and a payload to render."""

    voice: str
    screen: ScreenPlan


class TurnState(_Model):
    history: list[ChatMessage] = Field(default_factory=list)
    user_intent: UserIntent | None = None
    classification: Classification | None = None
    context: TurnContext | None = None
    reasoning_mode: ReasoningMode | None = None
    tool_output: ToolOutput | None = None
    response_plan: ResponsePlan | None = None


def replace(current: T | None, update: T | None) -> T | None:
    """Last write wins; a missing update keeps the current value."""
    return update if update is not None else current


def append(current: Sequence[T] | None, update: Sequence[T] | None) -> list[T]:
    """Concatenate, never rewrite."""
    return [*(current or ()), *(update or ())]


MergeStrategy = Callable[[Any, Any], Any]

MERGE_STRATEGIES: dict[str, MergeStrategy] = {
    "history": append,
    "user_intent": replace,
    "classification": replace,
    "context": replace,
    "reasoning_mode": replace,
    "tool_output": replace,
    "response_plan": replace,
}


def apply_update(state: TurnState, update: Mapping[str, Any]) -> TurnState:
    """Merge a node's partial update into ``state`` and return the new state."""
    merged: dict[str, Any] = {}
    for field, value in update.items():
        strategy = MERGE_STRATEGIES.get(field)
        if strategy is None:
            raise GraphError(f"Unknown turn state field: {field}")
        merged[field] = strategy(getattr(state, field), value)
    return state.model_copy(update=merged)
