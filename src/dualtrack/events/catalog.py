"""Typed events exchanged over the channel."""

from __future__ import annotations

import time
from typing import Literal

from pydantic import Field

from .models import BaseEvent
from .registry import register_event
from .types import ChannelEventType

ThinkingStage = Literal["started", "processing", "completed"]
OutputStream = Literal["stdout", "stderr"]


@register_event
class AgentThinkingEvent(BaseEvent):
    """Progress signal for the UI while a turn is being processed."""

    event_type = ChannelEventType.AGENT_THINKING
    stage: ThinkingStage
    message: str = ""
    timestamp: float = Field(default_factory=time.time)


@register_event
class ExecCommandEvent(BaseEvent):
    """Request for the command runtime to run one command."""

    event_type = ChannelEventType.AGENT_EXEC_CMD
    session_id: str
    command: str
    args: list[str] = Field(default_factory=list)
    timestamp: float = Field(default_factory=time.time)


@register_event
class RuntimeOutputEvent(BaseEvent):
    """A chunk of streamed command output."""

    event_type = ChannelEventType.RUNTIME_OUTPUT
    session_id: str
    stream: OutputStream
    data: str


@register_event
class RuntimeExitEvent(BaseEvent):
    """Terminal event of one command session."""

    event_type = ChannelEventType.RUNTIME_EXIT
    session_id: str
    exit_code: int


@register_event
class AgentSpeakEvent(BaseEvent):
    """Spoken-style answer of a completed turn."""

    event_type = ChannelEventType.AGENT_SPEAK
    content: str
    mode: Literal["tts", "text", "both"] = "both"
    timestamp: float = Field(default_factory=time.time)
