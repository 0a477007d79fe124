"""Event model definitions."""

from __future__ import annotations

import time
from abc import ABC
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from .types import EventType, normalize_event_type

EventSource = Literal["ui", "agent", "system", "runtime"]


class BaseEvent(BaseModel, ABC):
    """Base class for all typed events in the system.

    All events must inherit from this class and define their event_type.
    """

    event_type: ClassVar[EventType]

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def get_event_type_value(cls) -> str:
        """Get the string value of the event type."""
        return normalize_event_type(cls.event_type)


class EventEnvelope(BaseModel):
    """One emission on the channel, as delivered to subscribers and kept in history."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    source: EventSource = "system"
    timestamp: float = Field(default_factory=time.time)
