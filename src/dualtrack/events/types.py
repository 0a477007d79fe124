"""Event type definitions and utilities."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .models import EventEnvelope

EventType = Union[str, Enum]
EventHandler = Callable[["EventEnvelope"], None]
Unsubscribe = Callable[[], None]

WILDCARD = "*"


class DomainEventType(str, Enum):
    """Base class for domain event types with standardized naming.

    Event types follow the pattern 'domain.action'.
    """


class ChannelEventType(DomainEventType):
    """Events exchanged between the orchestrator, the command runtime and the UI."""

    AGENT_THINKING = "agent.thinking"
    AGENT_EXEC_CMD = "agent.exec_cmd"
    AGENT_SPEAK = "agent.speak"
    RUNTIME_OUTPUT = "runtime.output"
    RUNTIME_EXIT = "runtime.exit"


def normalize_event_type(event_type: EventType) -> str:
    """Normalize event type to string representation.

    Args:
        event_type: Event type as string or Enum

    Returns:
        Normalized string representation
    """
    if isinstance(event_type, Enum):
        return str(event_type.value)
    return str(event_type)


def normalize_event_types(event_types: EventType | Iterable[EventType]) -> list[str]:
    """Normalize one or many event types, dropping duplicates but keeping order."""
    if isinstance(event_types, (str, Enum)):
        return [normalize_event_type(event_types)]
    normalized: list[str] = []
    for event_type in event_types:
        value = normalize_event_type(event_type)
        if value not in normalized:
            normalized.append(value)
    return normalized


def is_valid_event_type(event_type: EventType) -> bool:
    """Validate event type format.

    Args:
        event_type: Event type to validate

    Returns:
        True if valid, False otherwise
    """
    normalized = normalize_event_type(event_type)
    return normalized == WILDCARD or bool(normalized and "." in normalized)
