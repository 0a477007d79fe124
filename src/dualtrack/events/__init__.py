"""Events - typed, synchronous publish/subscribe for one orchestrator.

Public API:
    - EventChannel: publish/subscribe facade with diagnostics history
    - BaseEvent: base class for typed events
    - register_event: decorator registering an event schema
    - ChannelEventType: the event types used by the orchestrator and runtime

Usage:
    from dualtrack.events import ChannelEventType, EventChannel

    channel = EventChannel()
    unsubscribe = channel.subscribe(ChannelEventType.AGENT_THINKING, print)
    channel.emit(ChannelEventType.AGENT_THINKING, {"stage": "started"})
    unsubscribe()
"""

from .catalog import (
    AgentSpeakEvent,
    AgentThinkingEvent,
    ExecCommandEvent,
    OutputStream,
    RuntimeExitEvent,
    RuntimeOutputEvent,
    ThinkingStage,
)
from .channel import EventChannel
from .exceptions import EventError, EventTypeError, EventValidationError, SchemaNotFoundError
from .models import BaseEvent, EventEnvelope, EventSource
from .registry import get_event_schema, get_event_schema_or_raise, register_event
from .types import WILDCARD, ChannelEventType, DomainEventType, EventHandler, EventType, Unsubscribe

__all__ = [  # noqa: RUF022
    # Core classes
    "EventChannel",
    "EventEnvelope",
    "EventSource",
    "BaseEvent",
    "DomainEventType",
    "ChannelEventType",
    # Typed events
    "AgentThinkingEvent",
    "AgentSpeakEvent",
    "ExecCommandEvent",
    "RuntimeOutputEvent",
    "RuntimeExitEvent",
    "ThinkingStage",
    "OutputStream",
    # Registration
    "register_event",
    "get_event_schema",
    "get_event_schema_or_raise",
    # Types
    "EventType",
    "EventHandler",
    "Unsubscribe",
    "WILDCARD",
    # Exceptions
    "EventError",
    "EventTypeError",
    "EventValidationError",
    "SchemaNotFoundError",
]
