"""Errors raised by the event channel."""


class EventError(Exception):
    """Base exception for event channel errors."""


class EventTypeError(EventError):
    """An event type name is malformed or unusable for the requested operation."""


class SchemaNotFoundError(EventTypeError):
    """Emit was given an event type with no registered schema."""

    def __init__(self, event_type: str) -> None:
        super().__init__(f"No schema registered for event type: {event_type}")
        self.event_type = event_type


class EventValidationError(EventError):
    """An emitted payload does not match its event schema."""

    def __init__(self, event_type: str, detail: str) -> None:
        super().__init__(f"Invalid payload for {event_type}: {detail}")
        self.event_type = event_type
