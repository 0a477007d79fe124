"""Event schema registry and management."""

from __future__ import annotations

from .exceptions import SchemaNotFoundError
from .models import BaseEvent
from .types import EventType, normalize_event_type


class EventSchemaRegistry:
    """Registry for event schemas and validation."""

    def __init__(self) -> None:
        self._schemas: dict[str, type[BaseEvent]] = {}

    def register(self, event_class: type[BaseEvent]) -> type[BaseEvent]:
        """Register an event class.

        Args:
            event_class: The event class to register

        Returns:
            The same event class (for decorator usage)

        Raises:
            ValueError: If event type is already registered with different class
        """
        event_type = event_class.get_event_type_value()

        existing = self._schemas.get(event_type)
        if existing is not None and existing is not event_class:
            msg = (
                f"Event type '{event_type}' already registered with different class: "
                f"{existing.__name__} vs {event_class.__name__}"
            )
            raise ValueError(msg)
        self._schemas[event_type] = event_class
        return event_class

    def get_schema(self, event_type: EventType) -> type[BaseEvent] | None:
        """Get the schema for an event type, or None if not found."""
        return self._schemas.get(normalize_event_type(event_type))

    def get_schema_or_raise(self, event_type: EventType) -> type[BaseEvent]:
        """Get the schema for an event type.

        Raises:
            SchemaNotFoundError: If schema not found
        """
        schema = self.get_schema(event_type)
        if schema is None:
            raise SchemaNotFoundError(normalize_event_type(event_type))
        return schema

    def list_schemas(self) -> dict[str, type[BaseEvent]]:
        """List all registered schemas."""
        return self._schemas.copy()


_global_registry = EventSchemaRegistry()


def register_event(event_class: type[BaseEvent]) -> type[BaseEvent]:
    """Register an event class with the global schema registry.

    Event schemas are static declarations, so one registry is shared by every
    channel in the process.
    """
    return _global_registry.register(event_class)


def get_event_schema(event_type: EventType) -> type[BaseEvent] | None:
    return _global_registry.get_schema(event_type)


def get_event_schema_or_raise(event_type: EventType) -> type[BaseEvent]:
    return _global_registry.get_schema_or_raise(event_type)


def get_registry() -> EventSchemaRegistry:
    """Get the global event schema registry."""
    return _global_registry
