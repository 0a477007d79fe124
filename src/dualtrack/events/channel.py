"""EventChannel - typed publish/subscribe with an append-only history."""

from __future__ import annotations

import itertools
import time
from collections import deque
from collections.abc import Iterable, Mapping
from typing import Any

from eventure import Event, EventBus, EventLog
from loguru import logger
from pydantic import ValidationError

from .exceptions import EventTypeError, EventValidationError
from .models import BaseEvent, EventEnvelope, EventSource
from .registry import get_event_schema_or_raise
from .types import WILDCARD, EventHandler, EventType, Unsubscribe, is_valid_event_type, normalize_event_type, normalize_event_types


class _Registration:
    """One subscribe() call. Identity-compared so duplicate handlers stay independent."""

    __slots__ = ("active", "handler")

    def __init__(self, handler: EventHandler) -> None:
        self.handler = handler
        self.active = True


class EventChannel:
    """In-process event channel backed by an eventure bus and log.

    Delivery is synchronous: ``emit`` returns after every subscriber of the
    event type, then every wildcard subscriber, has been called in
    subscription order. Subscribers are snapshotted per emission, so a handler
    registered while an event is being delivered only sees later events, and a
    handler removed during delivery is not called again.
    """

    def __init__(self, *, history_limit: int | None = None) -> None:
        self._log = EventLog()
        self._bus = EventBus(self._log)
        self._bridged_types: set[str] = set()
        self._subscribers: dict[str, list[_Registration]] = {}
        self._history_limit = history_limit
        self._history: deque[EventEnvelope] = deque(maxlen=history_limit)
        self._ids = itertools.count(1)

    @property
    def log(self) -> EventLog:
        """The underlying eventure log."""
        return self._log

    def emit(
        self,
        event: BaseEvent | EventType,
        payload: Mapping[str, Any] | None = None,
        *,
        source: EventSource = "system",
    ) -> EventEnvelope:
        """Record an event and deliver it to current subscribers.

        Args:
            event: A typed event, or a registered event type with ``payload``
            payload: Event data, only used when ``event`` is a type
            source: Which side of the system emitted the event

        Returns:
            The envelope that was recorded and delivered

        Raises:
            SchemaNotFoundError: If an event type has no registered schema
            EventValidationError: If the payload does not match the schema
        """
        typed = event if isinstance(event, BaseEvent) else self._build_event(event, payload)
        envelope = EventEnvelope(
            id=self._next_id(),
            type=typed.get_event_type_value(),
            payload=typed.model_dump(mode="json"),
            source=source,
        )
        self._history.append(envelope)
        self._ensure_bridge(envelope.type)
        self._bus.publish(envelope.type, envelope.model_dump(mode="json"))
        self._trim_log()
        return envelope

    def subscribe(self, event_type: EventType | Iterable[EventType], handler: EventHandler) -> Unsubscribe:
        """Register ``handler`` for one or more event types, or ``"*"`` for all.

        Returns:
            A function removing this registration; calling it again is a no-op
        """
        event_types = normalize_event_types(event_type)
        if not event_types:
            raise EventTypeError("subscribe() needs at least one event type")
        for value in event_types:
            if not is_valid_event_type(value):
                raise EventTypeError(f"Invalid event type: {value!r}")

        registration = _Registration(handler)
        for value in event_types:
            self._subscribers.setdefault(value, []).append(registration)

        def unsubscribe() -> None:
            if not registration.active:
                return
            registration.active = False
            for value in event_types:
                registrations = self._subscribers.get(value)
                if registrations is None:
                    continue
                registrations[:] = [item for item in registrations if item is not registration]
                if not registrations:
                    del self._subscribers[value]

        return unsubscribe

    def history(self) -> list[EventEnvelope]:
        """Every recorded emission, oldest first."""
        return list(self._history)

    def recent(self, count: int) -> list[EventEnvelope]:
        if count <= 0:
            return []
        return list(self._history)[-count:]

    def events_of(self, event_type: EventType) -> list[EventEnvelope]:
        wanted = normalize_event_type(event_type)
        return [envelope for envelope in self._history if envelope.type == wanted]

    def subscriber_count(self, event_type: EventType) -> int:
        return len(self._subscribers.get(normalize_event_type(event_type), ()))

    def subscriber_counts(self) -> dict[str, int]:
        return {event_type: len(registrations) for event_type, registrations in self._subscribers.items()}

    def _build_event(self, event_type: EventType, payload: Mapping[str, Any] | None) -> BaseEvent:
        event_class = get_event_schema_or_raise(event_type)
        try:
            return event_class(**dict(payload or {}))
        except ValidationError as exc:
            raise EventValidationError(normalize_event_type(event_type), str(exc)) from exc

    def _next_id(self) -> str:
        return f"evt_{int(time.time() * 1000)}_{next(self._ids)}"

    def _trim_log(self) -> None:
        # The eventure log is bounded by the same limit as the history.
        if self._history_limit is None:
            return
        overflow = len(self._log.events) - self._history_limit
        if overflow > 0:
            del self._log.events[:overflow]

    def _ensure_bridge(self, event_type: str) -> None:
        # One eventure subscription per type; fan-out happens on our own registry.
        if event_type in self._bridged_types:
            return

        def deliver(event: Event) -> None:
            self._dispatch(EventEnvelope.model_validate(event.data))

        self._bus.subscribe(event_type, deliver)
        self._bridged_types.add(event_type)

    def _dispatch(self, envelope: EventEnvelope) -> None:
        snapshot = [*self._subscribers.get(envelope.type, ()), *self._subscribers.get(WILDCARD, ())]
        for registration in snapshot:
            if not registration.active:
                continue
            try:
                registration.handler(envelope)
            except Exception:
                logger.opt(exception=True).warning("event.handler_failed type={} id={}", envelope.type, envelope.id)
