"""Trace recorder: keeps the recent channel traffic for export."""

from __future__ import annotations

from collections import deque
from pathlib import Path

from loguru import logger
from pydantic import BaseModel

from .events import WILDCARD, EventChannel, EventEnvelope, Unsubscribe


class TraceEntry(BaseModel):
    envelope: EventEnvelope


class TraceRecorder:
    """Observe every event on a channel and keep the last ``limit`` of them."""

    def __init__(self, channel: EventChannel, *, limit: int = 500, path: Path | None = None) -> None:
        self._entries: deque[TraceEntry] = deque(maxlen=limit)
        self._path = path
        self._unsubscribe: Unsubscribe | None = channel.subscribe(WILDCARD, self._record)

    def entries(self) -> list[TraceEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def export(self, path: Path) -> int:
        """Write the buffered entries as JSON lines; returns how many were written."""
        entries = self.entries()
        with path.open("w", encoding="utf-8") as handle:
            for entry in entries:
                handle.write(entry.model_dump_json() + "\n")
        return len(entries)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _record(self, envelope: EventEnvelope) -> None:
        entry = TraceEntry(envelope=envelope)
        self._entries.append(entry)
        if self._path is None:
            return
        try:
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(entry.model_dump_json() + "\n")
        except OSError as exc:
            logger.warning("trace.persist_failed path={} error={}", self._path, exc)
