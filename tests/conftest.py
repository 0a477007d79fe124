from __future__ import annotations

import asyncio
import os
from typing import Any

import pytest

from dualtrack.events import ChannelEventType, EventChannel, EventEnvelope, RuntimeExitEvent, RuntimeOutputEvent


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("DUALTRACK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def channel() -> EventChannel:
    return EventChannel()


class FakeRuntime:
    """Answers exec requests on the next loop iteration with canned output."""

    def __init__(
        self,
        channel: EventChannel,
        *,
        stdout: str | None = "",
        stderr: str = "",
        exit_code: int = 0,
        respond: bool = True,
    ) -> None:
        self.channel = channel
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        self.respond = respond
        self.requests: list[dict[str, Any]] = []
        self.unsubscribe = channel.subscribe(ChannelEventType.AGENT_EXEC_CMD, self._on_request)

    def _on_request(self, envelope: EventEnvelope) -> None:
        self.requests.append(dict(envelope.payload))
        if self.respond:
            asyncio.get_running_loop().call_soon(self._reply, envelope.payload)

    def _reply(self, request: dict[str, Any]) -> None:
        session_id = request["session_id"]
        stdout = self.stdout if self.stdout is not None else f"out:{request['command']}"
        if stdout:
            self.channel.emit(RuntimeOutputEvent(session_id=session_id, stream="stdout", data=stdout), source="runtime")
        if self.stderr:
            self.channel.emit(
                RuntimeOutputEvent(session_id=session_id, stream="stderr", data=self.stderr), source="runtime"
            )
        self.channel.emit(RuntimeExitEvent(session_id=session_id, exit_code=self.exit_code), source="runtime")


@pytest.fixture
def fake_runtime(channel: EventChannel) -> FakeRuntime:
    return FakeRuntime(channel)


@pytest.fixture
def make_runtime(channel: EventChannel):
    def factory(**kwargs: Any) -> FakeRuntime:
        return FakeRuntime(channel, **kwargs)

    return factory
