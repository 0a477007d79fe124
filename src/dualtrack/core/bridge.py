"""Bridge between the orchestration graph and the command runtime."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Callable
from contextlib import ExitStack

from loguru import logger

from ..config import DEFAULT_COMMAND_TIMEOUT_SECONDS
from ..events import ChannelEventType, EventChannel, EventEnvelope, ExecCommandEvent, Unsubscribe
from .commands import CommandSpec, extract_command
from .state import CommandResult, ToolOutput

EXTRACTION_FAILED_ERROR = "Could not extract command"
TIMEOUT_ERROR = "Command execution timed out"
TIMEOUT_EXIT_CODE = -1


class CommandBridge:
    """Run one command through the runtime and wait for its exit.

    Every request carries a fresh ``session_id``; output and exit events for
    other sessions are ignored, so concurrent commands on a shared channel do
    not mix their streams.
    """

    def __init__(self, channel: EventChannel, *, timeout_seconds: float = DEFAULT_COMMAND_TIMEOUT_SECONDS) -> None:
        self._channel = channel
        self._timeout_seconds = timeout_seconds

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    async def dispatch(self, text: str, *, on_start: Callable[[CommandSpec], None] | None = None) -> ToolOutput:
        """Extract a command from request text and execute it.

        Nothing is emitted when no command can be extracted.
        """
        spec = extract_command(text)
        if spec is None:
            logger.info("bridge.no_command text_len={}", len(text))
            return ToolOutput(success=False, data=None, error=EXTRACTION_FAILED_ERROR)
        if on_start is not None:
            on_start(spec)
        return await self.execute(spec)

    async def execute(self, spec: CommandSpec) -> ToolOutput:
        session_id = uuid.uuid4().hex
        exited: asyncio.Future[int] = asyncio.get_running_loop().create_future()
        stdout: list[str] = []
        stderr: list[str] = []
        subscriptions: list[Unsubscribe] = []

        def release() -> None:
            for unsubscribe in subscriptions:
                unsubscribe()

        def on_output(envelope: EventEnvelope) -> None:
            payload = envelope.payload
            if payload.get("session_id") != session_id or exited.done():
                return
            if payload.get("stream") == "stderr":
                stderr.append(str(payload.get("data", "")))
            else:
                stdout.append(str(payload.get("data", "")))

        def on_exit(envelope: EventEnvelope) -> None:
            payload = envelope.payload
            if payload.get("session_id") != session_id or exited.done():
                return
            exited.set_result(int(payload.get("exit_code", TIMEOUT_EXIT_CODE)))
            # The exit event ends the session; later output is not part of the result.
            release()

        with ExitStack() as cleanup:
            cleanup.callback(release)
            subscriptions.append(self._channel.subscribe(ChannelEventType.RUNTIME_OUTPUT, on_output))
            subscriptions.append(self._channel.subscribe(ChannelEventType.RUNTIME_EXIT, on_exit))

            logger.info("bridge.exec session={} command={}", session_id, spec.display)
            self._channel.emit(
                ExecCommandEvent(session_id=session_id, command=spec.command, args=list(spec.args)),
                source="agent",
            )
            try:
                exit_code = await asyncio.wait_for(exited, timeout=self._timeout_seconds)
            except TimeoutError:
                logger.warning("bridge.timeout session={} after={}s", session_id, self._timeout_seconds)
                return ToolOutput(
                    success=False,
                    data=CommandResult(stdout="".join(stdout), stderr="".join(stderr), exit_code=TIMEOUT_EXIT_CODE),
                    error=TIMEOUT_ERROR,
                )

        logger.info("bridge.exit session={} exit_code={}", session_id, exit_code)
        return ToolOutput(
            success=exit_code == 0,
            data=CommandResult(stdout="".join(stdout), stderr="".join(stderr), exit_code=exit_code),
        )
