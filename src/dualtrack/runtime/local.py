"""Local subprocess runtime answering command requests from the channel."""

from __future__ import annotations

import asyncio
import codecs
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from ..events import (
    ChannelEventType,
    EventChannel,
    EventEnvelope,
    ExecCommandEvent,
    OutputStream,
    RuntimeExitEvent,
    RuntimeOutputEvent,
    Unsubscribe,
)

BLOCKED_EXIT_CODE = 126
SPAWN_FAILED_EXIT_CODE = 127
READ_CHUNK_SIZE = 4096


class LocalCommandRuntime:
    """Run requested commands as subprocesses of this process.

    Output is streamed back as ``runtime.output`` chunks and every accepted
    request ends with exactly one ``runtime.exit``, all tagged with the
    request's session id. Only executables in ``allowed_commands`` are spawned.
    """

    def __init__(
        self,
        channel: EventChannel,
        workspace: Path,
        *,
        allowed_commands: Iterable[str] = ("npm", "ls", "node"),
    ) -> None:
        self._channel = channel
        self._workspace = workspace
        self._allowed = frozenset(allowed_commands)
        self._unsubscribe: Unsubscribe | None = None
        self._tasks: set[asyncio.Task[int]] = set()

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._channel.subscribe(ChannelEventType.AGENT_EXEC_CMD, self._on_request)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_idle(self) -> None:
        """Wait for every command started so far to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_request(self, envelope: EventEnvelope) -> None:
        request = ExecCommandEvent.model_validate(envelope.payload)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error("runtime.no_event_loop session={} command={}", request.session_id, request.command)
            return
        task = loop.create_task(self.run(request))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def run(self, request: ExecCommandEvent) -> int:
        """Execute one request and report its output and exit on the channel."""
        session_id = request.session_id
        if request.command not in self._allowed:
            logger.warning("runtime.blocked session={} command={}", session_id, request.command)
            self._output(session_id, "stderr", f"Command blocked: {request.command}\n")
            return self._exit(session_id, BLOCKED_EXIT_CODE)

        logger.info("runtime.spawn session={} argv={}", session_id, [request.command, *request.args])
        try:
            # Commands come from the allow-list above and run without a shell.
            process = await asyncio.create_subprocess_exec(
                request.command,
                *request.args,
                cwd=self._workspace,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.warning("runtime.spawn_failed session={} error={}", session_id, exc)
            self._output(session_id, "stderr", f"{exc}\n")
            return self._exit(session_id, SPAWN_FAILED_EXIT_CODE)

        streams: tuple[tuple[OutputStream, asyncio.StreamReader | None], ...] = (
            ("stdout", process.stdout),
            ("stderr", process.stderr),
        )
        await asyncio.gather(*(self._pump(session_id, name, reader) for name, reader in streams if reader is not None))
        return self._exit(session_id, await process.wait())

    async def _pump(self, session_id: str, stream: OutputStream, reader: asyncio.StreamReader) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while chunk := await reader.read(READ_CHUNK_SIZE):
            text = decoder.decode(chunk)
            if text:
                self._output(session_id, stream, text)
        tail = decoder.decode(b"", final=True)
        if tail:
            self._output(session_id, stream, tail)

    def _output(self, session_id: str, stream: OutputStream, data: str) -> None:
        self._channel.emit(RuntimeOutputEvent(session_id=session_id, stream=stream, data=data), source="runtime")

    def _exit(self, session_id: str, exit_code: int) -> int:
        logger.info("runtime.exit session={} exit_code={}", session_id, exit_code)
        self._channel.emit(RuntimeExitEvent(session_id=session_id, exit_code=exit_code), source="runtime")
        return exit_code
