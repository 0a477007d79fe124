"""Runtime logging helpers."""

from __future__ import annotations

import contextvars
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from logging import Handler
from typing import Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

_DEFAULT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[turn]} | {message}"
_CONFIGURED_PROFILE: LogProfile | None = None

_current_turn: contextvars.ContextVar[str] = contextvars.ContextVar("dualtrack_turn", default="-")


def current_turn() -> str:
    """Return the id of the turn being processed in this context."""
    return _current_turn.get()


@contextmanager
def turn_context(turn_id: str) -> Iterator[None]:
    """Bind a turn id to log records emitted inside the block."""
    token = _current_turn.set(turn_id)
    try:
        yield
    finally:
        _current_turn.reset(token)


def _build_chat_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str = "INFO") -> None:
    """Configure process-level logging once per profile."""

    def inject_context(record: loguru.Record) -> None:
        record["extra"]["turn"] = current_turn()

    global _CONFIGURED_PROFILE
    if profile == _CONFIGURED_PROFILE:
        return

    logger.remove()
    if profile == "chat":
        logger.add(
            _build_chat_handler(),
            level=level.upper(),
            format="{message}",
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=level.upper(),
            format=_DEFAULT_FORMAT,
            backtrace=False,
            diagnose=False,
        )
    logger.configure(patcher=inject_context)
    _CONFIGURED_PROFILE = profile
