"""Logging setup shared by ``querydeck console`` and ``querydeck up``."""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console
from rich.logging import RichHandler

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

_SHUTDOWN_NOISE = (asyncio.CancelledError, KeyboardInterrupt, GeneratorExit)


def is_shutdown_noise(exc: BaseException) -> bool:
    """True for Ctrl-C and task cancellation, including groups made only of those."""
    if isinstance(exc, BaseExceptionGroup):
        return all(is_shutdown_noise(inner) for inner in exc.exceptions)
    return isinstance(exc, _SHUTDOWN_NOISE)


class NoisyShutdownFilter(logging.Filter):
    """Drop records whose only payload is a shutdown traceback."""

    def filter(self, record: logging.LogRecord) -> bool:
        exc = record.exc_info[1] if record.exc_info else None
        return exc is None or not is_shutdown_noise(exc)


def configure_logging(
    verbose: bool,
    *,
    console: Console,
    quiet_level: int = logging.WARNING,
    route_uvicorn: bool = False,
) -> RichHandler:
    """Install one RichHandler on the root logger.

    ``verbose`` switches to DEBUG; otherwise ``quiet_level`` applies. With
    ``route_uvicorn`` the server's own loggers drop their handlers and propagate here.
    """
    handler = RichHandler(
        console=console, rich_tracebacks=False, markup=False, show_path=verbose
    )
    handler.addFilter(NoisyShutdownFilter())
    logging.basicConfig(
        level=logging.DEBUG if verbose else quiet_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    if route_uvicorn:
        for name in UVICORN_LOGGERS:
            server_logger = logging.getLogger(name)
            server_logger.handlers.clear()
            server_logger.propagate = True
    return handler
