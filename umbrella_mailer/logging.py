"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from .message import BaseMessage


def setup_logging(*, json: bool = True, level: str = "INFO") -> None:
    """Configure structlog for processes that compose or send mail.

    Parameters
    ----------
    json:
        If *True* (the default), output JSON lines.  If *False*, use the
        human-friendly console renderer, which is what the preview CLI uses.
    level:
        Root log level name (e.g. ``"DEBUG"``, ``"INFO"``).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # stderr keeps stdout free for CLI output such as previewed MIME text
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper())


def message_log_context(message: BaseMessage) -> AbstractContextManager:
    """Bind the message's identity to every log event emitted inside the block.

    Usage::

        with message_log_context(message):
            logger.info("message_sent")   # includes message_class / message_id
    """
    context: dict[str, object] = {"message_class": type(message).__name__}
    message_id = getattr(message, "message_id", None)
    if message_id:
        context["message_id"] = message_id
    return structlog.contextvars.bound_contextvars(**context)
