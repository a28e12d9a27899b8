"""Structured logging for the dungeon turn engine.

Every engine module logs through structlog with key/value context (turn,
actor, position) rather than formatted strings. Sessions scope their
``session_id`` and game mode onto each entry with ``session_context`` so
output from several sessions in one process stays attributable.

Example:
    >>> from dungeon_engine.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Turn applied", turn=3, events=2)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from dungeon_engine.core.config import Settings


ENGINE_NAME = "dungeon_engine"


def add_engine_name(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Tag each entry with the engine name unless a caller already set one."""
    event_dict.setdefault("app", ENGINE_NAME)
    return event_dict


def build_processors(*, json_format: bool) -> list[Processor]:
    """Processor chain shared by console and JSON output.

    Args:
        json_format: Render entries as JSON lines instead of console text.

    Returns:
        The structlog processors, renderer last.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_engine_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
) -> None:
    """Configure engine-wide logging.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, render entries as JSON lines.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(json_format=json_format),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=numeric_level,
        stream=sys.stdout,
        force=True,
    )


def configure_from_settings(settings: Settings) -> None:
    """Configure logging from ``log_level`` and ``log_json`` settings.

    Debug mode forces DEBUG output regardless of ``log_level``.
    """
    level = "DEBUG" if settings.debug else settings.log_level
    configure_logging(level=level, json_format=settings.log_json)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger, typically with ``__name__``."""
    return structlog.get_logger(name)


@contextmanager
def session_context(session_id: str, **kwargs: Any) -> Iterator[None]:
    """Attach a session's identity to every entry logged inside the block.

    The previous context is restored on exit, so nested or interleaved
    sessions never leak their identity into each other's entries.

    Args:
        session_id: Identity of the session.
        **kwargs: Further key-value pairs, such as the game mode.
    """
    with structlog.contextvars.bound_contextvars(session_id=session_id, **kwargs):
        yield


__all__ = [
    "ENGINE_NAME",
    "build_processors",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "session_context",
]
