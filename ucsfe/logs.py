"""Logging API: level parsing, plain and context-aware log calls, behavior log lines."""

from __future__ import annotations

import logging
from typing import Any, NoReturn

logger = logging.getLogger("ucsfe")
behavior_logger = logging.getLogger("ucsfe.behavior")

_LEVELS = {
    "debug": logging.DEBUG,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str) -> int:
    """Map a level name to a logging level; anything unknown is INFO."""
    return _LEVELS.get(level.lower(), logging.INFO)


def debug(msg: str) -> None:
    """Log at DEBUG."""
    logger.debug(msg)


def info(msg: str) -> None:
    """Log at INFO."""
    logger.info(msg)


def warn(msg: str) -> None:
    """Log at WARNING."""
    logger.warning(msg)


def error(msg: str) -> None:
    """Log at ERROR."""
    logger.error(msg)


def fatal(msg: str) -> NoReturn:
    """Log at ERROR, then exit the process with status 1."""
    logger.error(msg, extra={"fatal": True})
    raise SystemExit(1)


def _context(user_id: str | None, trace_id: str | None) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if user_id is not None:
        fields["user_id"] = user_id
    if trace_id is not None:
        fields["trace_id"] = trace_id
    return fields


def info_ctx(msg: str, user_id: str | None = None, trace_id: str | None = None) -> None:
    """Log at INFO with optional user and trace identifiers attached."""
    logger.info(msg, extra=_context(user_id, trace_id))


def warn_ctx(msg: str, user_id: str | None = None, trace_id: str | None = None) -> None:
    """Log at WARNING with optional user and trace identifiers attached."""
    logger.warning(msg, extra=_context(user_id, trace_id))


def error_ctx(msg: str, user_id: str | None = None, trace_id: str | None = None) -> None:
    """Log at ERROR with optional user and trace identifiers attached."""
    logger.error(msg, extra=_context(user_id, trace_id))


def any_field(key: str, value: Any) -> str:
    """Render a ``key=value`` log field."""
    return f"{key}={value}"


def flag(value: str) -> str:
    """Render a ``flag=value`` log field."""
    return f"flag={value}"


def behavior_info(msg: str) -> None:
    """Write an INFO API-request line to the behavior log."""
    behavior_logger.info(msg)


def behavior_warn(msg: str) -> None:
    """Write a WARNING API-request line to the behavior log."""
    behavior_logger.warning(msg)


def behavior_error(msg: str) -> None:
    """Write an ERROR API-request line to the behavior log."""
    behavior_logger.error(msg)