"""WSGI middleware attaching per-request trace context taken from propagation headers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)

SKIP_PATHS = frozenset({"/metrics", "/livez", "/readyz", "/favicon.ico", "/ping", "/monitor"})
SPAN_ENVIRON_KEY = "ucsfe.span"
UNKNOWN = "unknown"


def _header(environ: dict[str, Any], name: str) -> str | None:
    return environ.get("HTTP_" + name.upper().replace("-", "_"))


def _is_visible(value: str) -> bool:
    return all(ch == "\t" or " " <= ch <= "~" for ch in value)


def _text(value: str | None) -> str:
    if value is None or not _is_visible(value):
        return UNKNOWN
    return value


def extract_trace_context(environ: dict[str, Any]) -> dict[str, str]:
    """Span fields for the request: name, method, target, trace id and span id.

    The trace id is the first present of ``traceparent``, ``X-Trace-Id`` and
    ``uber-trace-id``; the span id comes from ``X-Span-Id``. Missing or
    non-text values become ``"unknown"``.
    """
    method = environ.get("REQUEST_METHOD", "GET")
    path = (environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")) or "/"
    raw_trace = next(
        (
            value
            for value in (
                _header(environ, "traceparent"),
                _header(environ, "x-trace-id"),
                _header(environ, "uber-trace-id"),
            )
            if value is not None
        ),
        None,
    )
    return {
        "otel.name": f"{method} {path}",
        "http.method": method,
        "http.target": path,
        "trace_id": _text(raw_trace),
        "span_id": _text(_header(environ, "x-span-id")),
    }


class TraceMiddleware:
    """Puts the request's span fields in the environ under ``SPAN_ENVIRON_KEY``."""

    def __init__(self, app: Callable[..., Iterable[bytes]]) -> None:
        self.app = app

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]):
        path = (environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "")) or "/"
        if path in SKIP_PATHS:
            return self.app(environ, start_response)
        span = extract_trace_context(environ)
        environ[SPAN_ENVIRON_KEY] = span
        logger.debug(
            "http_request %s",
            span["otel.name"],
            extra={"trace_id": span["trace_id"], "span_id": span["span_id"]},
        )
        return self.app(environ, start_response)