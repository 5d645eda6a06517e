"""WSGI middleware that wraps non-JSON error responses in the standard JSON envelope."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Iterator
from itertools import islice
from typing import Any

logger = logging.getLogger(__name__)

_STATUS_MAP: dict[int, tuple[str, str]] = {
    400: ("ucs-fe.non.bad_request", "bad request"),
    401: ("ucs-fe.non.unauthorized", "unauthorized"),
    403: ("ucs-fe.non.forbidden", "forbidden"),
    404: ("ucs-fe.non.not_found", "resource not found"),
    405: ("ucs-fe.non.method_not_allowed", "method not allowed"),
    408: ("ucs-fe.non.request_timeout", "request timed out"),
    429: ("ucs-fe.non.too_many_requests", "rate limit exceeded"),
    500: ("ucs-fe.non.unknown_err", "internal server error"),
    503: ("ucs-fe.non.service_unavailable", "service unavailable"),
    504: ("ucs-fe.non.gateway_timeout", "gateway timeout"),
}
_FALLBACK = ("ucs-fe.non.unknown_err", "unknown error")


def map_status(status: int) -> tuple[str, str]:
    """Return the ``(errorCode, message)`` pair for an HTTP status code."""
    return _STATUS_MAP.get(int(status), _FALLBACK)


class _Capture:
    def __init__(self) -> None:
        self.status: str | None = None
        self.headers: list[tuple[str, str]] = []
        self.exc_info: Any = None
        self.buffered: list[bytes] = []
        self.sink: Callable[[bytes], Any] = self.buffered.append

    def start_response(self, status: str, headers: list[tuple[str, str]], exc_info: Any = None):
        self.status = status
        self.headers = list(headers)
        self.exc_info = exc_info
        return self.write

    def write(self, data: bytes) -> None:
        self.sink(data)


class _Body:
    def __init__(self, head: list[bytes], rest: Iterator[bytes], original: Iterable[bytes]):
        self._head = head
        self._rest = rest
        self._original = original

    def __iter__(self) -> Iterator[bytes]:
        yield from self._head
        yield from self._rest

    def close(self) -> None:
        _close(self._original)


def _close(result: Iterable[bytes]) -> None:
    close = getattr(result, "close", None)
    if close is not None:
        close()


def _content_type(headers: list[tuple[str, str]]) -> str:
    for name, value in headers:
        if name.lower() == "content-type":
            return value
    return ""


class ErrorHandlerMiddleware:
    """Replaces error responses that carry no JSON body with a JSON error envelope."""

    def __init__(self, app: Callable[..., Iterable[bytes]]) -> None:
        self.app = app

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]):
        capture = _Capture()
        result = self.app(environ, capture.start_response)
        try:
            iterator = iter(result)
            head = list(islice(iterator, 1)) if capture.status is None else []
            if capture.status is None:
                raise RuntimeError("application did not call start_response")
        except BaseException:
            _close(result)
            raise

        code = int(capture.status.split(None, 1)[0])
        is_error = not 100 <= code < 400
        if not is_error or "application/json" in _content_type(capture.headers):
            write = start_response(capture.status, capture.headers, capture.exc_info)
            for chunk in capture.buffered:
                write(chunk)
            capture.sink = write
            return _Body(head, iterator, result)

        _close(result)
        error_code, message = map_status(code)
        logger.warning(
            "error_handler: wrapping non-JSON error response status=%s error_code=%s",
            capture.status,
            error_code,
        )
        body = json.dumps(
            {"success": False, "errorCode": error_code, "message": message},
            separators=(",", ":"),
        ).encode("utf-8")
        start_response(
            capture.status,
            [("Content-Type", "application/json"), ("Content-Length", str(len(body)))],
            capture.exc_info,
        )
        return [body]