"""WSGI middleware that turns an unhandled exception into a 500 JSON response."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Iterator
from itertools import islice
from typing import Any

logger = logging.getLogger(__name__)

_BODY = json.dumps(
    {
        "success": False,
        "errorCode": "ucs-fe.non.internal_error",
        "message": "Internal server error",
    },
    separators=(",", ":"),
).encode("utf-8")


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


def _close(result: Iterable[bytes] | None) -> None:
    close = getattr(result, "close", None)
    if close is not None:
        close()


class RecoverMiddleware:
    """Logs an exception raised before the response starts and answers 500 with JSON."""

    def __init__(self, app: Callable[..., Iterable[bytes]]) -> None:
        self.app = app

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]):
        method = environ.get("REQUEST_METHOD", "GET")
        path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "") or "/"
        capture = _Capture()
        result: Iterable[bytes] | None = None
        try:
            result = self.app(environ, capture.start_response)
            iterator = iter(result)
            head = list(islice(iterator, 1)) if capture.status is None else []
            if capture.status is None:
                raise RuntimeError("application did not call start_response")
        except Exception as exc:
            _close(result)
            message = str(exc) or "unknown panic"
            logger.error("[PANIC] %s %s => %s", method, path, message, exc_info=exc)
            start_response(
                "500 Internal Server Error",
                [("Content-Type", "application/json"), ("Content-Length", str(len(_BODY)))],
            )
            return [_BODY]
        except BaseException:
            _close(result)
            raise

        write = start_response(capture.status, capture.headers, capture.exc_info)
        for chunk in capture.buffered:
            write(chunk)
        capture.sink = write
        return _Body(head, iterator, result)