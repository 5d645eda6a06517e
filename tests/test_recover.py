import json
import logging
from wsgiref.util import setup_testing_defaults

import pytest

from ucsfe.middleware.recover import RecoverMiddleware


def call(app, method="GET", path="/"):
    environ = {}
    setup_testing_defaults(environ)
    environ["REQUEST_METHOD"] = method
    environ["PATH_INFO"] = path
    seen = {}
    written = []

    def start_response(status, headers, exc_info=None):
        seen["status"] = status
        seen["headers"] = dict(headers)
        return written.append

    result = app(environ, start_response)
    try:
        chunks = list(result)
    finally:
        close = getattr(result, "close", None)
        if close:
            close()
    return seen["status"], seen["headers"], b"".join(written + chunks)


EXPECTED = {
    "success": False,
    "errorCode": "ucs-fe.non.internal_error",
    "message": "Internal server error",
}


def test_exception_becomes_500():
    def app(environ, start_response):
        raise ValueError("kaboom")

    status, headers, body = call(RecoverMiddleware(app))
    assert status == "500 Internal Server Error"
    assert headers["Content-Type"] == "application/json"
    assert json.loads(body) == EXPECTED


def test_exception_is_logged(caplog):
    def app(environ, start_response):
        raise ValueError("kaboom")

    with caplog.at_level(logging.ERROR, logger="ucsfe.middleware.recover"):
        call(RecoverMiddleware(app), method="POST", path="/boom")
    assert "[PANIC] POST /boom => kaboom" in caplog.messages


def test_empty_message_logged_as_unknown(caplog):
    def app(environ, start_response):
        raise RuntimeError()

    with caplog.at_level(logging.ERROR, logger="ucsfe.middleware.recover"):
        call(RecoverMiddleware(app), path="/x")
    assert "[PANIC] GET /x => unknown panic" in caplog.messages


def test_generator_failing_before_start():
    def app(environ, start_response):
        raise KeyError("missing")
        yield b""

    status, _, body = call(RecoverMiddleware(app))
    assert status.startswith("500")
    assert json.loads(body) == EXPECTED


def test_failure_after_start_response_before_body():
    def app(environ, start_response):
        start_response("200 OK", [("Content-Type", "text/plain")])
        raise ValueError("late")

    status, _, body = call(RecoverMiddleware(app))
    assert status.startswith("500")
    assert json.loads(body) == EXPECTED


def test_normal_response_passes_through():
    def app(environ, start_response):
        write = start_response("201 Created", [("Content-Type", "text/plain")])
        write(b"a")
        return [b"b", b"c"]

    status, headers, body = call(RecoverMiddleware(app))
    assert (status, headers["Content-Type"], body) == ("201 Created", "text/plain", b"abc")


def test_base_exception_propagates():
    def app(environ, start_response):
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        call(RecoverMiddleware(app))