import pytest

from ucsfe.middleware.trace import SPAN_ENVIRON_KEY, TraceMiddleware, extract_trace_context


def env(path="/api/x", method="GET", **headers):
    return {"REQUEST_METHOD": method, "PATH_INFO": path, "SCRIPT_NAME": "", **headers}


def test_traceparent_is_used_whole():
    value = "00-abc-def-01"
    ctx = extract_trace_context(env(HTTP_TRACEPARENT=value))
    assert ctx["trace_id"] == value
    assert ctx["span_id"] == "unknown"


def test_traceparent_takes_priority_over_other_headers():
    ctx = extract_trace_context(
        env(HTTP_TRACEPARENT="tp", HTTP_X_TRACE_ID="xt", HTTP_UBER_TRACE_ID="ub")
    )
    assert ctx["trace_id"] == "tp"


def test_falls_back_to_x_trace_id_then_uber():
    assert extract_trace_context(env(HTTP_X_TRACE_ID="xt", HTTP_UBER_TRACE_ID="ub"))[
        "trace_id"
    ] == "xt"
    assert extract_trace_context(env(HTTP_UBER_TRACE_ID="ub"))["trace_id"] == "ub"


def test_missing_headers_give_unknown():
    ctx = extract_trace_context(env())
    assert ctx["trace_id"] == "unknown"
    assert ctx["span_id"] == "unknown"


def test_span_id_header_and_names():
    ctx = extract_trace_context(env(path="/api/login", method="POST", HTTP_X_SPAN_ID="s1"))
    assert ctx["span_id"] == "s1"
    assert ctx["otel.name"] == "POST /api/login"
    assert ctx["http.method"] == "POST"
    assert ctx["http.target"] == "/api/login"


def test_non_text_header_becomes_unknown():
    ctx = extract_trace_context(env(HTTP_TRACEPARENT="caf\xe9", HTTP_X_TRACE_ID="xt"))
    assert ctx["trace_id"] == "unknown"


def _app(environ, start_response):
    start_response("200 OK", [])
    return [b"body"]


def test_middleware_attaches_span_and_passes_response():
    statuses = []
    environ = env(HTTP_X_TRACE_ID="xt")
    result = TraceMiddleware(_app)(environ, lambda s, h, e=None: statuses.append(s))
    assert list(result) == [b"body"]
    assert statuses == ["200 OK"]
    assert environ[SPAN_ENVIRON_KEY]["trace_id"] == "xt"


@pytest.mark.parametrize(
    "path", ["/metrics", "/livez", "/readyz", "/favicon.ico", "/ping", "/monitor"]
)
def test_skip_paths_have_no_span(path):
    environ = env(path=path)
    result = TraceMiddleware(_app)(environ, lambda s, h, e=None: None)
    assert list(result) == [b"body"]
    assert SPAN_ENVIRON_KEY not in environ