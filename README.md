# ucsfe

Building blocks for a player self-service password reset front end.
Everything is plain Python with no runtime dependencies.

## What is inside

- **WSGI middleware** (`ucsfe.middleware`)
  - `ucsfe.middleware.error_handler.ErrorHandlerMiddleware`: when the wrapped
    application answers with a status outside 100–399 and its `Content-Type`
    is not JSON, the body is replaced with
    `{"success": false, "errorCode": ..., "message": ...}`. The pair comes
    from `map_status(status)`, e.g. `404` gives
    `("ucs-fe.non.not_found", "resource not found")`.
  - `ucsfe.middleware.recover.RecoverMiddleware`: an exception raised before
    the response starts is logged and answered with `500` and
    `{"success": false, "errorCode": "ucs-fe.non.internal_error", "message": "Internal server error"}`.
  - `ucsfe.middleware.trace.TraceMiddleware`: stores the request's span
    fields (from `extract_trace_context`) in `environ["ucsfe.span"]`. The
    trace id is taken from `traceparent`, `X-Trace-Id` or `uber-trace-id`,
    the span id from `X-Span-Id`, and `"unknown"` is used when absent.
    `/metrics`, `/livez`, `/readyz`, `/favicon.ico`, `/ping` and `/monitor`
    are passed through untouched.
- **Logging** (`ucsfe.logs`): `parse_level`, `debug`/`info`/`warn`/`error`,
  `fatal` (logs, then raises `SystemExit(1)`), `info_ctx`/`warn_ctx`/`error_ctx`
  with optional `user_id` and `trace_id`, `any_field`, `flag`, and the
  `behavior_info`/`behavior_warn`/`behavior_error` calls that write to the
  `ucsfe.behavior` logger.
- **Models** (`ucsfe.model`): `MerchantRule`, `MerchantRuleConfig` (with
  `parse_questions()`), `Question`, `QuestionInfo`, `DropdownItem`,
  `TemplateField`, `TemplateValue`, `TemplateFieldsInfo`, `ValidationRecord`
  and `QA`, with JSON-shaped `from_dict` / `to_dict` where the data travels
  as JSON.
- **Kafka settings** (`ucsfe.kafka`): `KafkaConfig.from_mapping` builds
  `ProducerConfig` and `ConsumerConfig` from a parsed table;
  `effective_topic_config(topic)` merges per-topic overrides into the global
  defaults. Topic-name constants and the `TaskUpdate`, `SendProp` and
  `BuyErrorInfo` payloads are here too.
- **Helpers**
  - `ucsfe.numeric`: `round2`, `round_to`, `parse_decimal_str`, `format_decimal4`.
  - `ucsfe.conv`: `string_to_int_default`, `string_to_float_default` and
    null-safe helpers for strings, integers and datetimes.
  - `ucsfe.concurrency`: `spawn_safe`, `LockCounter`, `lock_timeout`,
    `TaskPool` and `get_pool`.
  - `ucsfe.memstats`: `read_proc_mem`, `log_stats`, `start_mem_stats`.
  - `ucsfe.observability`: `FlightRecorder`, which writes a JSON snapshot to
    `flight_trace.out` on `SIGUSR1`/`SIGUSR2` or on `dump_now()`.
  - `ucsfe.constants`: shared key names, limits and pool defaults.

## Install

```
pip install .
```

## Example

```python
from ucsfe.middleware.error_handler import ErrorHandlerMiddleware
from ucsfe.middleware.recover import RecoverMiddleware
from ucsfe.middleware.trace import TraceMiddleware

def app(environ, start_response):
    start_response("200 OK", [("Content-Type", "application/json")])
    return [b'{"success": true}']

wrapped = TraceMiddleware(ErrorHandlerMiddleware(RecoverMiddleware(app)))
```

The numeric helpers:

```python
from ucsfe.numeric import round2, format_decimal4

round2(1.234)           # 1.23
format_decimal4(1.23)   # "1.2300"
```

## What it does not do

- It has no Prometheus metrics: no counters, gauges or histograms, no
  per-request metrics middleware and no `/metrics` endpoint or server.
- It has no per-request access-log middleware; the behavior log calls in
  `ucsfe.logs` are there for an application to use itself.
- It does not talk to a Kafka broker. `Producer.produce` and `produce_to`
  raise `ProducerNotInitializedError`, and `Consumer.subscribe_topic` raises
  `ConsumerNotInitializedError`.
- It has no HTTP server, command-line entry point or database access.

## Tests

```
pip install .[test]
pytest
```