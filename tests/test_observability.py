import json
import os
import signal
from datetime import datetime, timedelta

import pytest

from ucsfe.observability import (
    DEFAULT_OUTPUT_DIR,
    TRACE_FILE_NAME,
    FlightRecorder,
    FlightRecorderConfig,
    dump_trace,
)


def test_config_defaults():
    cfg = FlightRecorderConfig()
    assert cfg.output_dir == "/tmp/traces"
    assert cfg.min_age == timedelta(seconds=600)


def test_dump_trace_writes_snapshot(tmp_path):
    path = dump_trace(tmp_path)
    assert path == tmp_path / "flight_trace.out"
    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    data = json.loads(text)
    assert data["pid"] == os.getpid()
    assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None
    assert "SIGUSR1/SIGUSR2" in data["note"]


def test_dump_trace_missing_dir_raises(tmp_path):
    with pytest.raises(OSError, match="FlightRecorder: open"):
        dump_trace(tmp_path / "missing")


def test_recorder_creates_nested_dir_and_dumps(tmp_path):
    out = tmp_path / "a" / "b"
    with FlightRecorder(FlightRecorderConfig(output_dir=str(out))) as recorder:
        assert out.is_dir()
        assert recorder.trace_path() == out / TRACE_FILE_NAME
        path = recorder.dump_now()
        assert path == recorder.trace_path()
        assert json.loads(path.read_text())["pid"] == os.getpid()


def test_dump_now_truncates_previous_content(tmp_path):
    recorder = FlightRecorder(FlightRecorderConfig(output_dir=str(tmp_path)))
    try:
        recorder.trace_path().write_text("x" * 10000)
        path = recorder.dump_now()
        assert json.loads(path.read_text())["pid"] == os.getpid()
    finally:
        recorder.stop()


def test_recorder_fails_when_output_dir_is_a_file(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("")
    with pytest.raises(OSError, match="failed to create output dir"):
        FlightRecorder(FlightRecorderConfig(output_dir=str(blocker / "sub")))


def test_signal_triggers_dump_and_stop_restores(tmp_path):
    before = signal.getsignal(signal.SIGUSR1)
    recorder = FlightRecorder(FlightRecorderConfig(output_dir=str(tmp_path)))
    try:
        assert not recorder.trace_path().exists()
        signal.raise_signal(signal.SIGUSR2)
        assert json.loads(recorder.trace_path().read_text())["pid"] == os.getpid()
    finally:
        recorder.stop()
    assert signal.getsignal(signal.SIGUSR1) == before


def test_default_output_dir_constant_matches_config():
    assert FlightRecorderConfig().output_dir == DEFAULT_OUTPUT_DIR