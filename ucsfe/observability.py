"""Flight recorder: writes a diagnostic snapshot on SIGUSR1/SIGUSR2 or on demand."""

from __future__ import annotations

import json
import logging
import os
import signal
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = "/tmp/traces"
TRACE_FILE_NAME = "flight_trace.out"
_NOTE = "runtime flight recorder snapshot — use SIGUSR1/SIGUSR2 to trigger"


@dataclass
class FlightRecorderConfig:
    """Where snapshots go, and the retention window (kept for configuration parity)."""

    output_dir: str = DEFAULT_OUTPUT_DIR
    min_age: timedelta = field(default_factory=lambda: timedelta(seconds=600))


def dump_trace(output_dir: str | Path) -> Path:
    """Write a JSON diagnostic snapshot into ``output_dir`` and return its path."""
    path = Path(output_dir) / TRACE_FILE_NAME
    logger.info("[FlightRecorder] dumping diagnostic snapshot to %s", path)
    content = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "pid": os.getpid(),
        "note": _NOTE,
    }
    try:
        with path.open("w", encoding="utf-8") as fh:
            fh.write(json.dumps(content, indent=2, ensure_ascii=False) + "\n")
    except OSError as exc:
        raise OSError(f"FlightRecorder: open {path}: {exc}") from exc
    logger.info("[FlightRecorder] diagnostic snapshot written to %s", path)
    return path


def _signals() -> list[signal.Signals]:
    return [
        sig
        for sig in (getattr(signal, "SIGUSR1", None), getattr(signal, "SIGUSR2", None))
        if sig is not None
    ]


class FlightRecorder:
    """Dumps a snapshot whenever SIGUSR1 or SIGUSR2 arrives, until stopped."""

    def __init__(self, config: FlightRecorderConfig | None = None) -> None:
        self.config = config or FlightRecorderConfig()
        try:
            Path(self.config.output_dir).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OSError(
                f"FlightRecorder: failed to create output dir {self.config.output_dir}: {exc}"
            ) from exc
        self._previous: dict[signal.Signals, Any] = {}
        self._install_handlers()

    def _install_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            logger.warning("[FlightRecorder] signal handlers need the main thread; not installed")
            return
        for sig in _signals():
            try:
                self._previous[sig] = signal.signal(sig, self._on_signal)
            except (OSError, ValueError) as exc:
                logger.warning("[FlightRecorder] failed to register %s: %s", sig.name, exc)
                self._restore_handlers()
                return

    def _restore_handlers(self) -> None:
        previous, self._previous = self._previous, {}
        for sig, handler in previous.items():
            signal.signal(sig, handler if handler is not None else signal.SIG_DFL)

    def _on_signal(self, signum: int, frame: object) -> None:
        logger.info("[FlightRecorder] %s received — dumping trace", signal.Signals(signum).name)
        try:
            dump_trace(self.config.output_dir)
        except OSError as exc:
            logger.error("[FlightRecorder] dump failed: %s", exc)

    def dump_now(self) -> Path:
        """Write a snapshot immediately and return its path."""
        return dump_trace(self.config.output_dir)

    def stop(self) -> None:
        """Remove the signal handlers, restoring the ones that were there before."""
        self._restore_handlers()
        logger.info("[FlightRecorder] stopped")

    def trace_path(self) -> Path:
        """Path of the snapshot file."""
        return Path(self.config.output_dir) / TRACE_FILE_NAME

    def __enter__(self) -> FlightRecorder:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()