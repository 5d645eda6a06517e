"""Periodic logging of process memory statistics."""

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 60.0
_PROC_STATUS = "/proc/self/status"


def read_proc_mem(status_path: str | Path | None = None) -> tuple[float, float] | None:
    """Return (VmRSS, VmSize) in MiB from a /proc status file, or None if unavailable."""
    if status_path is None:
        if not sys.platform.startswith("linux"):
            return None
        status_path = _PROC_STATUS
    try:
        content = Path(status_path).read_text()
    except OSError:
        return None

    rss_kb = 0
    virt_kb = 0
    for line in content.splitlines():
        if line.startswith("VmRSS:"):
            value = _first_int(line[len("VmRSS:"):])
            if value is None:
                return None
            rss_kb = value
        elif line.startswith("VmSize:"):
            value = _first_int(line[len("VmSize:"):])
            if value is None:
                return None
            virt_kb = value
    return rss_kb / 1024.0, virt_kb / 1024.0


def _first_int(text: str) -> int | None:
    parts = text.split()
    if not parts or not parts[0].isdigit():
        return None
    return int(parts[0])


def _task_count() -> int:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return 0
    return len(asyncio.all_tasks(loop))


def log_stats() -> dict[str, float | int]:
    """Log a memory snapshot at WARNING and return the values logged."""
    rss_mb, virt_mb = read_proc_mem() or (0.0, 0.0)
    stats: dict[str, float | int] = {
        "rss_mb": rss_mb,
        "virt_mb": virt_mb,
        "num_tasks": _task_count(),
    }
    logger.warning(
        "[memstats] process memory snapshot rss_mb=%.2f virt_mb=%.2f num_tasks=%d",
        rss_mb,
        virt_mb,
        stats["num_tasks"],
        extra=stats,
    )
    return stats


class MemStatsHandle:
    """Controls a running memory-stats reporter; call stop() to end it."""

    def __init__(self, interval: float) -> None:
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(interval,), name="memstats", daemon=True
        )
        self._thread.start()

    def _run(self, interval: float) -> None:
        while not self._stop_event.wait(interval):
            log_stats()
        logger.info("[memstats] stopping")

    def stop(self) -> None:
        """Stop the reporter and wait for it to finish."""
        self._stop_event.set()
        if self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> MemStatsHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


def start_mem_stats(interval: float = DEFAULT_INTERVAL) -> MemStatsHandle:
    """Log memory stats every ``interval`` seconds (first after one interval) until stopped."""
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    return MemStatsHandle(interval)