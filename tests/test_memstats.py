import logging
import time

import pytest

from ucsfe import memstats


def test_read_proc_mem_parses_values(tmp_path):
    status = tmp_path / "status"
    status.write_text("Name:\tpython\nVmSize:\t  204800 kB\nVmRSS:\t   10240 kB\n")
    rss_mb, virt_mb = memstats.read_proc_mem(status)
    assert rss_mb * 1024 == 10240
    assert virt_mb * 1024 == 204800
    assert virt_mb > rss_mb


def test_read_proc_mem_missing_fields_gives_zeros(tmp_path):
    status = tmp_path / "status"
    status.write_text("Name:\tpython\nThreads:\t4\n")
    assert memstats.read_proc_mem(status) == (0.0, 0.0)


def test_read_proc_mem_missing_file(tmp_path):
    assert memstats.read_proc_mem(tmp_path / "absent") is None


@pytest.mark.parametrize("line", ["VmRSS:\tlots kB\n", "VmSize:\n"])
def test_read_proc_mem_malformed(tmp_path, line):
    status = tmp_path / "status"
    status.write_text(line)
    assert memstats.read_proc_mem(status) is None


def test_log_stats_logs_returned_values(caplog):
    caplog.set_level(logging.INFO, logger="ucsfe.memstats")
    stats = memstats.log_stats()
    assert set(stats) == {"rss_mb", "virt_mb", "num_tasks"}
    assert stats["rss_mb"] >= 0
    assert stats["num_tasks"] == 0
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.rss_mb == stats["rss_mb"]
    assert "[memstats] process memory snapshot" in record.getMessage()


@pytest.mark.asyncio
async def test_log_stats_counts_running_tasks():
    stats = memstats.log_stats()
    assert stats["num_tasks"] >= 1


@pytest.mark.parametrize("interval", [0, -1.5])
def test_start_mem_stats_rejects_bad_interval(interval):
    with pytest.raises(ValueError):
        memstats.start_mem_stats(interval)


def test_start_and_stop(caplog):
    caplog.set_level(logging.INFO, logger="ucsfe.memstats")
    handle = memstats.start_mem_stats(0.01)
    deadline = time.monotonic() + 5
    while time.monotonic() < deadline:
        if any("snapshot" in r.getMessage() for r in caplog.records):
            break
        time.sleep(0.01)
    handle.stop()
    messages = [r.getMessage() for r in caplog.records]
    assert any("snapshot" in m for m in messages)
    assert messages[-1] == "[memstats] stopping"