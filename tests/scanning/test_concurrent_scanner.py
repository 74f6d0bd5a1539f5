"""Tests for bounded concurrent header scanning."""

from __future__ import annotations

import logging
import os
import queue
import subprocess
import sys
import textwrap
import threading
import time
from datetime import UTC, datetime
from pathlib import Path

import pytest

from eventlog_selector.discovery.schemas import LogDescriptor
from eventlog_selector.errors import ConfigurationError
from eventlog_selector.scanning import scanner as scanner_module
from eventlog_selector.scanning.scanner import ConcurrentScanner
from eventlog_selector.scanning.schemas import HeaderInfo

EPOCH = datetime(2026, 1, 1, tzinfo=UTC)


def test_scan_produces_one_result_per_descriptor() -> None:
    """With enough workers and time, every descriptor should yield exactly one result."""
    descriptors = _descriptors(8)
    seen_row_limits: list[int] = []

    def extractor(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
        seen_row_limits.append(row_limit)
        return _header(descriptor)

    results = ConcurrentScanner(extractor).scan(descriptors, header_row_limit=25, pool_size=8, timeout_seconds=10)

    assert sorted(result.discovery_index for result in results) == list(range(8))
    assert {result.descriptor for result in results} == set(descriptors)
    assert all(result.header is not None for result in results)
    assert set(seen_row_limits) == {25}


def test_scan_records_extractor_failures_as_missing_headers(caplog: pytest.LogCaptureFixture) -> None:
    """An exception inside one task should neither abort the pool nor drop the log."""
    descriptors = _descriptors(4)

    def extractor(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
        if descriptor.path.name == "log-1":
            raise RuntimeError("corrupt event log")
        if descriptor.path.name == "log-2":
            return None
        return _header(descriptor)

    with caplog.at_level(logging.WARNING):
        results = ConcurrentScanner(extractor).scan(descriptors, header_row_limit=10, pool_size=2, timeout_seconds=10)

    headers = {result.descriptor.path.name: result.header for result in results}
    assert len(results) == 4
    assert headers["log-1"] is None
    assert headers["log-2"] is None
    assert headers["log-0"] is not None
    assert headers["log-3"] is not None
    assert "corrupt event log" in caplog.text


def test_scan_returns_partial_results_after_timeout(caplog: pytest.LogCaptureFixture) -> None:
    """A stuck log should not hold the scan past its deadline."""
    descriptors = _descriptors(4)
    release = threading.Event()

    def extractor(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
        if descriptor.path.name == "log-0":
            release.wait(timeout=30)
        return _header(descriptor)

    try:
        with caplog.at_level(logging.WARNING):
            started = time.monotonic()
            results = ConcurrentScanner(extractor).scan(
                descriptors,
                header_row_limit=10,
                pool_size=4,
                timeout_seconds=0.5,
            )
            elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 5
    assert len(results) <= len(descriptors)
    assert "log-0" not in {result.descriptor.path.name for result in results}
    assert "took longer than 0.5 seconds" in caplog.text


def test_scan_discards_queued_tasks_after_timeout() -> None:
    """Tasks that never started before the deadline should not run the extractor."""
    descriptors = _descriptors(5)
    release = threading.Event()
    called: list[str] = []

    def extractor(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
        called.append(descriptor.path.name)
        release.wait(timeout=30)
        return _header(descriptor)

    try:
        results = ConcurrentScanner(extractor).scan(descriptors, header_row_limit=10, pool_size=1, timeout_seconds=0.3)
    finally:
        release.set()
    time.sleep(0.2)

    assert results == []
    assert called[0] == "log-0"
    assert len(called) <= 2


def test_timed_out_scan_does_not_block_interpreter_exit(tmp_path: Path) -> None:
    """A worker stuck past the deadline must not keep the process alive once scanning returns."""
    script = tmp_path / "stuck_scan.py"
    script.write_text(
        textwrap.dedent(
            """
            import time
            from datetime import UTC, datetime
            from pathlib import Path

            from eventlog_selector.discovery.schemas import LogDescriptor
            from eventlog_selector.scanning.scanner import ConcurrentScanner


            def stuck_extractor(descriptor, row_limit):
                time.sleep(30)
                return None


            descriptor = LogDescriptor(path=Path("/logs/stuck"), timestamp=datetime(2026, 1, 1, tzinfo=UTC))
            results = ConcurrentScanner(stuck_extractor).scan(
                [descriptor],
                header_row_limit=10,
                pool_size=1,
                timeout_seconds=0.3,
            )
            print(f"results={len(results)}")
            """
        ),
        encoding="utf-8",
    )
    source_root = Path(scanner_module.__file__).resolve().parents[2]

    started = time.monotonic()
    completed = subprocess.run(
        [sys.executable, str(script)],
        capture_output=True,
        text=True,
        timeout=20,
        env={**os.environ, "PYTHONPATH": str(source_root)},
    )
    elapsed = time.monotonic() - started

    assert completed.returncode == 0, completed.stderr
    assert "results=0" in completed.stdout
    assert elapsed < 10


def test_scan_skips_descriptors_whose_submission_fails(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """A rejected submission is logged and skipped without failing the other logs."""

    class RejectingQueue(queue.Queue):
        def put_nowait(self, item):
            _, descriptor = item
            if descriptor.path.name == "log-1":
                raise queue.Full("pool saturated")
            return super().put_nowait(item)

    monkeypatch.setattr(scanner_module.queue, "Queue", RejectingQueue)
    descriptors = _descriptors(3)

    with caplog.at_level(logging.ERROR):
        results = ConcurrentScanner(_header).scan(descriptors, header_row_limit=10, pool_size=2, timeout_seconds=10)

    assert sorted(result.descriptor.path.name for result in results) == ["log-0", "log-2"]
    assert "pool saturated" in caplog.text


def test_scan_submits_repeated_paths_once() -> None:
    """The same log handed twice should only be scanned once."""
    descriptors = _descriptors(2)
    calls: list[str] = []

    def extractor(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
        calls.append(descriptor.path.name)
        return _header(descriptor)

    results = ConcurrentScanner(extractor).scan(
        descriptors + descriptors[:1],
        header_row_limit=10,
        pool_size=1,
        timeout_seconds=10,
    )

    assert sorted(calls) == ["log-0", "log-1"]
    assert sorted(result.discovery_index for result in results) == [0, 1]


def test_scan_handles_empty_input() -> None:
    """No descriptors means no results and no waiting."""
    assert ConcurrentScanner(_header).scan([], header_row_limit=10, pool_size=1, timeout_seconds=1) == []


@pytest.mark.parametrize(("pool_size", "timeout_seconds"), [(0, 10), (-1, 10), (1, 0), (1, -5)])
def test_scan_rejects_invalid_pool_size_or_timeout(pool_size: int, timeout_seconds: float) -> None:
    """Invalid pool size or timeout should fail before any task runs."""
    calls: list[LogDescriptor] = []

    def extractor(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
        calls.append(descriptor)
        return None

    with pytest.raises(ConfigurationError):
        _ = ConcurrentScanner(extractor).scan(
            _descriptors(2),
            header_row_limit=10,
            pool_size=pool_size,
            timeout_seconds=timeout_seconds,
        )
    assert calls == []


def _descriptors(count: int) -> list[LogDescriptor]:
    return [LogDescriptor(path=Path(f"/logs/log-{index}"), timestamp=EPOCH) for index in range(count)]


def _header(descriptor: LogDescriptor, row_limit: int = 10) -> HeaderInfo:
    return HeaderInfo(
        application_id=f"app-{descriptor.path.name}",
        application_name=descriptor.path.name,
        start_time=EPOCH,
    )
