"""Bounded concurrent scanning of event log headers."""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from ..discovery.schemas import LogDescriptor
from ..errors import ConfigurationError
from .schemas import HeaderExtractor, HeaderInfo, ScanResult

LOGGER = logging.getLogger(__name__)
WORKER_THREAD_NAME_PREFIX = "eventlog-scan"


class ConcurrentScanner:
    """Run the header extractor over many logs with a fixed pool and a global timeout.

    Per-log failures only shrink the result set: an extractor that raises is
    recorded as a log without header, and logs still pending when the timeout
    expires are dropped. Workers are daemon threads, so a log stuck past the
    deadline never holds up interpreter exit.
    """

    def __init__(self, header_extractor: HeaderExtractor, logger: logging.Logger | None = None) -> None:
        self._header_extractor = header_extractor
        self._logger = logger or LOGGER

    def scan(
        self,
        descriptors: Sequence[LogDescriptor],
        header_row_limit: int,
        pool_size: int,
        timeout_seconds: float,
    ) -> list[ScanResult]:
        """Scan every descriptor and return the results collected before the deadline.

        The returned list has no meaningful order; `ScanResult.discovery_index`
        carries the position of each descriptor in `descriptors`.

        Raises:
            ConfigurationError: If `pool_size` < 1 or `timeout_seconds` <= 0.
        """
        if pool_size < 1:
            raise ConfigurationError(f"Worker pool size must be at least 1, got {pool_size}.")
        if timeout_seconds <= 0:
            raise ConfigurationError(f"Scan timeout must be positive, got {timeout_seconds} seconds.")

        work: queue.Queue[tuple[int, LogDescriptor]] = queue.Queue()
        results: queue.SimpleQueue[ScanResult] = queue.SimpleQueue()
        stop_event = threading.Event()
        submitted_paths: set[Path] = set()

        for discovery_index, descriptor in enumerate(descriptors):
            if descriptor.path in submitted_paths:
                self._logger.debug("Event log %s already submitted, skipping duplicate.", descriptor.path)
                continue
            try:
                work.put_nowait((discovery_index, descriptor))
            except Exception as exc:
                self._logger.error("Unexpected error submitting event log %s, skipping: %s", descriptor.path, exc)
                continue
            submitted_paths.add(descriptor.path)

        submitted = len(submitted_paths)
        self._logger.info("Scanning %d event log(s) with %d worker(s).", submitted, pool_size)

        # All work is queued before the workers start; a worker exits once the queue is empty.
        workers = [
            threading.Thread(
                target=self._worker_loop,
                args=(work, header_row_limit, results, stop_event),
                name=f"{WORKER_THREAD_NAME_PREFIX}-{worker_index}",
                daemon=True,
            )
            for worker_index in range(min(pool_size, submitted))
        ]
        for worker in workers:
            worker.start()

        deadline = time.monotonic() + timeout_seconds
        for worker in workers:
            worker.join(timeout=max(0.0, deadline - time.monotonic()))

        if any(worker.is_alive() for worker in workers):
            stop_event.set()
            discarded = _discard_pending(work)
            drained = _drain(results)
            self._logger.warning(
                "Scanning event logs took longer than %s seconds; stopping with %d of %d log(s) unfinished "
                "(%d never started).",
                timeout_seconds,
                submitted - len(drained),
                submitted,
                discarded,
            )
            return drained

        return _drain(results)

    def _worker_loop(
        self,
        work: queue.Queue[tuple[int, LogDescriptor]],
        header_row_limit: int,
        results: queue.SimpleQueue[ScanResult],
        stop_event: threading.Event,
    ) -> None:
        """Worker thread: take queued logs until the queue is empty or the scan is stopped."""
        while not stop_event.is_set():
            try:
                discovery_index, descriptor = work.get_nowait()
            except queue.Empty:
                return
            self._scan_one(descriptor, discovery_index, header_row_limit, results)

    def _scan_one(
        self,
        descriptor: LogDescriptor,
        discovery_index: int,
        header_row_limit: int,
        results: queue.SimpleQueue[ScanResult],
    ) -> None:
        """Extract one header and publish exactly one result."""
        header: HeaderInfo | None
        try:
            header = self._header_extractor(descriptor, header_row_limit)
        except Exception as exc:
            self._logger.warning("Failed to read header of event log %s: %s", descriptor.path, exc)
            header = None

        if header is None:
            self._logger.debug("Event log %s has no readable header.", descriptor.path)
        results.put(ScanResult(descriptor=descriptor, header=header, discovery_index=discovery_index))


def _discard_pending(work: queue.Queue[tuple[int, LogDescriptor]]) -> int:
    """Empty the work queue and return how many logs were never started."""
    discarded = 0
    while True:
        try:
            work.get_nowait()
        except queue.Empty:
            return discarded
        discarded += 1


def _drain(results: queue.SimpleQueue[ScanResult]) -> list[ScanResult]:
    """Snapshot everything published to the queue so far."""
    drained: list[ScanResult] = []
    while True:
        try:
            drained.append(results.get_nowait())
        except queue.Empty:
            return drained
