"""Service orchestration for event log selection."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Callable

from .config import SelectionSettings
from .discovery.resolver import PathResolver
from .discovery.schemas import LogDescriptor
from .scanning.header import read_event_log_header
from .scanning.scanner import ConcurrentScanner
from .scanning.schemas import HeaderExtractor
from .schemas import SelectionCounters, SelectionOutcome
from .selection.engine import SelectionEngine
from .selection.policy import FilterPolicy

LOGGER = logging.getLogger(__name__)

SelectionConsumer = Callable[[list[LogDescriptor]], None]


class SelectionService:
    """Coordinates discovery, header scanning, and selection."""

    def __init__(
        self,
        settings: SelectionSettings,
        header_extractor: HeaderExtractor = read_event_log_header,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings
        self._logger = logger or LOGGER
        self._resolver = PathResolver(logger=logger)
        self._scanner = ConcurrentScanner(header_extractor, logger=logger)
        self._engine = SelectionEngine(logger=logger)

    def run(
        self,
        specifiers: Sequence[str],
        policy: FilterPolicy,
        consumer: SelectionConsumer | None = None,
    ) -> SelectionOutcome:
        """Resolve, scan, and select logs, then hand the selection to `consumer`.

        Raises:
            ConfigurationError: If the settings are invalid; raised before any path is touched.
        """
        self._settings.validate()
        counters = SelectionCounters(specifiers_total=len(specifiers))

        descriptors, counters.specifiers_without_logs = self._resolver.resolve_with_counts(specifiers)
        counters.logs_discovered = len(descriptors)

        results = self._scanner.scan(
            descriptors,
            header_row_limit=self._settings.header_row_limit,
            pool_size=self._settings.pool_size,
            timeout_seconds=self._settings.timeout_seconds,
        )
        counters.logs_scanned = len(results)
        counters.logs_unscanned = counters.logs_discovered - counters.logs_scanned
        counters.headers_missing = sum(1 for result in results if result.header is None)

        selected = self._engine.select(results, policy)
        counters.logs_selected = len(selected)

        if consumer is not None:
            consumer(selected)
        return SelectionOutcome(selected=selected, counters=counters)
