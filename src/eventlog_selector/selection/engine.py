"""Application of a `FilterPolicy` to scanned event logs."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..discovery.schemas import LogDescriptor
from ..scanning.schemas import HeaderInfo, ScanResult
from .policy import (
    FilterPolicy,
    NameMatch,
    NoFilter,
    RankedTakeN,
    RankedTakeNWithNameMatch,
    RankOrder,
    TimeBound,
)

LOGGER = logging.getLogger(__name__)


class SelectionEngine:
    """Reduce scan results to the ordered list of logs handed to analysis."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def select(self, results: Iterable[ScanResult], policy: FilterPolicy) -> list[LogDescriptor]:
        """Return the descriptors that survive `policy`.

        Filtering policies keep discovery order. Ranked policies order by start
        time and break ties by discovery order. Logs without a header survive
        only under `NoFilter`.
        """
        in_discovery_order = sorted(results, key=lambda result: result.discovery_index)

        if isinstance(policy, NoFilter):
            selected = in_discovery_order
        elif isinstance(policy, NameMatch):
            selected = self._filter_by_name(in_discovery_order, policy)
        elif isinstance(policy, TimeBound):
            selected = [
                result
                for result in _with_header(in_discovery_order)
                if _header(result).start_time >= policy.min_start_time
            ]
        elif isinstance(policy, RankedTakeN):
            selected = _ranked_take_n(_with_header(in_discovery_order), policy.count, policy.order)
        elif isinstance(policy, RankedTakeNWithNameMatch):
            matched = self._filter_by_name(in_discovery_order, policy.name_match)
            selected = _ranked_take_n(matched, policy.count, policy.order)
        else:
            raise TypeError(f"Unsupported filter policy: {policy!r}")

        self._logger.info(
            "Selected %d of %d scanned event log(s) with %s.",
            len(selected),
            len(in_discovery_order),
            type(policy).__name__,
        )
        return [result.descriptor for result in selected]

    def _filter_by_name(self, results: list[ScanResult], name_match: NameMatch) -> list[ScanResult]:
        matched: list[ScanResult] = []
        for result in _with_header(results):
            header = _header(result)
            if name_match.matches(header.application_name):
                matched.append(result)
            else:
                self._logger.debug(
                    "Event log %s with application name %r did not match %r.",
                    result.descriptor.path,
                    header.application_name,
                    name_match.substring,
                )
        return matched


def _with_header(results: list[ScanResult]) -> list[ScanResult]:
    return [result for result in results if result.header is not None]


def _header(result: ScanResult) -> HeaderInfo:
    assert result.header is not None, f"Missing header for {result.descriptor.path}"
    return result.header


def _ranked_take_n(results: list[ScanResult], count: int, order: RankOrder) -> list[ScanResult]:
    """Sort header-bearing results by start time and keep the first `count`.

    `results` must already be in discovery order; the sort is stable, so equal
    start times keep that order in both directions.
    """
    ranked = sorted(
        results,
        key=lambda result: _header(result).start_time,
        reverse=order is RankOrder.NEWEST,
    )
    return ranked[:count]
