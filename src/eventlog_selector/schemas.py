"""Typed schemas describing the outcome of a selection run."""

from __future__ import annotations

from dataclasses import dataclass, field

from .discovery.schemas import LogDescriptor


@dataclass
class SelectionCounters:
    """Counters emitted by SelectionService.run()."""

    specifiers_total: int = 0
    specifiers_without_logs: int = 0
    logs_discovered: int = 0
    logs_scanned: int = 0
    headers_missing: int = 0
    logs_selected: int = 0
    logs_unscanned: int = 0


@dataclass(frozen=True)
class SelectionOutcome:
    """Selected logs in final order plus the run counters."""

    selected: list[LogDescriptor]
    counters: SelectionCounters = field(default_factory=SelectionCounters)
