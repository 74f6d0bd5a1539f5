"""Typed schemas used by the header scanner."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..discovery.schemas import LogDescriptor


@dataclass(frozen=True)
class HeaderInfo:
    """Minimal application metadata read from the head of an event log."""

    application_id: str
    application_name: str
    start_time: datetime


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scanning one log; `header` is None when it could not be read."""

    descriptor: LogDescriptor
    header: HeaderInfo | None
    discovery_index: int


HeaderExtractor = Callable[[LogDescriptor, int], HeaderInfo | None]
