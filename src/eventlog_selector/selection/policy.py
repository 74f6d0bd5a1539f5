"""Typed filter policies built once per run from CLI criteria."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RankOrder(Enum):
    """Direction of a ranked take-N selection by application start time."""

    NEWEST = "newest"
    OLDEST = "oldest"


@dataclass(frozen=True)
class RankCriteria:
    """Parsed `<count>-<order>` criteria."""

    count: int
    order: RankOrder


@dataclass(frozen=True)
class NoFilter:
    """Keep every discovered log."""


@dataclass(frozen=True)
class NameMatch:
    """Keep logs whose application name contains `substring` (or not, when negated)."""

    substring: str
    negate: bool = False

    def matches(self, application_name: str) -> bool:
        """Return True when the name passes this predicate."""
        return (self.substring in application_name) != self.negate


@dataclass(frozen=True)
class TimeBound:
    """Keep logs whose application started at or after `min_start_time`."""

    min_start_time: datetime


@dataclass(frozen=True)
class RankedTakeN:
    """Keep the `count` newest or oldest logs by application start time."""

    count: int
    order: RankOrder


@dataclass(frozen=True)
class RankedTakeNWithNameMatch:
    """Apply `name_match` first, then rank the survivors and keep `count`."""

    count: int
    order: RankOrder
    name_match: NameMatch


FilterPolicy = NoFilter | NameMatch | TimeBound | RankedTakeN | RankedTakeNWithNameMatch
