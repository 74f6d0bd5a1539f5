"""Parsing helpers for string-encoded selection criteria."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from ..errors import ConfigurationError
from .policy import (
    FilterPolicy,
    NameMatch,
    NoFilter,
    RankCriteria,
    RankedTakeN,
    RankedTakeNWithNameMatch,
    RankOrder,
    TimeBound,
)

NEGATION_PREFIX = "~"
DEFAULT_TIME_UNIT = "d"
TIME_UNITS: dict[str, timedelta] = {
    "min": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "m": timedelta(days=30),
}

_RANK_CRITERIA_PATTERN = re.compile(r"^(?P<count>\d+)-(?P<order>[A-Za-z]+)$")
_TIME_BOUND_PATTERN = re.compile(r"^(?P<value>\d+)(?P<unit>[A-Za-z]*)$")


def parse_rank_criteria(criteria: str) -> RankCriteria:
    """Parse `<positive-integer>-{newest|oldest}` into `RankCriteria`.

    Raises:
        ConfigurationError: If the string is malformed or the count is not positive.
    """
    match = _RANK_CRITERIA_PATTERN.match(criteria.strip())
    if match is None:
        raise ConfigurationError(
            f"Invalid filter criteria {criteria!r}. Expected <positive-integer>-newest or <positive-integer>-oldest."
        )

    count = int(match.group("count"))
    if count <= 0:
        raise ConfigurationError(f"Invalid filter criteria {criteria!r}: the number of event logs must be positive.")

    order_value = match.group("order")
    try:
        order = RankOrder(order_value)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid filter criteria {criteria!r}: order must be 'newest' or 'oldest', got {order_value!r}."
        ) from exc
    return RankCriteria(count=count, order=order)


def parse_time_bound(period: str, now: datetime | None = None) -> datetime:
    """Convert `<positive-integer>[unit]` into the instant `now - period`.

    Units are `min`, `h`, `d`, `w`, and `m` (30 days); `d` is used when the unit
    is omitted. `now` is sampled once per call when not provided.
    """
    allowed_units = ", ".join(TIME_UNITS)
    match = _TIME_BOUND_PATTERN.match(period.strip())
    if match is None:
        raise ConfigurationError(
            f"Invalid time period {period!r}. Expected <positive-integer>[unit] with unit in: {allowed_units}."
        )

    value = int(match.group("value"))
    if value <= 0:
        raise ConfigurationError(f"Invalid time period {period!r}: the value must be positive.")

    unit = match.group("unit") or DEFAULT_TIME_UNIT
    unit_delta = TIME_UNITS.get(unit)
    if unit_delta is None:
        raise ConfigurationError(f"Invalid time period {period!r}: unknown unit {unit!r}, expected one of: {allowed_units}.")

    reference_now = now or datetime.now(UTC)
    try:
        return reference_now - value * unit_delta
    except OverflowError as exc:
        raise ConfigurationError(f"Invalid time period {period!r}: the period is too large.") from exc


def parse_name_match(expression: str) -> NameMatch:
    """Parse an application-name substring, where a leading `~` negates the match."""
    negate = expression.startswith(NEGATION_PREFIX)
    substring = expression[len(NEGATION_PREFIX) :] if negate else expression
    if not substring:
        raise ConfigurationError(f"Invalid application name match {expression!r}: the substring must not be empty.")
    return NameMatch(substring=substring, negate=negate)


def build_filter_policy(
    filter_criteria: str | None = None,
    match_app_name: str | None = None,
    start_app_time: str | None = None,
    now: datetime | None = None,
) -> FilterPolicy:
    """Build the single `FilterPolicy` for a run from CLI-level strings.

    A name match combines with ranked criteria; a start-time bound combines with
    neither and is rejected when given alongside them.
    """
    if start_app_time is not None and (filter_criteria is not None or match_app_name is not None):
        raise ConfigurationError(
            "A start-time bound cannot be combined with filter criteria or an application name match."
        )

    if start_app_time is not None:
        return TimeBound(min_start_time=parse_time_bound(start_app_time, now=now))

    name_match = parse_name_match(match_app_name) if match_app_name is not None else None
    if filter_criteria is None:
        return name_match if name_match is not None else NoFilter()

    criteria = parse_rank_criteria(filter_criteria)
    if name_match is None:
        return RankedTakeN(count=criteria.count, order=criteria.order)
    return RankedTakeNWithNameMatch(count=criteria.count, order=criteria.order, name_match=name_match)
