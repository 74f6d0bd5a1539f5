"""Expansion of raw path specifiers into event log descriptors."""

from __future__ import annotations

import glob
import logging
import os
import re
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..errors import ConfigurationError
from ..selection.criteria import parse_time_bound
from .schemas import LogDescriptor, PathSpecifier

LOGGER = logging.getLogger(__name__)

GLOB_CHARACTERS = frozenset("*?[")
IGNORED_NAME_PREFIXES: tuple[str, ...] = (".", "_")
IGNORED_NAME_SUFFIXES: tuple[str, ...] = (".crc", ".inprogress")
ROLLING_LOG_DIR_PREFIX = "eventlog_v2_"

# Window suffixes require a unit; any other `@` is part of the path.
_WINDOW_SUFFIX_PATTERN = re.compile(r"^(?P<location>.+)@(?P<window>\d+(?:min|h|d|w|m))$")


class PathResolver:
    """Resolve files, directories, and glob patterns into `LogDescriptor`s."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or LOGGER

    def resolve(self, specifiers: Sequence[str], now: datetime | None = None) -> list[LogDescriptor]:
        """Expand every specifier and merge the results in discovery order."""
        descriptors, _ = self.resolve_with_counts(specifiers, now=now)
        return descriptors

    def resolve_with_counts(
        self,
        specifiers: Sequence[str],
        now: datetime | None = None,
    ) -> tuple[list[LogDescriptor], int]:
        """Expand specifiers and also report how many of them yielded no logs.

        An invalid specifier is logged and skipped; it never fails the run. A log
        reached by more than one specifier is kept at its first position only.
        """
        reference_now = now or datetime.now(UTC)
        resolved: list[LogDescriptor] = []
        seen_paths: set[Path] = set()
        specifiers_without_logs = 0

        for raw_specifier in specifiers:
            try:
                expanded = self._expand(split_specifier(raw_specifier), reference_now)
            except (ConfigurationError, OSError) as exc:
                specifiers_without_logs += 1
                self._logger.warning("Skipping event log specifier %r: %s", raw_specifier, exc)
                continue

            if not expanded:
                specifiers_without_logs += 1
                self._logger.warning("Event log specifier %r matched no event logs.", raw_specifier)
                continue

            for descriptor in expanded:
                if descriptor.path in seen_paths:
                    self._logger.debug("Event log %s already discovered, skipping duplicate.", descriptor.path)
                    continue
                seen_paths.add(descriptor.path)
                resolved.append(descriptor)

        self._logger.info(
            "Discovered %d event log(s) from %d specifier(s).",
            len(resolved),
            len(specifiers),
        )
        return resolved, specifiers_without_logs

    def _expand(self, specifier: PathSpecifier, now: datetime) -> list[LogDescriptor]:
        """Expand one specifier; raise for a missing or unreadable location."""
        min_timestamp = parse_time_bound(specifier.window, now=now) if specifier.window else None

        location = Path(specifier.location).expanduser()
        # An existing path is taken literally even when its name holds glob characters.
        if _is_glob(specifier.location) and not location.exists():
            candidates = [
                Path(match)
                for match in sorted(glob.glob(os.path.expanduser(specifier.location)))
                if is_log_bearing(Path(match))
            ]
        else:
            if not location.exists():
                raise FileNotFoundError(f"Event log path does not exist: {location}")
            if location.is_dir() and not location.name.startswith(ROLLING_LOG_DIR_PREFIX):
                candidates = [child for child in sorted(location.iterdir()) if is_log_bearing(child)]
            else:
                candidates = [location]

        descriptors: list[LogDescriptor] = []
        for candidate in candidates:
            try:
                timestamp = modification_time(candidate)
            except OSError as exc:
                self._logger.warning("Failed to stat event log %s, skipping: %s", candidate, exc)
                continue
            if min_timestamp is not None and timestamp < min_timestamp:
                continue
            descriptors.append(LogDescriptor(path=candidate, timestamp=timestamp))
        return descriptors


def split_specifier(raw_specifier: str) -> PathSpecifier:
    """Split an optional `@<period>` time window off a raw specifier."""
    stripped = raw_specifier.strip()
    if not stripped:
        raise ConfigurationError("Event log specifier must not be empty.")
    match = _WINDOW_SUFFIX_PATTERN.match(stripped)
    if match is None:
        return PathSpecifier(raw=raw_specifier, location=stripped)
    return PathSpecifier(raw=raw_specifier, location=match.group("location"), window=match.group("window"))


def is_log_bearing(path: Path) -> bool:
    """Return True for regular event log files and rolling event log directories."""
    name = path.name
    if name.startswith(IGNORED_NAME_PREFIXES) or name.endswith(IGNORED_NAME_SUFFIXES):
        return False
    if path.is_dir():
        return name.startswith(ROLLING_LOG_DIR_PREFIX)
    return path.is_file()


def modification_time(path: Path) -> datetime:
    """Return a UTC modification time; rolling directories use their newest child."""
    mtime = path.stat().st_mtime
    if path.is_dir():
        child_mtimes = [child.stat().st_mtime for child in path.iterdir() if child.is_file()]
        if child_mtimes:
            mtime = max(child_mtimes)
    return datetime.fromtimestamp(mtime, tz=UTC)


def _is_glob(location: str) -> bool:
    return any(character in GLOB_CHARACTERS for character in location)
