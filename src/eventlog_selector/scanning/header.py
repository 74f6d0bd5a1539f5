"""Header extraction for Spark JSON-lines event logs."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import orjson

from ..discovery.schemas import LogDescriptor
from ..errors import HeaderReadError
from .schemas import HeaderInfo

LOGGER = logging.getLogger(__name__)

APPLICATION_START_EVENT = "SparkListenerApplicationStart"
ROLLING_EVENT_FILE_PREFIX = "events_"
UNSUPPORTED_CODEC_SUFFIXES: tuple[str, ...] = (".lz4", ".lzf", ".snappy", ".zstd", ".zst")


def read_event_log_header(descriptor: LogDescriptor, row_limit: int) -> HeaderInfo | None:
    """Read application id, name, and start time from the head of an event log.

    At most `row_limit` lines are read. Malformed, truncated, compressed, or
    unreadable logs yield None instead of raising.
    """
    try:
        event_file = _resolve_event_file(descriptor.path)
        return _read_application_start(event_file, row_limit)
    except (HeaderReadError, OSError) as exc:
        LOGGER.debug("No header extracted from %s: %s", descriptor.path, exc)
        return None


def _resolve_event_file(log_path: Path) -> Path:
    """Return the file holding the first events of a plain or rolling event log."""
    if log_path.is_dir():
        event_files = sorted(
            (child for child in log_path.iterdir() if child.is_file() and child.name.startswith(ROLLING_EVENT_FILE_PREFIX)),
            key=_rolling_sequence_number,
        )
        if not event_files:
            raise HeaderReadError(f"No event files found in rolling event log directory {log_path}.")
        log_path = event_files[0]

    if log_path.name.endswith(UNSUPPORTED_CODEC_SUFFIXES):
        raise HeaderReadError(f"Unsupported compression codec for {log_path}.")
    return log_path


def _rolling_sequence_number(event_file: Path) -> tuple[int, str]:
    """Sort key for `events_<n>_<app-id>` files; unnumbered names sort last."""
    parts = event_file.name.split("_", 2)
    if len(parts) >= 2 and parts[1].isdigit():
        return int(parts[1]), event_file.name
    return 2**63, event_file.name


def _read_application_start(event_file: Path, row_limit: int) -> HeaderInfo:
    for line_number, event in _iter_json_events(event_file, row_limit):
        if event.get("Event") != APPLICATION_START_EVENT:
            continue
        return _parse_application_start(event, event_file, line_number)
    raise HeaderReadError(f"No {APPLICATION_START_EVENT} event within the first {row_limit} line(s) of {event_file}.")


def _iter_json_events(event_file: Path, row_limit: int) -> Iterator[tuple[int, dict[str, Any]]]:
    """Yield parsed JSON events with line numbers, stopping after `row_limit` non-empty lines."""
    rows_read = 0
    with event_file.open("rb") as handle:
        for line_number, raw_line in enumerate(handle, start=1):
            if not raw_line.strip():
                continue
            rows_read += 1
            if rows_read > row_limit:
                return
            try:
                payload = orjson.loads(raw_line)
            except orjson.JSONDecodeError as exc:
                raise HeaderReadError(f"Malformed JSON in {event_file} at line {line_number}: {exc}.") from exc
            if not isinstance(payload, dict):
                raise HeaderReadError(
                    f"Expected JSON object in {event_file} at line {line_number}, got {type(payload).__name__}."
                )
            yield line_number, payload


def _parse_application_start(event: dict[str, Any], event_file: Path, line_number: int) -> HeaderInfo:
    application_id = _required_string(event, "App ID", event_file, line_number)
    application_name = _required_string(event, "App Name", event_file, line_number)

    timestamp_ms = event.get("Timestamp")
    if not isinstance(timestamp_ms, int) or isinstance(timestamp_ms, bool):
        raise HeaderReadError(
            f"Invalid Timestamp in {event_file} at line {line_number}: "
            f"expected epoch milliseconds, got {type(timestamp_ms).__name__}."
        )
    try:
        start_time = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError) as exc:
        raise HeaderReadError(f"Out of range Timestamp {timestamp_ms} in {event_file} at line {line_number}.") from exc

    return HeaderInfo(application_id=application_id, application_name=application_name, start_time=start_time)


def _required_string(event: dict[str, Any], key: str, event_file: Path, line_number: int) -> str:
    value = event.get(key)
    if not isinstance(value, str):
        raise HeaderReadError(
            f"Invalid {key} in {event_file} at line {line_number}: expected str, got {type(value).__name__}."
        )
    return value
