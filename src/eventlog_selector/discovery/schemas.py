"""Typed schemas used by event log discovery."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class LogDescriptor:
    """One discovered event log.

    Equality and hashing use the path only, so the same log reached through two
    specifiers collapses to one descriptor.
    """

    path: Path
    timestamp: datetime = field(compare=False)


@dataclass(frozen=True)
class PathSpecifier:
    """A raw specifier split into its location part and optional time window."""

    raw: str
    location: str
    window: str | None = None
