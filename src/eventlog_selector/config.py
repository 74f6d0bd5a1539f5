"""Run settings for event log selection."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .errors import ConfigurationError

DEFAULT_HEADER_ROW_LIMIT = 100
DEFAULT_TIMEOUT_SECONDS = 60 * 60 * 24


def default_pool_size() -> int:
    """Return a worker count of a quarter of the CPUs, with a floor of 4."""
    return max(4, (os.cpu_count() or 1) // 4)


@dataclass(frozen=True)
class SelectionSettings:
    """Settings for one selection run.

    Attributes:
        header_row_limit: Maximum lines read from each log while looking for its header.
        pool_size: Number of worker threads scanning logs.
        timeout_seconds: Overall deadline for scanning all logs.
    """

    header_row_limit: int = DEFAULT_HEADER_ROW_LIMIT
    pool_size: int = field(default_factory=default_pool_size)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def validate(self) -> None:
        """Raise `ConfigurationError` for values the scanner cannot run with."""
        if self.header_row_limit < 1:
            raise ConfigurationError(f"Header row limit must be at least 1, got {self.header_row_limit}.")
        if self.pool_size < 1:
            raise ConfigurationError(f"Number of threads must be at least 1, got {self.pool_size}.")
        if self.timeout_seconds <= 0:
            raise ConfigurationError(f"Timeout must be a positive number of seconds, got {self.timeout_seconds}.")
