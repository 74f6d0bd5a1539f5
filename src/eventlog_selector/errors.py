"""Custom exceptions for event log selection failures."""


class EventLogSelectionError(Exception):
    """Base exception for event log selection errors."""


class ConfigurationError(EventLogSelectionError, ValueError):
    """Raised when run parameters or filter criteria are invalid."""


class HeaderReadError(EventLogSelectionError):
    """Raised when an event log header cannot be extracted."""
