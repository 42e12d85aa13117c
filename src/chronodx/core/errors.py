"""
Exception hierarchy for chronodx.

Every error raised by the index is synchronous and final: callers (the
indexing pipeline or the query planner) decide whether a rejected record
aborts the whole document or just its bitemporal contribution.
"""

from typing import Any


class ChronodxError(Exception):
    """Base exception for chronodx errors."""


class ConfigurationError(ChronodxError):
    """Raised when a mapper or schema is configured incorrectly."""


class UnsupportedOperationError(ChronodxError):
    """Raised for operations a mapper refuses to perform (e.g. sorting)."""


class MapperMismatchError(ChronodxError):
    """Raised when a condition targets a field not mapped the way it requires."""


class ValidationError(ChronodxError, ValueError):
    """Raised when an input value fails validation."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to error response format."""
        return {
            "error": "validation_error",
            "field": self.field,
            "message": self.message,
        }


class InvalidArgumentError(ValidationError):
    """A value cannot represent a bitemporal instant (negative, unparseable)."""


class InvalidIntervalError(ValidationError):
    """A record's bitemporal interval is partial or inverted."""


class OutOfRangeError(ValidationError):
    """A parsed instant exceeds the configured NOW value."""
