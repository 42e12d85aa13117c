"""Core configuration, logging and error types for chronodx."""

from chronodx.core.config import Settings, get_settings, reset_settings
from chronodx.core.errors import (
    ChronodxError,
    ConfigurationError,
    InvalidArgumentError,
    InvalidIntervalError,
    MapperMismatchError,
    OutOfRangeError,
    UnsupportedOperationError,
    ValidationError,
)

__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
    "ChronodxError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidIntervalError",
    "MapperMismatchError",
    "OutOfRangeError",
    "UnsupportedOperationError",
    "ValidationError",
]
