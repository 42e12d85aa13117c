"""Date parsing boundary: raw column and condition values to epoch millis."""

from __future__ import annotations

import math
import numbers
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from chronodx.core.config import DEFAULT_DATE_PATTERN
from chronodx.core.errors import InvalidArgumentError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


class DateParser:
    """Parses instants with a strftime pattern.

    The pattern ``"timestamp"`` means strings hold epoch milliseconds.
    Integers are always epoch milliseconds, whatever the pattern.
    """

    DEFAULT_PATTERN = DEFAULT_DATE_PATTERN
    TIMESTAMP_PATTERN = "timestamp"

    def __init__(self, pattern: str | None = None) -> None:
        self.pattern = pattern or self.DEFAULT_PATTERN

    @property
    def is_timestamp(self) -> bool:
        return self.pattern == self.TIMESTAMP_PATTERN

    def parse(self, value: Any) -> int | None:
        """Return epoch millis for ``value``, or None when there is no value."""
        if value is None:
            return None
        if isinstance(value, bool):
            raise InvalidArgumentError(
                field="value", message=f"Cannot parse boolean {value!r} as a date", value=value,
            )
        if isinstance(value, numbers.Real):
            if not math.isfinite(value):
                raise InvalidArgumentError(
                    field="value", message=f"Cannot parse non-finite {value!r} as a date", value=value,
                )
            return int(value)
        if isinstance(value, datetime):
            return self._datetime_to_millis(value)
        if isinstance(value, date):
            return self._datetime_to_millis(datetime.combine(value, time(), tzinfo=timezone.utc))
        if isinstance(value, str):
            return self._parse_string(value)
        raise InvalidArgumentError(
            field="value",
            message=f"Cannot parse {type(value).__name__} as a date",
            value=value,
        )

    def format(self, millis: int) -> str:
        """Render epoch millis with the pattern; out-of-calendar values render as digits."""
        if self.is_timestamp:
            return str(millis)
        try:
            return (EPOCH + timedelta(milliseconds=millis)).strftime(self.pattern)
        except OverflowError:
            return str(millis)

    def _parse_string(self, value: str) -> int:
        text = value.strip()
        if self.is_timestamp:
            try:
                return int(text)
            except ValueError:
                raise InvalidArgumentError(
                    field="value",
                    message=f"'{value}' is not an epoch-millis timestamp",
                    value=value,
                ) from None
        try:
            parsed = datetime.strptime(text, self.pattern)
        except ValueError:
            raise InvalidArgumentError(
                field="value",
                message=f"'{value}' does not match date pattern '{self.pattern}'",
                value=value,
            ) from None
        return self._datetime_to_millis(parsed)

    @staticmethod
    def _datetime_to_millis(value: datetime) -> int:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - EPOCH) // _ONE_MILLI

    def __repr__(self) -> str:
        return f"DateParser(pattern={self.pattern!r})"
