"""BitemporalInstant: a point on either time axis, or the NOW sentinel."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import ClassVar

from chronodx.core.config import NOW_SENTINEL
from chronodx.core.errors import InvalidArgumentError
from chronodx.index.date_parser import EPOCH, DateParser


@dataclass(frozen=True, order=True, slots=True)
class BitemporalInstant:
    """Immutable epoch-millisecond instant ordered by value.

    ``NOW`` (== ``MAX``) is the largest signed 64-bit value and marks an
    interval end that is still open.
    """

    millis: int

    MIN: ClassVar[BitemporalInstant]
    MAX: ClassVar[BitemporalInstant]
    NOW: ClassVar[BitemporalInstant]

    def __post_init__(self) -> None:
        if isinstance(self.millis, bool) or not isinstance(self.millis, int):
            raise InvalidArgumentError(
                field="millis",
                message=f"Bitemporal instant requires an integer, got {type(self.millis).__name__}",
                value=self.millis,
            )
        if self.millis < 0:
            raise InvalidArgumentError(
                field="millis",
                message="Cannot build a bitemporal instant with a negative unix time",
                value=self.millis,
            )
        if self.millis > NOW_SENTINEL:
            raise InvalidArgumentError(
                field="millis",
                message=f"Bitemporal instant {self.millis} does not fit in 64 bits",
                value=self.millis,
            )

    @property
    def is_now(self) -> bool:
        return self.millis == NOW_SENTINEL

    @property
    def is_max(self) -> bool:
        return self.millis == NOW_SENTINEL

    @property
    def is_min(self) -> bool:
        return self.millis == 0

    def after(self, other: BitemporalInstant) -> bool:
        """True if this instant is strictly later than ``other``."""
        return self.millis > other.millis

    @staticmethod
    def max(first: BitemporalInstant, second: BitemporalInstant) -> BitemporalInstant:
        """Return the later of two instants (``second`` on ties)."""
        return first if first.millis > second.millis else second

    def to_datetime(self) -> datetime:
        """UTC datetime for this instant. NOW has no calendar date."""
        if self.is_now:
            raise InvalidArgumentError(
                field="millis",
                message="NOW has no calendar representation",
                value=self.millis,
            )
        return EPOCH + timedelta(milliseconds=self.millis)

    def format(self, parser: DateParser) -> str:
        return parser.format(self.millis)

    def __str__(self) -> str:
        return str(self.millis)


BitemporalInstant.MIN = BitemporalInstant(0)
BitemporalInstant.MAX = BitemporalInstant(NOW_SENTINEL)
BitemporalInstant.NOW = BitemporalInstant.MAX
