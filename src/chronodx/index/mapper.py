"""Mappers: turn a record's column values into stored document fields.

``BitemporalMapper`` canonicalizes a ``[vt_from, vt_to] x [tt_from, tt_to]``
interval into one of four partitions depending on which ends are still
open (equal to NOW):

    T1  tt_to NOW, vt_to NOW     stores vtFrom, ttFrom
    T2  tt_to NOW, vt_to closed  stores vtFrom, vtTo, ttFrom
    T3  tt_to closed, vt_to NOW  stores vtFrom, ttFrom, ttTo
    T4  both closed              stores vtFrom, vtTo, ttFrom, ttTo

Every record also stores ``<field>.T1UT2`` = 1 for T1/T2 and 0 otherwise.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from chronodx.core.config import NOW_SENTINEL
from chronodx.core.errors import (
    ConfigurationError,
    InvalidArgumentError,
    InvalidIntervalError,
    OutOfRangeError,
    UnsupportedOperationError,
)
from chronodx.index.date_parser import DateParser
from chronodx.index.instant import BitemporalInstant

logger = logging.getLogger(__name__)

VT_FROM = "vtFrom"
VT_TO = "vtTo"
TT_FROM = "ttFrom"
TT_TO = "ttTo"

T1UT2_FIELD_SUFFIX = ".T1UT2"


def partition_field(field: str, partition: Partition, axis: str) -> str:
    """Stored field name, e.g. ``validity.T2.vtFrom``."""
    return f"{field}.{partition.value}.{axis}"


class Partition(str, Enum):
    """Storage shape of a bitemporal interval, chosen by its open ends."""

    T1 = "T1"
    T2 = "T2"
    T3 = "T3"
    T4 = "T4"

    @classmethod
    def classify(cls, vt_to: BitemporalInstant, tt_to: BitemporalInstant) -> Partition:
        if tt_to.is_now and vt_to.is_now:
            return cls.T1
        if tt_to.is_now:
            return cls.T2
        if vt_to.is_now:
            return cls.T3
        return cls.T4

    @property
    def axes(self) -> tuple[str, ...]:
        return PARTITION_AXES[self]

    @property
    def transaction_open(self) -> bool:
        return self in (Partition.T1, Partition.T2)


PARTITION_AXES: dict[Partition, tuple[str, ...]] = {
    Partition.T1: (VT_FROM, TT_FROM),
    Partition.T2: (VT_FROM, VT_TO, TT_FROM),
    Partition.T3: (VT_FROM, TT_FROM, TT_TO),
    Partition.T4: (VT_FROM, VT_TO, TT_FROM, TT_TO),
}


@dataclass(frozen=True, slots=True)
class SortField:
    """Resolved sort on a stored field."""

    field: str
    reverse: bool = False


@dataclass(frozen=True, slots=True)
class StoredFields:
    """Fields one record contributes to the index for a bitemporal mapper."""

    partition: Partition
    fields: dict[str, int]
    flag_field: str

    @property
    def open_flag(self) -> int:
        return self.fields[self.flag_field]


class Mapper(ABC):
    """Maps one or more record columns onto stored document fields."""

    def __init__(self, field: str, columns: list[str]) -> None:
        if not field or not field.strip():
            raise ConfigurationError("Mapper field name is required")
        self.field = field
        self.columns = columns

    @abstractmethod
    def document_fields(self, columns: Mapping[str, Any]) -> dict[str, int]:
        """Stored fields for a record; empty when the record has no value."""

    def sort_field(self, name: str, reverse: bool = False) -> SortField:
        return SortField(field=self.field, reverse=reverse)


def _require_column(value: str | None, axis: str) -> str:
    if value is None or not value.strip():
        raise ConfigurationError(f"{axis} column name is required")
    return value


class BitemporalMapper(Mapper):
    """Partitions bitemporal intervals into T1..T4 stored fields.

    Args:
        field: Name of the indexed field; prefixes every stored field.
        vt_from: Column holding the valid time start.
        vt_to: Column holding the valid time end.
        tt_from: Column holding the transaction time start.
        tt_to: Column holding the transaction time end.
        pattern: Date pattern for string values (default ``DateParser.DEFAULT_PATTERN``).
        now_value: Column value that means NOW (default: max int64).

    Raises:
        ConfigurationError: If a column name is blank or ``now_value`` is invalid.
    """

    def __init__(
        self,
        field: str,
        vt_from: str,
        vt_to: str,
        tt_from: str,
        tt_to: str,
        pattern: str | None = None,
        now_value: Any = None,
    ) -> None:
        self.vt_from = _require_column(vt_from, "vt_from")
        self.vt_to = _require_column(vt_to, "vt_to")
        self.tt_from = _require_column(tt_from, "tt_from")
        self.tt_to = _require_column(tt_to, "tt_to")
        super().__init__(field, [self.vt_from, self.vt_to, self.tt_from, self.tt_to])

        self.parser = DateParser(pattern)
        self.pattern = self.parser.pattern
        self.now_value = self._resolve_now(now_value)

    def _resolve_now(self, now_value: Any) -> int:
        if now_value is None:
            return NOW_SENTINEL
        try:
            millis = self.parser.parse(now_value)
        except InvalidArgumentError as e:
            raise ConfigurationError(f"Invalid now_value {now_value!r}: {e.message}") from e
        if millis is None or millis < 0 or millis > NOW_SENTINEL:
            raise ConfigurationError(f"now_value {now_value!r} is out of range")
        return millis

    @property
    def t1ut2_field(self) -> str:
        return self.field + T1UT2_FIELD_SUFFIX

    def field_name(self, partition: Partition, axis: str) -> str:
        return partition_field(self.field, partition, axis)

    def parse_instant(self, value: Any) -> BitemporalInstant | None:
        """Parse a raw value; the configured NOW value collapses to ``MAX``.

        Raises:
            OutOfRangeError: If the value is later than the NOW value.
            InvalidArgumentError: If the value cannot be parsed or is negative.
        """
        millis = self.parser.parse(value)
        if millis is None:
            return None
        if millis > self.now_value:
            raise OutOfRangeError(
                field=self.field,
                message=f"Bitemporal instant '{millis}' exceeds max value '{self.now_value}'",
                value=millis,
            )
        if millis == self.now_value:
            return BitemporalInstant.MAX
        return BitemporalInstant(millis)

    def read_instant(self, columns: Mapping[str, Any], column: str) -> BitemporalInstant | None:
        return self.parse_instant(columns.get(column))

    def add_fields(self, columns: Mapping[str, Any]) -> StoredFields | None:
        """Classify a record and build its stored fields.

        Returns None when the record carries no bitemporal data at all.

        Raises:
            InvalidIntervalError: If only some instants are present, or an
                axis has its start after its end.
            OutOfRangeError: If an instant exceeds the NOW value.
        """
        vt_from = self.read_instant(columns, self.vt_from)
        vt_to = self.read_instant(columns, self.vt_to)
        tt_from = self.read_instant(columns, self.tt_from)
        tt_to = self.read_instant(columns, self.tt_to)

        if vt_from is None and vt_to is None and tt_from is None and tt_to is None:
            logger.debug("No bitemporal data for field '%s', skipping", self.field)
            return None

        self._validate(vt_from, vt_to, tt_from, tt_to)

        partition = Partition.classify(vt_to, tt_to)
        values = {VT_FROM: vt_from, VT_TO: vt_to, TT_FROM: tt_from, TT_TO: tt_to}
        fields = {
            self.field_name(partition, axis): values[axis].millis
            for axis in partition.axes
        }
        fields[self.t1ut2_field] = 1 if partition.transaction_open else 0

        logger.debug("Field '%s' assigned to %s", self.field, partition.value)
        return StoredFields(partition=partition, fields=fields, flag_field=self.t1ut2_field)

    def document_fields(self, columns: Mapping[str, Any]) -> dict[str, int]:
        stored = self.add_fields(columns)
        return dict(stored.fields) if stored is not None else {}

    def _validate(
        self,
        vt_from: BitemporalInstant | None,
        vt_to: BitemporalInstant | None,
        tt_from: BitemporalInstant | None,
        tt_to: BitemporalInstant | None,
    ) -> None:
        for axis, instant in (
            ("vt_from", vt_from),
            ("vt_to", vt_to),
            ("tt_from", tt_from),
            ("tt_to", tt_to),
        ):
            if instant is None:
                raise InvalidIntervalError(field=axis, message=f"{axis} column required")

        if vt_from.after(vt_to):
            raise InvalidIntervalError(
                field="vt_from",
                message=(
                    f"vt_from:'{vt_from.format(self.parser)}' is after "
                    f"vt_to:'{vt_to.format(self.parser)}'"
                ),
                value=(vt_from.millis, vt_to.millis),
            )
        if tt_from.after(tt_to):
            raise InvalidIntervalError(
                field="tt_from",
                message=(
                    f"tt_from:'{tt_from.format(self.parser)}' is after "
                    f"tt_to:'{tt_to.format(self.parser)}'"
                ),
                value=(tt_from.millis, tt_to.millis),
            )

    def sort_field(self, name: str, reverse: bool = False) -> SortField:
        raise UnsupportedOperationError(f"Bitemporal mapper '{name}' does not support sorting")

    def __repr__(self) -> str:
        return (
            f"BitemporalMapper(field={self.field!r}, vt_from={self.vt_from!r}, "
            f"vt_to={self.vt_to!r}, tt_from={self.tt_from!r}, tt_to={self.tt_to!r}, "
            f"pattern={self.pattern!r}, now_value={self.now_value})"
        )


class LongMapper(Mapper):
    """Maps a single integer column onto one sortable 64-bit field."""

    def __init__(self, field: str, column: str | None = None) -> None:
        column = column or field
        super().__init__(field, [column])
        self.column = column

    def document_fields(self, columns: Mapping[str, Any]) -> dict[str, int]:
        value = columns.get(self.column)
        if value is None:
            return {}
        if isinstance(value, int) and not isinstance(value, bool):
            return {self.field: value}
        if isinstance(value, str):
            try:
                return {self.field: int(value.strip(), 10)}
            except ValueError:
                raise InvalidArgumentError(
                    field=self.field,
                    message=f"Column '{self.column}' value {value!r} is not an integer",
                    value=value,
                ) from None
        raise InvalidArgumentError(
            field=self.field,
            message=f"Column '{self.column}' value {value!r} is not an integer",
            value=value,
        )

    def __repr__(self) -> str:
        return f"LongMapper(field={self.field!r}, column={self.column!r})"
