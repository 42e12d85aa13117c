"""Rebuild a bitemporal query rectangle as predicates over partition fields.

A record lives in exactly one partition, so the intersection test is the OR
of one sub-predicate per partition that can still match. Where a partition
stores both ends of an axis, overlap of ``[from, to]`` with ``[lo, hi]`` is
the OR of three cases: ``from`` in the window, ``to`` in the window, or
``from <= lo and to >= hi``. An axis whose end is open only needs its start
checked against the window's upper bound.

T3 is tested against ``[max(tt_from, vt_from), tt_to]`` on the transaction
axis rather than ``[tt_from, tt_to]``. Records in T3 whose ``tt_to`` falls in
``[tt_from, vt_from)`` therefore do not match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from chronodx.index.instant import BitemporalInstant
from chronodx.index.mapper import (
    T1UT2_FIELD_SUFFIX,
    TT_FROM,
    TT_TO,
    VT_FROM,
    VT_TO,
    Partition,
    partition_field,
)
from chronodx.index.predicate import (
    BooleanPredicate,
    ExactPredicate,
    Predicate,
    RangePredicate,
    all_of,
    any_of,
)

logger = logging.getLogger(__name__)

MIN = BitemporalInstant.MIN.millis
MAX = BitemporalInstant.MAX.millis


@dataclass(frozen=True, slots=True)
class QueryRectangle:
    """Inclusive query region in valid time x transaction time."""

    vt_from: BitemporalInstant = BitemporalInstant.MIN
    vt_to: BitemporalInstant = BitemporalInstant.MAX
    tt_from: BitemporalInstant = BitemporalInstant.MIN
    tt_to: BitemporalInstant = BitemporalInstant.MAX

    @property
    def full_valid_window(self) -> bool:
        return self.vt_from.is_min and self.vt_to.is_max


def _range(name: str, lower: int, upper: int) -> RangePredicate:
    return RangePredicate(name, lower, upper)


def _overlap(from_field: str, to_field: str, lo: int, hi: int) -> BooleanPredicate:
    return any_of(
        _range(from_field, lo, hi),
        _range(to_field, lo, hi),
        all_of(_range(from_field, MIN, lo), _range(to_field, hi, MAX)),
    )


class _PartitionQueries:
    """Builds the per-partition sub-predicates for one field and rectangle."""

    def __init__(self, field: str, rect: QueryRectangle) -> None:
        self.field = field
        self.vf = rect.vt_from.millis
        self.vt = rect.vt_to.millis
        self.tf = rect.tt_from.millis
        self.tt = rect.tt_to.millis

    def name(self, partition: Partition, axis: str) -> str:
        return partition_field(self.field, partition, axis)

    def t1(self) -> BooleanPredicate:
        return all_of(
            _range(self.name(Partition.T1, VT_FROM), MIN, self.vt),
            _range(self.name(Partition.T1, TT_FROM), MIN, self.tt),
        )

    def t2(self) -> BooleanPredicate:
        return all_of(
            _overlap(
                self.name(Partition.T2, VT_FROM),
                self.name(Partition.T2, VT_TO),
                self.vf,
                self.vt,
            ),
            _range(self.name(Partition.T2, TT_FROM), MIN, self.tt),
        )

    def t3(self) -> BooleanPredicate:
        lower = max(self.tf, self.vf)
        return all_of(
            _range(self.name(Partition.T3, VT_FROM), MIN, self.vt),
            _overlap(
                self.name(Partition.T3, TT_FROM),
                self.name(Partition.T3, TT_TO),
                lower,
                self.tt,
            ),
        )

    def t4(self) -> BooleanPredicate:
        return all_of(
            _overlap(
                self.name(Partition.T4, VT_FROM),
                self.name(Partition.T4, VT_TO),
                self.vf,
                self.vt,
            ),
            _overlap(
                self.name(Partition.T4, TT_FROM),
                self.name(Partition.T4, TT_TO),
                self.tf,
                self.tt,
            ),
        )


def candidate_partitions(rect: QueryRectangle) -> tuple[Partition, ...]:
    """Partitions whose sub-predicates are emitted for ``rect``.

    An empty tuple means the query collapses to the T1UT2 flag lookup.
    """
    ends_after_valid_start = rect.tt_to.millis >= rect.vt_from.millis
    if not rect.tt_from.is_now:
        if ends_after_valid_start:
            return (Partition.T1, Partition.T2, Partition.T3, Partition.T4)
        return (Partition.T2, Partition.T4)
    if rect.full_valid_window:
        return ()
    if ends_after_valid_start:
        return (Partition.T1, Partition.T2)
    return (Partition.T2,)


def reconstruct(
    rect: QueryRectangle,
    field: str,
    boost: float = 1.0,
) -> Predicate:
    """Predicate matching records of ``field`` whose interval intersects ``rect``.

    The boost goes on the returned top-level predicate only.
    """
    partitions = candidate_partitions(rect)
    if not partitions:
        logger.debug("Query on '%s' reduced to T1UT2 flag lookup", field)
        return ExactPredicate(field + T1UT2_FIELD_SUFFIX, 1, boost=boost)

    queries = _PartitionQueries(field, rect)
    builders = {
        Partition.T1: queries.t1,
        Partition.T2: queries.t2,
        Partition.T3: queries.t3,
        Partition.T4: queries.t4,
    }
    logger.debug(
        "Query on '%s' spans partitions %s", field, ",".join(p.value for p in partitions)
    )
    return any_of(*(builders[p]() for p in partitions)).with_boost(boost)
