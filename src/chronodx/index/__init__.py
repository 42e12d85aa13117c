"""Bitemporal partitioning, query reconstruction and the in-memory store."""

from chronodx.index.condition import (
    BitemporalCondition,
    RangeCondition,
    condition_from_dict,
    condition_from_json,
)
from chronodx.index.date_parser import DateParser
from chronodx.index.instant import BitemporalInstant
from chronodx.index.mapper import (
    BitemporalMapper,
    LongMapper,
    Mapper,
    Partition,
    SortField,
    StoredFields,
)
from chronodx.index.predicate import (
    BooleanPredicate,
    Clause,
    ExactPredicate,
    Occur,
    RangePredicate,
)
from chronodx.index.reconstruct import QueryRectangle, reconstruct
from chronodx.index.schema import Schema
from chronodx.index.store import BitemporalIndex, DocumentStore

__all__ = [
    "BitemporalCondition",
    "RangeCondition",
    "condition_from_dict",
    "condition_from_json",
    "DateParser",
    "BitemporalInstant",
    "BitemporalMapper",
    "LongMapper",
    "Mapper",
    "Partition",
    "SortField",
    "StoredFields",
    "BooleanPredicate",
    "Clause",
    "ExactPredicate",
    "Occur",
    "RangePredicate",
    "QueryRectangle",
    "reconstruct",
    "Schema",
    "BitemporalIndex",
    "DocumentStore",
]
