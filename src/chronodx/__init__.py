"""
chronodx - bitemporal interval index.

Records carry a valid-time interval and a transaction-time interval. Each
record is stored in one of four partitions depending on which interval ends
are still open, and queries over a valid-time x transaction-time rectangle
are rebuilt as range predicates over those partitions.

Quick Start:
    from chronodx import BitemporalCondition, BitemporalIndex, BitemporalMapper, Schema

    schema = Schema([BitemporalMapper("validity", "vt_from", "vt_to", "tt_from", "tt_to")])
    index = BitemporalIndex(schema)
    index.index("r1", {"vt_from": 1, "vt_to": 2, "tt_from": 3, "tt_to": 4})
    index.search(BitemporalCondition(field="validity", vt_from=0, vt_to=5))
"""

__version__ = "0.3.0"

from chronodx.core.config import Settings, get_settings
from chronodx.core.errors import (
    ChronodxError,
    ConfigurationError,
    InvalidArgumentError,
    InvalidIntervalError,
    MapperMismatchError,
    OutOfRangeError,
    UnsupportedOperationError,
)
from chronodx.index import (
    BitemporalCondition,
    BitemporalIndex,
    BitemporalInstant,
    BitemporalMapper,
    DocumentStore,
    LongMapper,
    Partition,
    QueryRectangle,
    RangeCondition,
    Schema,
    SortField,
    reconstruct,
)

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "ChronodxError",
    "ConfigurationError",
    "InvalidArgumentError",
    "InvalidIntervalError",
    "MapperMismatchError",
    "OutOfRangeError",
    "UnsupportedOperationError",
    "BitemporalCondition",
    "BitemporalIndex",
    "BitemporalInstant",
    "BitemporalMapper",
    "DocumentStore",
    "LongMapper",
    "Partition",
    "QueryRectangle",
    "RangeCondition",
    "Schema",
    "SortField",
    "reconstruct",
]
