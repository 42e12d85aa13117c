"""Secondary index for integer-range lookups on one stored field, using sorted bisect."""

from __future__ import annotations

import bisect


class FieldIndex:
    """Maintains sorted ``(value, doc_id)`` pairs for O(log N) range queries."""

    def __init__(self) -> None:
        # Parallel lists sorted by value
        self._values: list[int] = []
        self._ids: list[str] = []
        # Reverse lookup: doc_id -> value (for update/remove)
        self._id_to_value: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._values)

    def add(self, doc_id: str, value: int) -> None:
        """Add a document's value; replaces any previous value."""
        if doc_id in self._id_to_value:
            self.remove(doc_id)
        self._id_to_value[doc_id] = value
        idx = bisect.bisect_right(self._values, value)
        self._values.insert(idx, value)
        self._ids.insert(idx, doc_id)

    def remove(self, doc_id: str) -> None:
        value = self._id_to_value.pop(doc_id, None)
        if value is None:
            return
        lo = bisect.bisect_left(self._values, value)
        hi = bisect.bisect_right(self._values, value)
        for idx in range(lo, hi):
            if self._ids[idx] == doc_id:
                del self._values[idx]
                del self._ids[idx]
                return

    def value_of(self, doc_id: str) -> int | None:
        return self._id_to_value.get(doc_id)

    def query_range(
        self,
        lower: int,
        upper: int,
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> set[str]:
        """Return doc ids with value in the range. O(log N + result size)."""
        if include_lower:
            lo = bisect.bisect_left(self._values, lower)
        else:
            lo = bisect.bisect_right(self._values, lower)
        if include_upper:
            hi = bisect.bisect_right(self._values, upper)
        else:
            hi = bisect.bisect_left(self._values, upper)
        return set(self._ids[lo:hi])

    def query_exact(self, value: int) -> set[str]:
        return self.query_range(value, value)
