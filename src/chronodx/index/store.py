"""In-memory document store and the bitemporal index facade over it.

``DocumentStore`` plays the storage engine: it keeps each document's
integer fields, a ``FieldIndex`` per field, and evaluates predicate trees
(candidate sets from the indexes, scores from the predicates).
``BitemporalIndex`` runs a schema's mappers on ingestion and turns
conditions into predicates on search.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from typing import Any

from chronodx.core.config import get_settings
from chronodx.core.errors import ValidationError
from chronodx.index.condition import BitemporalCondition, RangeCondition
from chronodx.index.field_index import FieldIndex
from chronodx.index.mapper import SortField
from chronodx.index.predicate import (
    BooleanPredicate,
    ExactPredicate,
    Predicate,
    RangePredicate,
)
from chronodx.index.schema import Schema

logger = logging.getLogger(__name__)


class DocumentStore:
    """Stores integer fields per document and answers predicate searches."""

    def __init__(self) -> None:
        self._docs: dict[str, dict[str, int]] = {}
        self._indexes: dict[str, FieldIndex] = {}

    def __len__(self) -> int:
        return len(self._docs)

    # --- mutations ---

    def put(self, doc_id: str, fields: Mapping[str, int]) -> None:
        """Insert or replace a document."""
        if doc_id in self._docs:
            self.delete(doc_id)
        self._docs[doc_id] = dict(fields)
        for name, value in fields.items():
            self._indexes.setdefault(name, FieldIndex()).add(doc_id, value)

    def delete(self, doc_id: str) -> None:
        fields = self._docs.pop(doc_id, None)
        if fields is None:
            return
        for name in fields:
            self._indexes[name].remove(doc_id)

    # --- reads ---

    def get(self, doc_id: str) -> dict[str, int] | None:
        doc = self._docs.get(doc_id)
        return dict(doc) if doc is not None else None

    def candidates(self, predicate: Predicate) -> set[str]:
        """Doc ids satisfying ``predicate``, resolved through the field indexes."""
        if isinstance(predicate, RangePredicate):
            index = self._indexes.get(predicate.field)
            if index is None:
                return set()
            return index.query_range(
                predicate.lower,
                predicate.upper,
                predicate.include_lower,
                predicate.include_upper,
            )
        if isinstance(predicate, ExactPredicate):
            index = self._indexes.get(predicate.field)
            return index.query_exact(predicate.value) if index is not None else set()
        if isinstance(predicate, BooleanPredicate):
            must = predicate.must
            if must:
                result = self.candidates(must[0])
                for sub in must[1:]:
                    if not result:
                        break
                    result &= self.candidates(sub)
                return result
            result = set()
            for sub in predicate.should:
                result |= self.candidates(sub)
            return result
        raise TypeError(f"Unknown predicate type: {type(predicate).__name__}")

    def search(self, predicate: Predicate) -> list[tuple[str, float]]:
        """Matching (doc_id, score) pairs, best score first."""
        results = []
        for doc_id in self.candidates(predicate):
            score = predicate.score(self._docs[doc_id])
            if score is not None:
                results.append((doc_id, score))
        results.sort(key=lambda x: (-x[1], x[0]))
        return results

    def value(self, doc_id: str, field: str) -> int | None:
        index = self._indexes.get(field)
        return index.value_of(doc_id) if index is not None else None


class BitemporalIndex:
    """Indexes records through a schema and searches them with conditions."""

    def __init__(
        self,
        schema: Schema,
        store: DocumentStore | None = None,
        default_boost: float | None = None,
    ) -> None:
        if default_boost is None:
            default_boost = get_settings().default_boost
        self._schema = schema
        self._store = store if store is not None else DocumentStore()
        self._default_boost = default_boost
        self._lock = threading.RLock()
        logger.info("BitemporalIndex created with %d mappers", len(schema))

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def store(self) -> DocumentStore:
        return self._store

    def index(self, doc_id: str, columns: Mapping[str, Any]) -> dict[str, int]:
        """Run every mapper over ``columns`` and store the resulting fields.

        Raises:
            ValidationError: If a mapper rejects the record; nothing is stored.
        """
        fields: dict[str, int] = {}
        try:
            for mapper in self._schema.mappers:
                fields.update(mapper.document_fields(columns))
        except ValidationError as e:
            logger.warning("Rejected record '%s': %s", doc_id, e)
            raise
        with self._lock:
            self._store.put(doc_id, fields)
        logger.debug("Indexed record '%s' with %d fields", doc_id, len(fields))
        return fields

    def delete(self, doc_id: str) -> None:
        with self._lock:
            self._store.delete(doc_id)

    def query(self, condition: BitemporalCondition | RangeCondition) -> Predicate:
        return condition.query(self._schema, self._default_boost)

    def search(
        self,
        condition: BitemporalCondition | RangeCondition,
        sort: list[SortField] | None = None,
        limit: int | None = None,
    ) -> list[tuple[str, float]]:
        """Search with a condition, optionally sorted by sortable fields.

        Raises:
            MapperMismatchError: If the condition or a sort field targets an
                unmapped or differently-mapped field.
            UnsupportedOperationError: If sorting by a bitemporal field.
        """
        resolved = self._schema.validate_sort(sort) if sort else []
        predicate = self.query(condition)
        with self._lock:
            hits = self._store.search(predicate)
            for sort_field in reversed(resolved):
                hits.sort(key=self._sort_key(sort_field))
        if limit is not None:
            hits = hits[:limit]
        return hits

    def _sort_key(self, sort_field: SortField):
        def key(hit: tuple[str, float]) -> tuple[bool, int]:
            value = self._store.value(hit[0], sort_field.field)
            if value is None:
                return (True, 0)
            return (False, -value if sort_field.reverse else value)

        return key

    def __len__(self) -> int:
        return len(self._store)
