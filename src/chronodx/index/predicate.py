"""Predicate trees over stored integer fields.

Leaves are inclusive numeric ranges and exact matches; inner nodes combine
clauses with MUST/SHOULD occurrence, the way the document store evaluates
them. Predicates are descriptions only: evaluation against a document's
stored fields lives here so the store and the tests share one semantics.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class Occur(str, Enum):
    """How a clause takes part in a boolean predicate."""

    MUST = "must"
    SHOULD = "should"


@dataclass(frozen=True, slots=True)
class RangePredicate:
    """Numeric range test on a single stored field."""

    field: str
    lower: int
    upper: int
    include_lower: bool = True
    include_upper: bool = True
    boost: float = 1.0

    def matches(self, doc: Mapping[str, int]) -> bool:
        value = doc.get(self.field)
        if value is None:
            return False
        if value < self.lower or (value == self.lower and not self.include_lower):
            return False
        if value > self.upper or (value == self.upper and not self.include_upper):
            return False
        return True

    def score(self, doc: Mapping[str, int]) -> float | None:
        return self.boost if self.matches(doc) else None

    def fields(self) -> Iterator[str]:
        yield self.field

    def with_boost(self, boost: float) -> RangePredicate:
        return replace(self, boost=boost)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "range",
            "field": self.field,
            "lower": self.lower,
            "upper": self.upper,
            "include_lower": self.include_lower,
            "include_upper": self.include_upper,
            "boost": self.boost,
        }


@dataclass(frozen=True, slots=True)
class ExactPredicate:
    """Exact match on a small integer field (e.g. a flag)."""

    field: str
    value: int
    boost: float = 1.0

    def matches(self, doc: Mapping[str, int]) -> bool:
        return doc.get(self.field) == self.value

    def score(self, doc: Mapping[str, int]) -> float | None:
        return self.boost if self.matches(doc) else None

    def fields(self) -> Iterator[str]:
        yield self.field

    def with_boost(self, boost: float) -> ExactPredicate:
        return replace(self, boost=boost)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "exact", "field": self.field, "value": self.value, "boost": self.boost}


@dataclass(frozen=True, slots=True)
class Clause:
    occur: Occur
    predicate: Predicate


@dataclass(frozen=True, slots=True)
class BooleanPredicate:
    """Combination of clauses.

    Every MUST clause has to match. Without MUST clauses at least one SHOULD
    clause has to match. An empty boolean matches nothing.
    """

    clauses: tuple[Clause, ...] = field(default_factory=tuple)
    boost: float = 1.0

    @property
    def must(self) -> list[Predicate]:
        return [c.predicate for c in self.clauses if c.occur is Occur.MUST]

    @property
    def should(self) -> list[Predicate]:
        return [c.predicate for c in self.clauses if c.occur is Occur.SHOULD]

    def matches(self, doc: Mapping[str, int]) -> bool:
        must = self.must
        if must:
            return all(p.matches(doc) for p in must)
        return any(p.matches(doc) for p in self.should)

    def score(self, doc: Mapping[str, int]) -> float | None:
        if not self.matches(doc):
            return None
        total = 0.0
        for clause in self.clauses:
            s = clause.predicate.score(doc)
            if s is not None:
                total += s
        return self.boost * total

    def fields(self) -> Iterator[str]:
        for clause in self.clauses:
            yield from clause.predicate.fields()

    def with_boost(self, boost: float) -> BooleanPredicate:
        return replace(self, boost=boost)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": "boolean"}
        must = self.must
        should = self.should
        if must:
            out["must"] = [p.to_dict() for p in must]
        if should:
            out["should"] = [p.to_dict() for p in should]
        out["boost"] = self.boost
        return out


Predicate = RangePredicate | ExactPredicate | BooleanPredicate


def all_of(*predicates: Predicate) -> BooleanPredicate:
    """Boolean predicate requiring every argument (MUST clauses)."""
    return BooleanPredicate(tuple(Clause(Occur.MUST, p) for p in predicates))


def any_of(*predicates: Predicate) -> BooleanPredicate:
    """Boolean predicate satisfied by any argument (SHOULD clauses)."""
    return BooleanPredicate(tuple(Clause(Occur.SHOULD, p) for p in predicates))
