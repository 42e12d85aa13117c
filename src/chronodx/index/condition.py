"""Search conditions and their JSON form.

Conditions are immutable pydantic models. Unset values are omitted from the
encoded form, so decoding an encoded condition gives back an equal one.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from chronodx.index.mapper import BitemporalMapper, LongMapper
from chronodx.index.predicate import Predicate, RangePredicate
from chronodx.index.reconstruct import QueryRectangle, reconstruct
from chronodx.index.schema import Schema

DEFAULT_BOOST = 1.0

LONG_MIN = -(2**63)
LONG_MAX = 2**63 - 1

Bound = int | str | None


class _Condition(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("field", check_fields=False)
    @classmethod
    def validate_field(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("field name is required")
        return v

    def effective_boost(self, default: float = DEFAULT_BOOST) -> float:
        return self.boost if self.boost is not None else default

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


class BitemporalCondition(_Condition):
    """Matches records whose bitemporal interval intersects the given bounds.

    Each bound is epoch millis or a string in the mapper's date pattern;
    unset bounds leave that side of the axis unbounded.
    """

    type: Literal["bitemporal"] = "bitemporal"
    field: str
    boost: float | None = None
    vt_from: Bound = None
    vt_to: Bound = None
    tt_from: Bound = None
    tt_to: Bound = None

    def to_dict(self) -> dict[str, Any]:
        """Set fields only; ``type`` is left out since decoding defaults to bitemporal."""
        data = super().to_dict()
        del data["type"]
        return data

    def rectangle(self, mapper: BitemporalMapper) -> QueryRectangle:
        """Parse the bounds with the mapper's date parser, defaulting unset ones."""
        defaults = QueryRectangle()
        bounds = {}
        for name in ("vt_from", "vt_to", "tt_from", "tt_to"):
            raw = getattr(self, name)
            bounds[name] = mapper.parse_instant(raw) if raw is not None else getattr(defaults, name)
        return QueryRectangle(**bounds)

    def query(self, schema: Schema, default_boost: float = DEFAULT_BOOST) -> Predicate:
        mapper = schema.mapper_for(self.field, BitemporalMapper)
        return reconstruct(self.rectangle(mapper), mapper.field, self.effective_boost(default_boost))

    def __str__(self) -> str:
        return (
            f"BitemporalCondition{{boost={self.boost}, field={self.field}, "
            f"vtFrom={self.vt_from}, vtTo={self.vt_to}, "
            f"ttFrom={self.tt_from}, ttTo={self.tt_to}}}"
        )


class RangeCondition(_Condition):
    """Matches records whose integer field falls in ``[lower, upper]``."""

    type: Literal["range"] = "range"
    field: str
    boost: float | None = None
    lower: int | None = None
    upper: int | None = None
    include_lower: bool = True
    include_upper: bool = True

    def query(self, schema: Schema, default_boost: float = DEFAULT_BOOST) -> Predicate:
        mapper = schema.mapper_for(self.field, LongMapper)
        return RangePredicate(
            mapper.field,
            self.lower if self.lower is not None else LONG_MIN,
            self.upper if self.upper is not None else LONG_MAX,
            include_lower=self.include_lower,
            include_upper=self.include_upper,
            boost=self.effective_boost(default_boost),
        )


Condition = Annotated[BitemporalCondition | RangeCondition, Field(discriminator="type")]

_CONDITION_ADAPTER: TypeAdapter[Condition] = TypeAdapter(Condition)


def condition_from_dict(data: dict[str, Any]) -> BitemporalCondition | RangeCondition:
    """Decode a condition; ``type`` selects the condition class (default bitemporal)."""
    if "type" not in data:
        data = {"type": "bitemporal", **data}
    return _CONDITION_ADAPTER.validate_python(data)


def condition_from_json(text: str) -> BitemporalCondition | RangeCondition:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Condition JSON must be an object, got {type(data).__name__}")
    return condition_from_dict(data)
