"""Schema: field name -> mapper registry, built from code or from options."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chronodx.core.config import Settings
from chronodx.core.errors import ConfigurationError, MapperMismatchError
from chronodx.index.mapper import BitemporalMapper, LongMapper, Mapper, SortField

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=Mapper)


class BitemporalMapperOptions(BaseModel):
    """Schema options for a bitemporal field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["bitemporal"] = "bitemporal"
    vt_from: str | None = None
    vt_to: str | None = None
    tt_from: str | None = None
    tt_to: str | None = None
    pattern: str | None = None
    now_value: int | str | None = None

    def build(self, name: str, settings: Settings | None = None) -> BitemporalMapper:
        pattern = self.pattern
        now_value = self.now_value
        if settings is not None:
            pattern = pattern or settings.date_pattern
            now_value = now_value if now_value is not None else settings.now_value
        return BitemporalMapper(
            name,
            vt_from=self.vt_from,
            vt_to=self.vt_to,
            tt_from=self.tt_from,
            tt_to=self.tt_to,
            pattern=pattern,
            now_value=now_value,
        )


class LongMapperOptions(BaseModel):
    """Schema options for a plain 64-bit integer field."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["long"] = "long"
    column: str | None = None

    def build(self, name: str, settings: Settings | None = None) -> LongMapper:
        return LongMapper(name, column=self.column)


MapperOptions = Annotated[
    BitemporalMapperOptions | LongMapperOptions,
    Field(discriminator="type"),
]

_OPTIONS_ADAPTER: TypeAdapter[dict[str, MapperOptions]] = TypeAdapter(dict[str, MapperOptions])


class Schema:
    """Registry of mappers keyed by field name."""

    def __init__(self, mappers: list[Mapper] | None = None) -> None:
        self._mappers: dict[str, Mapper] = {}
        for mapper in mappers or []:
            self.add(mapper)

    @classmethod
    def from_dict(cls, data: dict[str, Any], settings: Settings | None = None) -> Schema:
        """Build a schema from ``{"fields": {name: options}}``.

        Raises:
            ConfigurationError: If the options are malformed or a mapper rejects them.
        """
        try:
            options = _OPTIONS_ADAPTER.validate_python(data.get("fields", {}))
        except PydanticValidationError as e:
            raise ConfigurationError(f"Invalid schema options: {e}") from e
        schema = cls([opts.build(name, settings) for name, opts in options.items()])
        logger.info("Built schema with %d mappers", len(schema))
        return schema

    def add(self, mapper: Mapper) -> None:
        if mapper.field in self._mappers:
            raise ConfigurationError(f"Field '{mapper.field}' is already mapped")
        self._mappers[mapper.field] = mapper

    def get_mapper(self, field: str) -> Mapper | None:
        return self._mappers.get(field)

    def mapper_for(self, field: str, mapper_type: type[M]) -> M:
        """Return the mapper of ``field``, which must be a ``mapper_type``.

        Raises:
            MapperMismatchError: If the field is unmapped or mapped differently.
        """
        mapper = self._mappers.get(field)
        if mapper is None:
            raise MapperMismatchError(f"No mapper found for field '{field}'")
        if not isinstance(mapper, mapper_type):
            raise MapperMismatchError(
                f"Field '{field}' requires a mapper of type '{mapper_type.__name__}' "
                f"but found '{type(mapper).__name__}'"
            )
        return mapper

    def validate_sort(self, sort_fields: list[SortField]) -> list[SortField]:
        """Resolve sort fields through their mappers.

        Raises:
            MapperMismatchError: If a sort field is unmapped.
            UnsupportedOperationError: If a mapper refuses to sort.
        """
        resolved = []
        for sort_field in sort_fields:
            mapper = self._mappers.get(sort_field.field)
            if mapper is None:
                raise MapperMismatchError(f"No mapper found for sort field '{sort_field.field}'")
            resolved.append(mapper.sort_field(sort_field.field, sort_field.reverse))
        return resolved

    @property
    def mappers(self) -> list[Mapper]:
        return list(self._mappers.values())

    def __len__(self) -> int:
        return len(self._mappers)

    def __contains__(self, field: str) -> bool:
        return field in self._mappers
