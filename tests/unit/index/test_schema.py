"""Tests for Schema and mapper options."""

import pytest

from chronodx.core.config import Settings
from chronodx.core.errors import ConfigurationError, MapperMismatchError, UnsupportedOperationError
from chronodx.index.mapper import BitemporalMapper, LongMapper, SortField
from chronodx.index.schema import BitemporalMapperOptions, LongMapperOptions, Schema
from tests.unit.index.conftest import make_mapper

BITEMPORAL_OPTIONS = {
    "type": "bitemporal",
    "vt_from": "a",
    "vt_to": "b",
    "tt_from": "c",
    "tt_to": "d",
}


class TestFromDict:
    def test_builds_mappers(self):
        schema = Schema.from_dict(
            {
                "fields": {
                    "validity": {**BITEMPORAL_OPTIONS, "pattern": "timestamp", "now_value": 500},
                    "version": {"type": "long", "column": "v"},
                }
            }
        )
        assert len(schema) == 2
        validity = schema.get_mapper("validity")
        assert isinstance(validity, BitemporalMapper)
        assert validity.vt_from == "a"
        assert validity.pattern == "timestamp"
        assert validity.now_value == 500
        assert schema.get_mapper("version").column == "v"

    def test_empty(self):
        assert len(Schema.from_dict({})) == 0

    def test_missing_column(self):
        options = {k: v for k, v in BITEMPORAL_OPTIONS.items() if k != "tt_from"}
        with pytest.raises(ConfigurationError, match="tt_from column name is required"):
            Schema.from_dict({"fields": {"validity": options}})

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError, match="Invalid schema options"):
            Schema.from_dict({"fields": {"validity": {"type": "geo"}}})

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError):
            Schema.from_dict({"fields": {"validity": {**BITEMPORAL_OPTIONS, "start": "x"}}})

    def test_settings_fill_unset_options(self):
        settings = Settings(date_pattern="timestamp", now_value=1000)
        schema = Schema.from_dict({"fields": {"validity": BITEMPORAL_OPTIONS}}, settings)
        mapper = schema.get_mapper("validity")
        assert mapper.pattern == "timestamp"
        assert mapper.now_value == 1000

    def test_options_override_settings(self):
        settings = Settings(date_pattern="timestamp", now_value=1000)
        options = BitemporalMapperOptions(**BITEMPORAL_OPTIONS, pattern="%Y", now_value=0)
        mapper = options.build("validity", settings)
        assert mapper.pattern == "%Y"
        assert mapper.now_value == 0

    def test_long_options(self):
        assert isinstance(LongMapperOptions().build("n"), LongMapper)


class TestRegistry:
    def test_duplicate_field(self):
        schema = Schema([make_mapper()])
        with pytest.raises(ConfigurationError, match="already mapped"):
            schema.add(LongMapper("name"))

    def test_contains(self, schema):
        assert "name" in schema
        assert "missing" not in schema
        assert [m.field for m in schema.mappers] == ["name", "version"]

    def test_mapper_for(self, schema, mapper):
        assert schema.mapper_for("name", BitemporalMapper) is mapper

    def test_mapper_for_mismatch(self, schema):
        with pytest.raises(MapperMismatchError, match="but found 'LongMapper'"):
            schema.mapper_for("version", BitemporalMapper)


class TestValidateSort:
    def test_long_field(self, schema):
        assert schema.validate_sort([SortField("version", reverse=True)]) == [
            SortField("version", reverse=True)
        ]

    def test_bitemporal_field(self, schema):
        with pytest.raises(UnsupportedOperationError):
            schema.validate_sort([SortField("version"), SortField("name")])

    def test_unmapped_field(self, schema):
        with pytest.raises(MapperMismatchError, match="No mapper found for sort field 'missing'"):
            schema.validate_sort([SortField("missing")])
