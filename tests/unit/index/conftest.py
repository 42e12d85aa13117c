"""Shared fixtures for bitemporal index tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from chronodx.core.config import NOW_SENTINEL
from chronodx.index.mapper import BitemporalMapper, LongMapper
from chronodx.index.schema import Schema
from chronodx.index.store import BitemporalIndex

NOW = NOW_SENTINEL

COLUMNS = ("vt_from", "vt_to", "tt_from", "tt_to")


def make_mapper(
    field: str = "name",
    pattern: str | None = None,
    now_value: Any = None,
) -> BitemporalMapper:
    return BitemporalMapper(
        field,
        vt_from="vt_from",
        vt_to="vt_to",
        tt_from="tt_from",
        tt_to="tt_to",
        pattern=pattern,
        now_value=now_value,
    )


def make_columns(
    vt_from: Any = None,
    vt_to: Any = None,
    tt_from: Any = None,
    tt_to: Any = None,
    **extra: Any,
) -> dict[str, Any]:
    columns = dict(zip(COLUMNS, (vt_from, vt_to, tt_from, tt_to)))
    columns.update(extra)
    return columns


@pytest.fixture
def mapper() -> BitemporalMapper:
    return make_mapper()


@pytest.fixture
def schema(mapper: BitemporalMapper) -> Schema:
    return Schema([mapper, LongMapper("version")])


@pytest.fixture
def index(schema: Schema) -> BitemporalIndex:
    return BitemporalIndex(schema)
