"""Tests for DocumentStore and the BitemporalIndex facade."""

import logging

import pytest

from chronodx.core.config import reset_settings
from chronodx.core.errors import (
    InvalidArgumentError,
    InvalidIntervalError,
    MapperMismatchError,
    UnsupportedOperationError,
)
from chronodx.index.condition import BitemporalCondition, RangeCondition
from chronodx.index.mapper import SortField
from chronodx.index.predicate import ExactPredicate, RangePredicate, all_of, any_of
from chronodx.index.store import BitemporalIndex, DocumentStore
from tests.unit.index.conftest import NOW, make_columns


class TestDocumentStore:
    def test_put_and_get(self):
        store = DocumentStore()
        store.put("a", {"x": 1})
        assert store.get("a") == {"x": 1}
        assert store.get("b") is None
        assert len(store) == 1

    def test_put_replaces(self):
        store = DocumentStore()
        store.put("a", {"x": 1, "y": 2})
        store.put("a", {"x": 5})
        assert store.get("a") == {"x": 5}
        assert store.candidates(RangePredicate("y", 0, 10)) == set()
        assert store.candidates(RangePredicate("x", 0, 1)) == set()

    def test_delete(self):
        store = DocumentStore()
        store.put("a", {"x": 1})
        store.delete("a")
        store.delete("a")
        assert len(store) == 0
        assert store.candidates(ExactPredicate("x", 1)) == set()

    def test_candidates_boolean(self):
        store = DocumentStore()
        store.put("a", {"x": 1, "y": 1})
        store.put("b", {"x": 1, "y": 9})
        store.put("c", {"x": 9, "y": 1})
        both = all_of(RangePredicate("x", 0, 5), RangePredicate("y", 0, 5))
        either = any_of(RangePredicate("x", 0, 5), RangePredicate("y", 0, 5))
        assert store.candidates(both) == {"a"}
        assert store.candidates(either) == {"a", "b", "c"}

    def test_unknown_field(self):
        assert DocumentStore().candidates(RangePredicate("nope", 0, 1)) == set()

    def test_unknown_predicate_type(self):
        with pytest.raises(TypeError, match="Unknown predicate type"):
            DocumentStore().candidates("x > 1")

    def test_search_orders_by_score_then_id(self):
        store = DocumentStore()
        store.put("b", {"x": 1, "y": 1})
        store.put("a", {"x": 1})
        store.put("c", {"x": 1, "y": 1})
        hits = store.search(any_of(RangePredicate("x", 0, 5), RangePredicate("y", 0, 5)))
        assert hits == [("b", 2.0), ("c", 2.0), ("a", 1.0)]


class TestBitemporalIndex:
    def test_index_stores_all_mapper_fields(self, index):
        fields = index.index("r1", make_columns(1, 2, 3, 4, version=7))
        assert fields["name.T4.vtFrom"] == 1
        assert fields["version"] == 7
        assert index.store.get("r1") == fields
        assert len(index) == 1

    def test_record_without_bitemporal_data(self, index):
        fields = index.index("r1", {"version": 2})
        assert fields == {"version": 2}

    def test_rejected_record_not_stored(self, index, caplog):
        with caplog.at_level(logging.WARNING, logger="chronodx.index.store"):
            with pytest.raises(InvalidIntervalError):
                index.index("bad", make_columns(1, 2, 3, None))
        assert len(index) == 0
        assert "Rejected record 'bad'" in caplog.text

    def test_eternal_record_found_by_flag_lookup(self, index):
        index.index("r1", make_columns(0, NOW, 0, NOW))
        index.index("r2", make_columns(0, NOW, 0, 10))
        condition = BitemporalCondition(field="name", tt_from=NOW)
        assert isinstance(index.query(condition), ExactPredicate)
        assert index.search(condition) == [("r1", 1.0)]

    def test_search_by_rectangle(self, index):
        index.index("t1", make_columns(0, NOW, 0, NOW))
        index.index("t2", make_columns(5, 15, 0, NOW))
        index.index("t3", make_columns(25, NOW, 0, 3))
        index.index("t4", make_columns(30, 40, 0, 50))
        hits = index.search(BitemporalCondition(field="name", vt_from=10, vt_to=20, tt_from=0, tt_to=20))
        assert {doc_id for doc_id, _ in hits} == {"t1", "t2"}

    def test_search_boost(self, index):
        index.index("r1", make_columns(0, NOW, 0, NOW))
        hits = index.search(BitemporalCondition(field="name", boost=0.5))
        assert hits[0][1] == pytest.approx(1.0)

    def test_default_boost(self, schema):
        index = BitemporalIndex(schema, default_boost=3.0)
        index.index("r1", make_columns(0, NOW, 0, NOW))
        assert index.search(BitemporalCondition(field="name", tt_from=NOW)) == [("r1", 3.0)]

    def test_default_boost_from_settings(self, schema, monkeypatch):
        monkeypatch.setenv("CHRONODX_DEFAULT_BOOST", "3.0")
        reset_settings()
        predicate = BitemporalIndex(schema).query(BitemporalCondition(field="name", vt_from=1))
        assert predicate.boost == 3.0

    def test_explicit_default_boost_beats_settings(self, schema, monkeypatch):
        monkeypatch.setenv("CHRONODX_DEFAULT_BOOST", "3.0")
        reset_settings()
        predicate = BitemporalIndex(schema, default_boost=0.5).query(BitemporalCondition(field="name", vt_from=1))
        assert predicate.boost == 0.5

    def test_non_finite_column_rejected_and_logged(self, index, caplog):
        with caplog.at_level(logging.WARNING, logger="chronodx.index.store"):
            with pytest.raises(InvalidArgumentError):
                index.index("nan", make_columns(float("nan"), 5, 1, 2))
        assert len(index) == 0
        assert "Rejected record 'nan'" in caplog.text

    def test_delete(self, index):
        index.index("r1", make_columns(0, NOW, 0, NOW))
        index.delete("r1")
        assert index.search(BitemporalCondition(field="name")) == []

    def test_reindex_moves_partition(self, index):
        index.index("r1", make_columns(0, NOW, 0, NOW))
        index.index("r1", make_columns(0, NOW, 0, 10))
        assert index.search(BitemporalCondition(field="name", tt_from=NOW)) == []
        assert index.store.get("r1")["name.T1UT2"] == 0

    def test_range_condition(self, index):
        index.index("r1", {"version": 1})
        index.index("r2", {"version": 5})
        hits = index.search(RangeCondition(field="version", lower=3))
        assert hits == [("r2", 1.0)]

    def test_sort_by_long_field(self, index):
        for doc_id, version in (("a", 2), ("b", 9), ("c", 5)):
            index.index(doc_id, make_columns(0, NOW, 0, NOW, version=version))
        index.index("d", make_columns(0, NOW, 0, NOW))
        condition = BitemporalCondition(field="name")
        assert [h[0] for h in index.search(condition, sort=[SortField("version")])] == ["a", "c", "b", "d"]
        assert [h[0] for h in index.search(condition, sort=[SortField("version", reverse=True)])] == [
            "b",
            "c",
            "a",
            "d",
        ]

    def test_limit(self, index):
        for i in range(5):
            index.index(f"r{i}", make_columns(0, NOW, 0, NOW, version=i))
        hits = index.search(BitemporalCondition(field="name"), sort=[SortField("version")], limit=2)
        assert [h[0] for h in hits] == ["r0", "r1"]

    def test_sort_by_bitemporal_field_refused(self, index):
        with pytest.raises(UnsupportedOperationError):
            index.search(BitemporalCondition(field="name"), sort=[SortField("name")])

    def test_condition_on_unmapped_field(self, index):
        with pytest.raises(MapperMismatchError):
            index.search(BitemporalCondition(field="missing"))
