"""Tests for query matching, sorting, paging and projection."""

from __future__ import annotations

import pytest

from kblog.infrastructure.query import QueryError, apply_query, matches, sort_documents, split_query

DOCS = [
    {"id": "0", "title": "Alpha", "status": "publish", "tags": ["python"], "views": 10},
    {"id": "1", "title": "Beta", "status": "draft", "tags": ["sqlite", "python"], "views": 3},
    {"id": "2", "title": "Gamma", "status": "publish", "tags": [], "views": 7},
    {"id": "10", "title": "Delta", "status": "trash"},
]


class TestSplitQuery:
    def test_separates_controls(self) -> None:
        filters, controls = split_query({"status": "publish", "$limit": 2, "$sort": {"id": 1}})
        assert filters == {"status": "publish"}
        assert controls == {"$limit": 2, "$sort": {"id": 1}}

    def test_unknown_control_key(self) -> None:
        with pytest.raises(QueryError, match=r"\$where"):
            split_query({"$where": "1"})

    def test_none_is_empty(self) -> None:
        assert split_query(None) == ({}, {})


class TestMatches:
    def test_equality(self) -> None:
        assert matches(DOCS[0], {"status": "publish"})
        assert not matches(DOCS[1], {"status": "publish"})

    def test_list_field_contains(self) -> None:
        assert matches(DOCS[1], {"tags": "sqlite"})
        assert not matches(DOCS[2], {"tags": "sqlite"})

    def test_ne_matches_missing_field(self) -> None:
        assert matches({"id": "x"}, {"internal": {"$ne": True}})
        assert not matches({"id": "x", "internal": True}, {"internal": {"$ne": True}})

    def test_in_and_nin(self) -> None:
        assert matches(DOCS[0], {"status": {"$in": ["publish", "draft"]}})
        assert not matches(DOCS[3], {"status": {"$in": ["publish", "draft"]}})
        assert matches(DOCS[3], {"status": {"$nin": ["publish", "draft"]}})

    def test_range_operators(self) -> None:
        assert matches(DOCS[0], {"views": {"$gt": 5, "$lte": 10}})
        assert not matches(DOCS[1], {"views": {"$gte": 5}})
        assert not matches(DOCS[3], {"views": {"$lt": 100}})

    def test_range_on_digit_ids_is_numeric(self) -> None:
        assert matches(DOCS[3], {"id": {"$gt": "9"}})

    def test_range_on_unicode_digits_is_textual(self) -> None:
        assert matches({"title": "\u00b2"}, {"title": {"$gt": "1"}})
        assert not matches({"title": "\u00b2"}, {"title": {"$lt": "1"}})

    def test_exists(self) -> None:
        assert matches(DOCS[0], {"views": {"$exists": True}})
        assert matches(DOCS[3], {"views": {"$exists": False}})

    def test_unknown_operator(self) -> None:
        with pytest.raises(QueryError, match=r"\$regex"):
            matches(DOCS[0], {"title": {"$regex": "A"}})


class TestSortDocuments:
    def test_digit_strings_sort_numerically(self) -> None:
        ordered = sort_documents(DOCS, {"id": -1})
        assert [d["id"] for d in ordered] == ["10", "2", "1", "0"]

    def test_multi_field(self) -> None:
        ordered = sort_documents(DOCS, {"status": 1, "id": -1})
        assert [d["id"] for d in ordered] == ["1", "2", "0", "10"]

    def test_missing_values_first_ascending(self) -> None:
        ordered = sort_documents(DOCS, {"views": 1})
        assert ordered[0]["id"] == "10"

    def test_unicode_digits_sort_as_text(self) -> None:
        docs = [{"title": t} for t in ("x\u00b2", "\u00b2", "10", "9")]
        ordered = sort_documents(docs, {"title": 1})
        assert [d["title"] for d in ordered] == ["9", "10", "x\u00b2", "\u00b2"]

    def test_bad_direction(self) -> None:
        with pytest.raises(QueryError):
            sort_documents(DOCS, {"id": "up"})


class TestApplyQuery:
    def test_filter_sort_page(self) -> None:
        result = apply_query(DOCS, {"$sort": {"id": 1}, "$skip": 1, "$limit": 2})
        assert [d["id"] for d in result] == ["1", "2"]

    def test_select_keeps_id(self) -> None:
        result = apply_query(DOCS, {"status": "publish", "$select": ["title"]})
        assert result == [{"id": "0", "title": "Alpha"}, {"id": "2", "title": "Gamma"}]

    def test_zero_limit(self) -> None:
        assert apply_query(DOCS, {"$limit": 0}) == []

    def test_no_query_returns_all_in_order(self) -> None:
        assert apply_query(DOCS, None) == DOCS
