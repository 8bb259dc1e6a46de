"""Tests for tool input models and DateRange."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from logseq_mcp.models import (
    AnalyzeOptions,
    DateRange,
    InsertPosition,
    QueryFilters,
    QueryMode,
    QuerySpec,
    ReadOptions,
    WriteOptions,
)


class TestOptions:
    def test_query_filters_camel_case(self):
        f = QueryFilters.model_validate({"propertyValue": "v", "dateRange": "today", "journalOnly": True})
        assert f.property_value == "v"
        assert f.date_range == "today"
        assert f.journal_only is True

    def test_query_filters_snake_case(self):
        f = QueryFilters(property_value="v", limit=3)
        assert f.property_value == "v"
        assert f.limit == 3

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            QueryFilters(limit=-1)

    def test_read_defaults(self):
        o = ReadOptions()
        assert o.include_content is True
        assert o.include_backlinks is False
        assert o.include_properties is True
        assert o.depth is None

    def test_write_position(self):
        assert WriteOptions.model_validate({"position": "first"}).position == InsertPosition.FIRST
        assert WriteOptions().position == InsertPosition.LAST

    def test_analyze_defaults(self):
        o = AnalyzeOptions()
        assert o.limit == 20
        assert o.date_range == "last 7 days"
        assert o.focus_tag is None

    def test_unknown_keys_ignored(self):
        assert ReadOptions.model_validate({"color": "blue"}).include_content is True


class TestDateRange:
    def test_ordered(self):
        r = DateRange(start=datetime(2025, 1, 1), end=datetime(2025, 1, 2), title="t")
        assert r.start < r.end

    def test_reversed_rejected(self):
        with pytest.raises(ValidationError):
            DateRange(start=datetime(2025, 1, 2), end=datetime(2025, 1, 1), title="t")


class TestQuerySpec:
    def test_defaults(self):
        spec = QuerySpec(mode="todos")
        assert spec.mode == QueryMode.TODOS
        assert spec.output.value == "summary"
        assert spec.filters.limit is None
