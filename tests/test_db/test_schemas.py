"""Tests for Pydantic schemas."""

import math

import pytest
from pydantic import ValidationError

from pagetime.db.schemas import DocumentSummary, PageTimeEntry, validate_page_times
from pagetime.errors import InvalidPageTimeError


class TestPageTimeEntry:
    """Tests for PageTimeEntry schema."""

    def test_valid_entry(self):
        """Test a valid entry."""
        entry = PageTimeEntry(page_number=3, seconds=42)

        assert entry.page_number == 3
        assert entry.seconds == 42.0

    def test_zero_seconds_allowed(self):
        """Test a page with no time yet is valid."""
        assert PageTimeEntry(page_number=1, seconds=0).seconds == 0.0

    @pytest.mark.parametrize("page", [0, -1, True, "abc"])
    def test_invalid_page(self, page):
        """Test invalid page numbers."""
        with pytest.raises(ValidationError):
            PageTimeEntry(page_number=page, seconds=1.0)

    @pytest.mark.parametrize("seconds", [-1.0, math.inf, math.nan, False])
    def test_invalid_seconds(self, seconds):
        """Test negative, non-finite and boolean seconds."""
        with pytest.raises(ValidationError):
            PageTimeEntry(page_number=1, seconds=seconds)


class TestValidatePageTimes:
    """Tests for validate_page_times."""

    def test_empty(self):
        """Test None and empty maps validate to an empty dict."""
        assert validate_page_times(None) == {}
        assert validate_page_times({}) == {}

    def test_string_keys(self):
        """Test JSON-style string keys become ints."""
        assert validate_page_times({"1": 10, "12": 2.5}) == {1: 10.0, 12: 2.5}

    def test_invalid_entry(self):
        """Test one bad entry rejects the whole map."""
        with pytest.raises(InvalidPageTimeError, match="Invalid page time"):
            validate_page_times({1: 10.0, 2: -4.0})

    def test_invalid_page_time_is_value_error(self):
        """Test callers catching ValueError also see validation failures."""
        with pytest.raises(ValueError):
            validate_page_times({"x": 1.0})


class TestDocumentSummary:
    """Tests for DocumentSummary schema."""

    def test_defaults(self):
        """Test summary defaults."""
        summary = DocumentSummary(document_id="doc")

        assert summary.pages_timed == 0
        assert summary.total_seconds == 0.0
        assert summary.last_updated is None
