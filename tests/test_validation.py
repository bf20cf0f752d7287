"""
Tests for required-field validation.
"""

import pytest

from eosdash.core.entities import EntityKind
from eosdash.core.validation import REQUIRED_FIELDS, is_missing, validate


class TestIsMissing:
    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        assert is_missing(value) is True

    @pytest.mark.parametrize("value", [0, False, " ", "x", []])
    def test_present(self, value):
        """Test falsy values other than None and "" count as present."""
        assert is_missing(value) is False


class TestValidate:
    """Test validate() per kind."""

    def test_rock_missing_due_date(self):
        result = validate("rock", {"title": "A", "owner": "Bob"})

        assert result.valid is False
        assert result.errors == {"dueDate": "Due date is required"}

    def test_rock_with_due_date_is_valid(self):
        result = validate("rock", {"title": "A", "owner": "Bob", "dueDate": "2026-03-31"})
        assert result.valid is True

    def test_all_missing_reports_each_field(self):
        result = validate(EntityKind.METRIC, {})

        assert result.valid is False
        assert set(result.errors) == {"name", "goal", "owner"}
        assert result.errors["name"] == "Metric name is required"

    def test_valid_person(self):
        result = validate("person", {"name": "Ann", "role": "COO", "seat": "Integrator"})

        assert result.valid is True
        assert result.errors == {}

    def test_empty_string_is_missing(self):
        result = validate("issue", {"title": "", "priority": "high"})
        assert result.errors == {"title": "Issue title is required"}

    def test_unknown_kind_is_valid(self):
        assert validate("widget", {}).valid is True

    def test_every_kind_has_required_fields(self):
        for kind in EntityKind:
            assert REQUIRED_FIELDS[kind.value]

    def test_valid_iff_no_errors(self):
        for kind in EntityKind:
            result = validate(kind, {})
            assert result.valid == (not result.errors)
