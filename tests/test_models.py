"""Unit tests for ChorePoints models."""
from __future__ import annotations

from datetime import date

import pytest

from custom_components.chorepoints.models import (
    DailyInstance,
    DocumentModel,
    Role,
    TaskDefinition,
    clean_text,
    format_date,
    normalize_priority,
    normalize_repeat_days,
    normalize_repeat_type,
    normalize_repeat_until,
    parse_date,
    positive_int,
)


class TestRole:
    """Test Role model."""

    def test_role_defaults(self):
        """A new role starts with no points."""
        role = Role(id="r1", name="Alice")
        assert role.points == 0


class TestTaskDefinition:
    """Test TaskDefinition model."""

    def test_defaults(self):
        """Test TaskDefinition default values."""
        td = TaskDefinition(id="t1", role_id="r1", title="Dishes", points=5)
        assert td.note == ""
        assert td.repeat_type == "daily"
        assert td.repeat_days == []
        assert td.repeat_until is None
        assert td.priority == "medium"
        assert td.is_weekly() is False

    def test_weekly(self):
        td = TaskDefinition(id="t1", role_id="r1", title="Trash", points=5, repeat_type="weekly", repeat_days=[1])
        assert td.is_weekly() is True


class TestDailyInstance:
    """Test DailyInstance model."""

    def test_from_task_def_snapshots_fields(self):
        """Instances copy title, points, note and role from the definition."""
        td = TaskDefinition(id="t1", role_id="r1", title="Dishes", points=5, note="After dinner")
        instance = DailyInstance.from_task_def(td)

        assert instance.task_def_id == "t1"
        assert instance.role_id == "r1"
        assert instance.title == "Dishes"
        assert instance.points == 5
        assert instance.note == "After dinner"
        assert instance.completed is False
        assert instance.completed_at is None

        td.points = 50
        assert instance.points == 5


class TestDocumentModel:
    """Test DocumentModel defaults."""

    def test_empty_document(self):
        doc = DocumentModel()
        assert doc.roles == []
        assert doc.task_defs == []
        assert doc.daily_tasks == {}
        assert doc.rewards == []


class TestDates:
    """Test date parsing and formatting."""

    def test_parse_canonical(self):
        assert parse_date("2025-01-06") == date(2025, 1, 6)

    @pytest.mark.parametrize("value", ["2025-1-6", "2025-02-30", "06/01/2025", "", None, "2025-01-06T00:00"])
    def test_parse_rejects_non_canonical(self, value):
        with pytest.raises(ValueError):
            parse_date(value)

    def test_format_zero_pads(self):
        assert format_date(date(2025, 3, 7)) == "2025-03-07"


class TestNormalization:
    """Test the registry boundary normalizers."""

    def test_clean_text(self):
        assert clean_text("  Dishes ") == "Dishes"
        assert clean_text("   ") is None
        assert clean_text(None) is None
        assert clean_text(5) is None

    def test_positive_int(self):
        assert positive_int(5) == 5
        assert positive_int("7") == 7
        assert positive_int(0) is None
        assert positive_int(-3) is None
        assert positive_int("abc") is None
        assert positive_int(None) is None
        assert positive_int(True) is None

    def test_repeat_type(self):
        assert normalize_repeat_type("weekly") == "weekly"
        assert normalize_repeat_type("daily") == "daily"
        assert normalize_repeat_type("monthly") == "daily"
        assert normalize_repeat_type(None) == "daily"

    def test_priority(self):
        assert normalize_priority("high") == "high"
        assert normalize_priority("urgent") == "medium"
        assert normalize_priority(None) == "medium"

    def test_repeat_days_coerces_and_dedupes(self):
        """Numeric strings become ints; duplicates, junk and out-of-range values go."""
        assert normalize_repeat_days(["1", 1, 3, "x", 9, -1, None, 0]) == [0, 1, 3]

    def test_repeat_days_non_list(self):
        assert normalize_repeat_days(None) == []
        assert normalize_repeat_days("1,2") == []
        assert normalize_repeat_days(5) == []

    def test_repeat_until(self):
        assert normalize_repeat_until("2025-01-31") == "2025-01-31"
        assert normalize_repeat_until(date(2025, 2, 1)) == "2025-02-01"
        assert normalize_repeat_until("") is None
        assert normalize_repeat_until("tomorrow") is None
        assert normalize_repeat_until(None) is None
