"""Unit tests for canonical value formatting and composite keys."""

from datetime import date, datetime, timezone

from core.categories import DASHBOARD, FIELD, LAYOUT
from core.formatting import format_value, format_value_compact, values_equal
from core.keys import KEY_SEPARATOR, build_index, build_key
from core.models import Field
from core.results import ComparisonStatus

from .conftest import make_dashboard, make_field, make_layout

# ---------------------------------------------------------------------------
# Canonical formatting
# ---------------------------------------------------------------------------


class TestFormatValue:
    def test_none_is_empty_string(self) -> None:
        assert format_value(None) == ""

    def test_strings_are_unchanged(self) -> None:
        assert format_value("  Impact * Likelihood ") == "  Impact * Likelihood "

    def test_booleans_use_fixed_words(self) -> None:
        assert format_value(True) == "True"
        assert format_value(False) == "False"

    def test_integers(self) -> None:
        assert format_value(0) == "0"
        assert format_value(-42) == "-42"

    def test_floats_round_trip(self) -> None:
        assert format_value(0.1) == "0.1"
        assert format_value(1.0) == "1.0"

    def test_datetimes_are_iso_8601(self) -> None:
        value = datetime(2026, 9, 1, 8, 30, tzinfo=timezone.utc)
        assert format_value(value) == "2026-09-01T08:30:00+00:00"
        assert format_value(date(2026, 9, 1)) == "2026-09-01"

    def test_enums_format_their_value(self) -> None:
        assert format_value(ComparisonStatus.MISSING_IN_TARGET) == "MissingInTarget"

    def test_none_and_empty_string_compare_equal(self) -> None:
        assert values_equal(None, "")

    def test_no_numeric_tolerance(self) -> None:
        assert not values_equal(1, 1.0)
        assert not values_equal("Active", "active")

    def test_compact_format(self) -> None:
        assert format_value_compact(None) == "null"
        assert format_value_compact({"a": [1, 2]}) == '{"a":[1,2]}'
        assert format_value_compact(True) == "True"


# ---------------------------------------------------------------------------
# Composite keys
# ---------------------------------------------------------------------------


class TestBuildKey:
    def test_field_key_joins_module_level_name(self) -> None:
        key = FIELD.key_for(make_field("Risk Score"))
        assert key == KEY_SEPARATOR.join(["Risk Register", "Risk Assessment", "Risk Score"])

    def test_empty_required_attribute_rejects_key(self) -> None:
        assert FIELD.key_for(make_field("Risk Score", level=None)) == ""
        assert FIELD.key_for(make_field("")) == ""

    def test_layout_requires_only_module(self) -> None:
        layout = make_layout("Risk Title", layout_section=None)
        assert LAYOUT.key_for(layout) == "Risk Register|Risk Assessment|Default|General||Risk Title"
        assert LAYOUT.key_for(make_layout("Risk Title", module="")) == ""

    def test_dashboard_prefers_alias(self) -> None:
        assert DASHBOARD.key_for(make_dashboard("Risk Overview", alias="risk_overview")) == "risk_overview"
        assert DASHBOARD.key_for(make_dashboard("Risk Overview", alias="")) == "Risk Overview"
        assert DASHBOARD.key_for(make_dashboard("", alias="orphan")) == ""

    def test_explicit_required_subset(self) -> None:
        attributes = [FIELD.attribute("Module"), FIELD.attribute("Name")]
        entity = Field(name="Risk Score", module=None)
        assert build_key(entity, attributes, required=[FIELD.attribute("Name")]) == "|Risk Score"
        assert build_key(entity, attributes) == ""


class TestBuildIndex:
    def test_first_occurrence_wins(self) -> None:
        first = make_field("Risk Score", formula="A")
        second = make_field("Risk Score", formula="B")

        index = build_index([first, second], FIELD.key_for)

        assert len(index) == 1
        assert index[FIELD.key_for(first)] is first
        assert index.duplicate_count == 1
        assert index.rejected_count == 0

    def test_empty_keys_are_rejected(self) -> None:
        index = build_index([make_field(""), make_field("Risk Title")], FIELD.key_for)

        assert len(index) == 1
        assert index.rejected_count == 1

    def test_keeps_input_order(self) -> None:
        names = ["Zeta", "Alpha", "Mid"]
        index = build_index([make_field(n) for n in names], FIELD.key_for)
        assert [key.split(KEY_SEPARATOR)[-1] for key in index.keys()] == names
