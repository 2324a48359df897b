"""Tests for per-category comparators and category definitions."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from core.categories import (
    CATEGORY_SPECS, DASHBOARD, FIELD, LAYOUT, MODULE, VALUES_LIST_VALUE, resolve_category,
)
from core.comparators import compare_category, compare_values_lists, default_comparators
from core.differ import common_results
from core.models import IView, LayoutObject, Notification
from core.results import ALL_PROPERTIES, ComparisonStatus, ComparisonType, Severity

from .conftest import make_dashboard, make_field, make_layout, make_module, make_value, make_values_list


def _statuses(results):
    return [r.status for r in results]


class TestCompareCategory:
    def test_module_missing_in_target(self) -> None:
        outcome = compare_category(MODULE, [make_module("Risk Register")], [])

        results = outcome.results[ComparisonType.MODULE]
        assert len(results) == 1
        assert results[0].status == ComparisonStatus.MISSING_IN_TARGET
        assert results[0].item_name == "Risk Register"

    def test_formula_mismatch(self) -> None:
        source = make_field("Risk Score", formula="Impact * Likelihood")
        target = make_field("Risk Score", formula="(Impact * Likelihood) + 1")

        results = compare_category(FIELD, [source], [target]).results[ComparisonType.FIELD]

        assert len(results) == 1
        assert results[0].status == ComparisonStatus.MISMATCH
        assert results[0].property_name == "Formula"
        assert results[0].source_value == "Impact * Likelihood"
        assert results[0].target_value == "(Impact * Likelihood) + 1"
        assert results[0].severity == Severity.WARNING

    def test_results_are_sorted(self) -> None:
        source = [make_module("Zeta"), make_module("Alpha"), make_module("Mid")]
        target = [make_module("Mid"), make_module("Beta")]

        results = compare_category(MODULE, source, target).results[ComparisonType.MODULE]

        assert [r.item_name for r in results] == ["Alpha", "Beta", "Mid", "Zeta"]

    def test_first_wins_on_duplicate_keys(self) -> None:
        source = [make_field(formula="A"), make_field(formula="B")]
        target = [make_field(formula="A")]

        outcome = compare_category(FIELD, source, target)

        assert _statuses(outcome.results[ComparisonType.FIELD]) == [ComparisonStatus.MATCH]
        assert outcome.diagnostics[ComparisonType.FIELD].source_duplicates == 1
        assert outcome.diagnostics[ComparisonType.FIELD].has_warnings

    def test_rejected_keys_are_counted_not_compared(self) -> None:
        outcome = compare_category(FIELD, [make_field(module=None)], [])

        assert outcome.results[ComparisonType.FIELD] == []
        assert outcome.diagnostics[ComparisonType.FIELD].source_rejected == 1
        assert not outcome.diagnostics[ComparisonType.FIELD].has_warnings

    def test_placeholder_fields_are_ignored(self) -> None:
        outcome = compare_category(FIELD, [make_field("Spacer", type_label="Placeholder")], [])
        assert outcome.results[ComparisonType.FIELD] == []

    def test_unplaced_layout_rows_are_ignored(self) -> None:
        source = [
            make_layout("Risk Title"),
            make_layout("Risk Score", layout_tab="Available"),
            make_layout("Notes", layout_type="Placeholder"),
        ]

        results = compare_category(LAYOUT, source, []).results[ComparisonType.LAYOUT]

        assert len(results) == 1
        assert results[0].entry_name == "Risk Title"
        assert results[0].item_identifier == "Risk Assessment > Default > General > Details"

    def test_dashboard_matched_by_alias_across_renames(self) -> None:
        source = [make_dashboard("Risk Overview", alias="risk_overview")]
        target = [make_dashboard("Risk Overview (v2)", alias="risk_overview")]

        results = compare_category(DASHBOARD, source, target).results[ComparisonType.DASHBOARD]

        assert _statuses(results) == [ComparisonStatus.MISMATCH]
        assert results[0].property_name == "Name"

    def test_scoped_categories_key_on_scope_and_name(self) -> None:
        spec = CATEGORY_SPECS[ComparisonType.IVIEW]
        source = [IView(name="My Risks", iview_folder_name="Risk")]
        target = [IView(name="My Risks", iview_folder_name="Audit")]

        results = compare_category(spec, source, target).results[ComparisonType.IVIEW]

        assert sorted(_statuses(results)) == sorted(
            [ComparisonStatus.MISSING_IN_TARGET, ComparisonStatus.MISSING_IN_SOURCE]
        )
        assert {r.item_identifier for r in results} == {"Risk", "Audit"}

    def test_layout_objects_key_on_type_and_name(self) -> None:
        spec = CATEGORY_SPECS[ComparisonType.LAYOUT_OBJECT]
        source = [LayoutObject(id=1, name="Details", object_type="Section", layout_id=10, depth=1)]
        target = [LayoutObject(id=2, name="Details", object_type="Section", layout_id=20, depth=2)]

        results = compare_category(spec, source, target).results[ComparisonType.LAYOUT_OBJECT]

        assert len(results) == 1
        assert results[0].property_name == "Depth"
        assert results[0].severity == Severity.INFO

    def test_notifications_require_name(self) -> None:
        spec = CATEGORY_SPECS[ComparisonType.NOTIFICATION]
        outcome = compare_category(spec, [Notification(name="", application_name="Risk Register")], [])
        assert outcome.diagnostics[ComparisonType.NOTIFICATION].source_rejected == 1


class TestCompareValuesLists:
    def test_priority_children_match_at_depth_one(self) -> None:
        values = [make_value("High"), make_value("Medium"), make_value("Low")]
        source = [make_values_list("Priority", *values)]
        target = [make_values_list("Priority", *values, id=1005)]

        outcome = compare_values_lists(source, target, max_depth=10)

        lists = outcome.results[ComparisonType.VALUES_LIST]
        children = outcome.results[ComparisonType.VALUES_LIST_VALUE]
        assert _statuses(lists) == [ComparisonStatus.MATCH]
        assert len(children) == 3
        assert all(r.status == ComparisonStatus.MATCH for r in children)
        assert [r.item_identifier for r in children] == ["High", "Low", "Medium"]

    def test_zero_depth_skips_values(self) -> None:
        source = [make_values_list("Priority", make_value("High"))]
        target = [make_values_list("Priority", make_value("Low"))]

        outcome = compare_values_lists(source, target, max_depth=0)

        assert outcome.results[ComparisonType.VALUES_LIST_VALUE] == []
        assert _statuses(outcome.results[ComparisonType.VALUES_LIST]) == [ComparisonStatus.MATCH]

    def test_values_of_one_sided_lists_are_not_walked(self) -> None:
        outcome = compare_values_lists([make_values_list("Priority", make_value("High"))], [], max_depth=10)

        assert _statuses(outcome.results[ComparisonType.VALUES_LIST]) == [ComparisonStatus.MISSING_IN_TARGET]
        assert outcome.results[ComparisonType.VALUES_LIST_VALUE] == []

    def test_value_mismatch_is_info(self) -> None:
        source = [make_values_list("Priority", make_value("High", is_default=True))]
        target = [make_values_list("Priority", make_value("High", is_default=False))]

        children = compare_values_lists(source, target, max_depth=1).results[ComparisonType.VALUES_LIST_VALUE]

        assert len(children) == 1
        assert children[0].property_name == "IsDefault"
        assert children[0].severity == Severity.INFO


class TestCategoryRegistry:
    def test_every_top_level_category_has_a_comparator(self) -> None:
        assert set(default_comparators()) == set(CATEGORY_SPECS)
        assert ComparisonType.VALUES_LIST_VALUE not in CATEGORY_SPECS

    def test_every_key_attribute_exists(self) -> None:
        for spec in CATEGORY_SPECS.values():
            for name in spec.key_attributes + (spec.required_attributes or ()):
                assert spec.attribute(name).name == name

    def test_every_exclusion_names_a_real_attribute(self) -> None:
        for spec in CATEGORY_SPECS.values():
            names = {a.name for a in spec.attributes}
            assert spec.excluded <= names, spec.comparison_type

    @pytest.mark.parametrize("name", ["ValuesList", "values_lists", "VALUES_LIST", "valueslist", "values-lists"])
    def test_resolve_category_accepts_aliases(self, name) -> None:
        assert resolve_category(name) == ComparisonType.VALUES_LIST

    def test_resolve_category_rejects_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unknown category"):
            resolve_category("widgets")


# ---------------------------------------------------------------------------
# Excluded attributes never produce mismatches
# ---------------------------------------------------------------------------

_CHANGED_VALUES = {
    "str": "changed in target",
    "int": 4242,
    "bool": True,
    "datetime": datetime(2020, 1, 1, tzinfo=timezone.utc),
}

_EXCLUDED_SCALARS = [
    pytest.param(spec, attribute, id=f"{spec.comparison_type.value}.{attribute.name}")
    for spec in (*CATEGORY_SPECS.values(), VALUES_LIST_VALUE)
    for attribute in spec.attributes
    if attribute.name in spec.excluded and not attribute.is_collection
]


class TestExcludedAttributes:
    @pytest.mark.parametrize("spec, attribute", _EXCLUDED_SCALARS)
    def test_difference_in_excluded_attribute_is_a_match(self, spec, attribute) -> None:
        source = spec.entity_type()
        target = replace(source, **{attribute.field: _CHANGED_VALUES[attribute.kind]})

        results = common_results(spec, source, target, "key")

        assert len(results) == 1
        assert results[0].status == ComparisonStatus.MATCH
        assert results[0].property_name == ALL_PROPERTIES

    def test_every_category_excludes_its_surrogate_id(self) -> None:
        for spec in (*CATEGORY_SPECS.values(), VALUES_LIST_VALUE):
            assert "Id" in spec.excluded, spec.comparison_type
