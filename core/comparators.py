"""
Category comparators.

Every comparator follows the same template:

1. drop placeholder rows (category pre-filter)
2. index both sides by composite key, first occurrence wins
3. split keys into source-only, target-only and common
4. compare common items attribute by attribute
5. label every row with the category's type tag and severity policy

Values lists additionally walk their value hierarchy with diff_tree.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from core.categories import CATEGORY_SPECS, VALUES_LIST, VALUES_LIST_VALUE, CategorySpec
from core.differ import common_results, diff_sets, diff_tree, missing_result
from core.keys import build_index
from core.models import CollectionOptions, MetadataSnapshot
from core.results import (
    CategoryDiagnostics, ComparisonResult, ComparisonStatus, ComparisonType, sort_results,
)


@dataclass
class CategoryOutcome:
    """Result slots written by one category worker."""
    results: dict[ComparisonType, list[ComparisonResult]] = field(default_factory=dict)
    diagnostics: dict[ComparisonType, CategoryDiagnostics] = field(default_factory=dict)


def compare_entities(
    spec: CategorySpec,
    source: Iterable[Any],
    target: Iterable[Any],
    diagnostics: CategoryDiagnostics
) -> tuple[list[ComparisonResult], list[tuple[Any, Any, str]]]:
    """
    Compare two entity sequences of one category.

    Returns the unsorted results plus the (source, target, key) triples
    of every item present on both sides, for callers that descend further.
    """
    source_index = build_index((e for e in source if spec.keep(e)), spec.key_for)
    target_index = build_index((e for e in target if spec.keep(e)), spec.key_for)

    diagnostics.source_duplicates += source_index.duplicate_count
    diagnostics.target_duplicates += target_index.duplicate_count
    diagnostics.source_rejected += source_index.rejected_count
    diagnostics.target_rejected += target_index.rejected_count

    membership = diff_sets(source_index.entries, target_index.entries)
    results = []
    common = []

    for key in membership.source_only:
        results.append(missing_result(
            spec, source_index[key], key, ComparisonStatus.MISSING_IN_TARGET
        ))

    for key in membership.target_only:
        results.append(missing_result(
            spec, target_index[key], key, ComparisonStatus.MISSING_IN_SOURCE
        ))

    for key in membership.common:
        source_item = source_index[key]
        target_item = target_index[key]
        results.extend(common_results(spec, source_item, target_item, key))
        common.append((source_item, target_item, key))

    return results, common


def compare_category(
    spec: CategorySpec,
    source: Iterable[Any],
    target: Iterable[Any]
) -> CategoryOutcome:
    """Compare one flat category and return its sorted result slot."""
    diagnostics = CategoryDiagnostics()
    results, _ = compare_entities(spec, source, target, diagnostics)

    return CategoryOutcome(
        results={spec.comparison_type: sort_results(results)},
        diagnostics={spec.comparison_type: diagnostics}
    )


def compare_values_lists(source: Iterable[Any], target: Iterable[Any], max_depth: int) -> CategoryOutcome:
    """
    Compare values lists and, up to max_depth levels, their values.

    Values lists themselves are always compared. With max_depth == 0 no
    ValuesListValue rows are produced at all.
    """
    list_diagnostics = CategoryDiagnostics()
    value_diagnostics = CategoryDiagnostics()

    list_results, common = compare_entities(VALUES_LIST, source, target, list_diagnostics)

    value_results = []
    if max_depth > 0:
        for source_list, target_list, key in common:
            value_results.extend(diff_tree(
                VALUES_LIST.children_of(source_list),
                VALUES_LIST.children_of(target_list),
                max_depth,
                key,
                VALUES_LIST_VALUE,
                value_diagnostics
            ))

    return CategoryOutcome(
        results={
            ComparisonType.VALUES_LIST: sort_results(list_results),
            ComparisonType.VALUES_LIST_VALUE: sort_results(value_results),
        },
        diagnostics={
            ComparisonType.VALUES_LIST: list_diagnostics,
            ComparisonType.VALUES_LIST_VALUE: value_diagnostics,
        }
    )


Comparator = Callable[[MetadataSnapshot, MetadataSnapshot, CollectionOptions], CategoryOutcome]


def _flat_comparator(spec: CategorySpec) -> Comparator:
    def comparator(source: MetadataSnapshot, target: MetadataSnapshot, options: CollectionOptions) -> CategoryOutcome:
        return compare_category(spec, source.get(spec.snapshot_key), target.get(spec.snapshot_key))
    comparator.__name__ = f"compare_{spec.snapshot_key}"
    return comparator


def _values_list_comparator(source: MetadataSnapshot, target: MetadataSnapshot, options: CollectionOptions) -> CategoryOutcome:
    return compare_values_lists(
        source.get(VALUES_LIST.snapshot_key),
        target.get(VALUES_LIST.snapshot_key),
        options.max_depth
    )


def default_comparators() -> dict[ComparisonType, Comparator]:
    """One comparator per top-level category."""
    comparators = {}
    for comparison_type, spec in CATEGORY_SPECS.items():
        if spec.children_attribute is not None:
            continue
        comparators[comparison_type] = _flat_comparator(spec)
    comparators[ComparisonType.VALUES_LIST] = _values_list_comparator
    return comparators
