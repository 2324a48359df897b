"""
Set, property and tree differencing for metadata entities.

These functions are pure: they read their inputs, never mutate them and
never log. Results are returned to the caller.
"""
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from core.categories import CategorySpec
from core.formatting import format_value
from core.keys import build_index
from core.models import Attribute
from core.results import (
    ALL_PROPERTIES, SOURCE_ONLY, TARGET_ONLY,
    CategoryDiagnostics, ComparisonResult, ComparisonStatus, PropertyDifference,
)


@dataclass
class SetDifference:
    """Key membership of two keyed indexes."""
    source_only: list[str] = field(default_factory=list)
    target_only: list[str] = field(default_factory=list)
    common: list[str] = field(default_factory=list)


def diff_sets(source_index: Mapping[str, Any], target_index: Mapping[str, Any]) -> SetDifference:
    """
    Split the keys of two indexes into source-only, target-only and common.

    Source-only keys exist only in the source (MissingInTarget);
    target-only keys exist only in the target (MissingInSource).
    Each list keeps the insertion order of the index it came from.
    """
    result = SetDifference()

    for key in source_index.keys():
        if key in target_index:
            result.common.append(key)
        else:
            result.source_only.append(key)

    for key in target_index.keys():
        if key not in source_index:
            result.target_only.append(key)

    return result


def diff_properties(
    source: Any,
    target: Any,
    attributes: Sequence[Attribute],
    excluded: Iterable[str] = ()
) -> list[PropertyDifference]:
    """
    Compare every non-excluded scalar attribute of two entities.

    Nested collections are never compared here. Returns one
    PropertyDifference per attribute whose canonical strings differ;
    an empty list means the entities match.
    """
    excluded = set(excluded)
    differences = []

    for attribute in attributes:
        if attribute.name in excluded or attribute.is_collection:
            continue

        source_value = attribute.read(source)
        target_value = attribute.read(target)

        if format_value(source_value) != format_value(target_value):
            differences.append(PropertyDifference(
                property_name=attribute.name,
                source_value=source_value,
                target_value=target_value
            ))

    return differences


def missing_result(
    spec: CategorySpec,
    entity: Any,
    key: str,
    status: ComparisonStatus,
    labels: Optional[tuple[str, str, str]] = None
) -> ComparisonResult:
    """Result for an item present on one side only."""
    item_name, identifier, entry_name = labels or spec.labels(entity, key)

    if status == ComparisonStatus.MISSING_IN_TARGET:
        property_name, severity = SOURCE_ONLY, spec.severity.source_only
    else:
        property_name, severity = TARGET_ONLY, spec.severity.target_only

    return ComparisonResult(
        comparison_type=spec.comparison_type,
        item_name=item_name,
        item_identifier=identifier,
        entry_name=entry_name,
        property_name=property_name,
        status=status,
        severity=severity
    )


def common_results(
    spec: CategorySpec,
    source: Any,
    target: Any,
    key: str,
    labels: Optional[tuple[str, str, str]] = None
) -> list[ComparisonResult]:
    """
    Results for an item present on both sides.

    One Mismatch per differing attribute, or a single Match covering
    all properties. Never both, never none.
    """
    item_name, identifier, entry_name = labels or spec.labels(source, key)
    differences = diff_properties(source, target, spec.attributes, spec.excluded)

    if not differences:
        return [ComparisonResult(
            comparison_type=spec.comparison_type,
            item_name=item_name,
            item_identifier=identifier,
            entry_name=entry_name,
            property_name=ALL_PROPERTIES,
            status=ComparisonStatus.MATCH,
            severity=spec.severity.match
        )]

    return [
        ComparisonResult(
            comparison_type=spec.comparison_type,
            item_name=item_name,
            item_identifier=identifier,
            entry_name=entry_name,
            property_name=diff.property_name,
            source_value=diff.source_value,
            target_value=diff.target_value,
            status=ComparisonStatus.MISMATCH,
            severity=spec.severity.mismatch
        )
        for diff in differences
    ]


def diff_tree(
    source_children: Iterable[Any],
    target_children: Iterable[Any],
    remaining_depth: int,
    parent_path_label: str,
    spec: CategorySpec,
    diagnostics: Optional[CategoryDiagnostics] = None
) -> list[ComparisonResult]:
    """
    Recursively compare two ordered lists of same-typed child nodes.

    Children are keyed by their own name. Every result is labelled with
    the breadcrumb path of its parent ("Priority > High"). Recursion
    stops once remaining_depth reaches zero, which also bounds cyclic
    or runaway hierarchies.

    Args:
        source_children: Children on the source side
        target_children: Children on the target side
        remaining_depth: Levels still allowed, including this one
        parent_path_label: Breadcrumb of the owning node
        spec: Category definition of the child nodes
        diagnostics: Optional counters for duplicate/rejected child names
    """
    if remaining_depth <= 0:
        return []

    key_fn = spec.key_for
    source_index = build_index(source_children, key_fn)
    target_index = build_index(target_children, key_fn)

    if diagnostics is not None:
        diagnostics.source_duplicates += source_index.duplicate_count
        diagnostics.target_duplicates += target_index.duplicate_count
        diagnostics.source_rejected += source_index.rejected_count
        diagnostics.target_rejected += target_index.rejected_count

    membership = diff_sets(source_index.entries, target_index.entries)
    results = []

    for key in membership.source_only:
        results.append(missing_result(
            spec, source_index[key], key, ComparisonStatus.MISSING_IN_TARGET,
            labels=(parent_path_label, key, key)
        ))

    for key in membership.target_only:
        results.append(missing_result(
            spec, target_index[key], key, ComparisonStatus.MISSING_IN_SOURCE,
            labels=(parent_path_label, key, key)
        ))

    for key in membership.common:
        source_node = source_index[key]
        target_node = target_index[key]

        results.extend(common_results(
            spec, source_node, target_node, key,
            labels=(parent_path_label, key, key)
        ))

        source_grandchildren = spec.children_of(source_node)
        target_grandchildren = spec.children_of(target_node)
        if source_grandchildren or target_grandchildren:
            results.extend(diff_tree(
                source_grandchildren,
                target_grandchildren,
                remaining_depth - 1,
                f"{parent_path_label} > {key}",
                spec,
                diagnostics
            ))

    return results
