# Parity v1.2.0
"""
Core package for Parity.
Contains the metadata comparison engine and snapshot parsing utilities.
"""
from core.categories import CATEGORY_SPECS, CategorySpec, SeverityPolicy, resolve_category
from core.comparators import CategoryOutcome, compare_category, compare_values_lists
from core.differ import SetDifference, diff_properties, diff_sets, diff_tree
from core.engine import ComparisonEngine, ComparisonError, compare_environments
from core.formatting import format_value, format_value_compact, values_equal
from core.keys import KEY_SEPARATOR, KeyedIndex, build_index, build_key
from core.models import Attribute, CollectionOptions, MetadataSnapshot
from core.results import (
    CategoryDiagnostics,
    ComparisonReport,
    ComparisonResult,
    ComparisonStatus,
    ComparisonType,
    PropertyDifference,
    ReportSummary,
    Severity
)
from core.snapshot_parser import (
    SnapshotParseError,
    parse_snapshot_content,
    parse_snapshot_dict,
    parse_snapshot_file,
    snapshot_to_dict
)

__all__ = [
    "CATEGORY_SPECS",
    "CategorySpec",
    "SeverityPolicy",
    "resolve_category",
    "CategoryOutcome",
    "compare_category",
    "compare_values_lists",
    "SetDifference",
    "diff_properties",
    "diff_sets",
    "diff_tree",
    "ComparisonEngine",
    "ComparisonError",
    "compare_environments",
    "format_value",
    "format_value_compact",
    "values_equal",
    "KEY_SEPARATOR",
    "KeyedIndex",
    "build_index",
    "build_key",
    "Attribute",
    "CollectionOptions",
    "MetadataSnapshot",
    "CategoryDiagnostics",
    "ComparisonReport",
    "ComparisonResult",
    "ComparisonStatus",
    "ComparisonType",
    "PropertyDifference",
    "ReportSummary",
    "Severity",
    "SnapshotParseError",
    "parse_snapshot_content",
    "parse_snapshot_dict",
    "parse_snapshot_file",
    "snapshot_to_dict"
]
