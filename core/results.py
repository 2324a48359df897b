"""
Comparison result model for Parity.

A comparison run produces ComparisonResult records, grouped per
ComparisonType into a ComparisonReport. Results are never mutated
after they are created.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from core.formatting import format_value


class ComparisonType(str, Enum):
    MODULE = "Module"
    FIELD = "Field"
    VALUES_LIST = "ValuesList"
    VALUES_LIST_VALUE = "ValuesListValue"
    LAYOUT = "Layout"
    LAYOUT_OBJECT = "LayoutObject"
    DDE_RULE = "DDERule"
    DDE_ACTION = "DDEAction"
    REPORT = "Report"
    DASHBOARD = "Dashboard"
    WORKSPACE = "Workspace"
    IVIEW = "IView"
    ROLE = "Role"
    SECURITY_PARAMETER = "SecurityParameter"
    NOTIFICATION = "Notification"
    DATA_FEED = "DataFeed"
    SCHEDULE = "Schedule"


class ComparisonStatus(str, Enum):
    MATCH = "Match"
    MISMATCH = "Mismatch"
    MISSING_IN_SOURCE = "MissingInSource"
    MISSING_IN_TARGET = "MissingInTarget"


class Severity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    CRITICAL = "Critical"


# Sentinel property names
SOURCE_ONLY = "Source Only"
TARGET_ONLY = "Target Only"
ALL_PROPERTIES = "All Properties"


@dataclass(frozen=True)
class PropertyDifference:
    """One attribute whose canonical value differs between two entities."""
    property_name: str
    source_value: Any = None
    target_value: Any = None


@dataclass(frozen=True)
class ComparisonResult:
    """A single row of a comparison report."""
    comparison_type: ComparisonType
    item_name: str
    item_identifier: str
    property_name: str
    status: ComparisonStatus
    severity: Severity
    source_value: Any = None
    target_value: Any = None

    # Leaf name of the compared item (field name, layout field, value name)
    entry_name: str = ""

    @property
    def sort_key(self) -> tuple[str, str, str, str]:
        return (self.item_name, self.item_identifier, self.property_name, self.entry_name)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "comparison_type": self.comparison_type.value,
            "item_name": self.item_name,
            "item_identifier": self.item_identifier,
            "entry_name": self.entry_name,
            "property_name": self.property_name,
            "source_value": None if self.source_value is None else format_value(self.source_value),
            "target_value": None if self.target_value is None else format_value(self.target_value),
            "status": self.status.value,
            "severity": self.severity.value,
        }


def sort_results(results: list[ComparisonResult]) -> list[ComparisonResult]:
    """Order results by item name, identifier, property name, then entry name."""
    return sorted(results, key=lambda r: r.sort_key)


@dataclass
class CategoryDiagnostics:
    """
    Counters describing how a category's entities were indexed.

    Duplicates are entities whose composite key collided with an earlier
    entity in the same snapshot (first one wins). Rejected entities had
    an empty required key attribute and were left out entirely.
    """
    source_duplicates: int = 0
    target_duplicates: int = 0
    source_rejected: int = 0
    target_rejected: int = 0

    @property
    def has_warnings(self) -> bool:
        return bool(self.source_duplicates or self.target_duplicates)

    def to_dict(self) -> dict:
        return {
            "source_duplicates": self.source_duplicates,
            "target_duplicates": self.target_duplicates,
            "source_rejected": self.source_rejected,
            "target_rejected": self.target_rejected,
        }


@dataclass
class ReportSummary:
    """Summary statistics over every result in a report."""
    source_only: int = 0
    target_only: int = 0
    differences: int = 0
    matches: int = 0
    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)

    @property
    def is_identical(self) -> bool:
        return self.source_only == 0 and self.target_only == 0 and self.differences == 0

    def to_dict(self) -> dict:
        return {
            "source_only": self.source_only,
            "target_only": self.target_only,
            "differences": self.differences,
            "matches": self.matches,
            "total": self.total,
            "is_identical": self.is_identical,
            "by_type": dict(self.by_type),
            "by_severity": dict(self.by_severity),
        }


@dataclass
class ComparisonReport:
    """
    Results of comparing two snapshots, grouped by comparison type.

    Created fresh by the orchestrator for every run and handed to
    the consumer once every category has finished.
    """
    source_environment_name: str = ""
    target_environment_name: str = ""
    comparison_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    results: dict[ComparisonType, list[ComparisonResult]] = field(default_factory=dict)
    diagnostics: dict[ComparisonType, CategoryDiagnostics] = field(default_factory=dict)

    def for_type(self, comparison_type: ComparisonType) -> list[ComparisonResult]:
        return self.results.get(comparison_type, [])

    def all_results(self) -> list[ComparisonResult]:
        """Flatten every category's results in ComparisonType order."""
        flattened = []
        for comparison_type in ComparisonType:
            flattened.extend(self.results.get(comparison_type, []))
        return flattened

    def differences(self) -> list[ComparisonResult]:
        """All results except Match rows."""
        return [r for r in self.all_results() if r.status != ComparisonStatus.MATCH]

    def summary(self) -> ReportSummary:
        all_results = self.all_results()
        statuses = Counter(r.status for r in all_results)
        by_type = Counter(r.comparison_type.value for r in all_results)
        by_severity = Counter(
            r.severity.value for r in all_results if r.status != ComparisonStatus.MATCH
        )

        return ReportSummary(
            source_only=statuses[ComparisonStatus.MISSING_IN_TARGET],
            target_only=statuses[ComparisonStatus.MISSING_IN_SOURCE],
            differences=statuses[ComparisonStatus.MISMATCH],
            matches=statuses[ComparisonStatus.MATCH],
            total=len(all_results),
            # Largest groups first
            by_type=dict(by_type.most_common()),
            by_severity=dict(by_severity.most_common()),
        )

    def to_dict(self, include_matches: bool = True) -> dict:
        """Convert to dictionary for JSON serialization."""
        categories = {}
        for comparison_type in ComparisonType:
            if comparison_type not in self.results:
                continue
            rows = self.results[comparison_type]
            if not include_matches:
                rows = [r for r in rows if r.status != ComparisonStatus.MATCH]
            categories[comparison_type.value] = [r.to_dict() for r in rows]

        return {
            "source_environment_name": self.source_environment_name,
            "target_environment_name": self.target_environment_name,
            "comparison_date": self.comparison_date.isoformat(),
            "summary": self.summary().to_dict(),
            "categories": categories,
            "diagnostics": {
                t.value: d.to_dict() for t, d in self.diagnostics.items()
            },
        }
