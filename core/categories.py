"""
Per-category comparison definitions.

Each CategorySpec fixes, for one entity category:
- which attributes form the composite key (and which must be non-empty)
- which attributes are never compared (surrogate IDs, audit stamps)
- the severity given to each kind of difference
- how a result row is labelled (item name, identifier, entry name)
- an optional pre-filter dropping placeholder rows before keying
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional

from core.keys import build_key
from core.models import (
    Attribute, DataFeed, Dashboard, DDEAction, DDERule, Field, IView, Layout,
    LayoutObject, Module, Notification, Report, Role, Schedule,
    SecurityParameter, ValuesList, ValuesListValue, Workspace,
)
from core.results import ComparisonType, Severity


@dataclass(frozen=True)
class SeverityPolicy:
    """Fixed severity for each kind of difference within a category."""
    source_only: Severity = Severity.WARNING
    target_only: Severity = Severity.INFO
    mismatch: Severity = Severity.WARNING
    match: Severity = Severity.INFO


# item name, item identifier, entry name
Labels = tuple[str, str, str]


@dataclass(frozen=True)
class CategorySpec:
    comparison_type: ComparisonType
    snapshot_key: str
    entity_type: type
    key_attributes: tuple[str, ...]
    excluded: frozenset[str]
    severity: SeverityPolicy
    labels: Callable[[Any, str], Labels]
    required_attributes: Optional[tuple[str, ...]] = None
    key_fn: Optional[Callable[[Any], str]] = None
    prefilter: Optional[Callable[[Any], bool]] = None
    children_attribute: Optional[str] = None

    @property
    def attributes(self) -> tuple[Attribute, ...]:
        return self.entity_type.ATTRIBUTES

    def attribute(self, name: str) -> Attribute:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        raise KeyError(f"{self.entity_type.__name__} has no attribute {name!r}")

    def key_for(self, entity: Any) -> str:
        if self.key_fn is not None:
            return self.key_fn(entity)
        key_attributes = [self.attribute(n) for n in self.key_attributes]
        required = None
        if self.required_attributes is not None:
            required = [self.attribute(n) for n in self.required_attributes]
        return build_key(entity, key_attributes, required)

    def keep(self, entity: Any) -> bool:
        """False for placeholder rows that never take part in a comparison."""
        return self.prefilter is None or self.prefilter(entity)

    def children_of(self, entity: Any) -> tuple:
        if self.children_attribute is None:
            return ()
        return tuple(self.attribute(self.children_attribute).read(entity) or ())


def _text(value: Optional[str]) -> str:
    return value or ""


def _name_labels(entity: Any, key: str) -> Labels:
    return key, "", entity.name


def _module_labels(entity: Module, key: str) -> Labels:
    return key, key, entity.name


def _field_labels(entity: Field, key: str) -> Labels:
    return _text(entity.module), _text(entity.level), entity.name


def _layout_labels(entity: Layout, key: str) -> Labels:
    identifier = " > ".join(
        _text(part) for part in
        (entity.level, entity.layout_name, entity.layout_tab, entity.layout_section)
    )
    return _text(entity.module), identifier, _text(entity.layout_field)


def _scoped_labels(scope: str) -> Callable[[Any, str], Labels]:
    """Labels for name-keyed entities that live inside a named scope."""
    def labels(entity: Any, key: str) -> Labels:
        return entity.name, _text(getattr(entity, scope)), entity.name
    return labels


def _layout_object_labels(entity: LayoutObject, key: str) -> Labels:
    return entity.name, _text(entity.object_type), entity.name


def _value_labels(entity: ValuesListValue, key: str) -> Labels:
    # Tree rows are labelled by the differ with their path
    return "", key, entity.name


def _dashboard_key(entity: Dashboard) -> str:
    if not entity.name:
        return ""
    return entity.alias or entity.name


def _field_is_functional(entity: Field) -> bool:
    return entity.type_label != "Placeholder"


def _layout_is_placed(entity: Layout) -> bool:
    return entity.layout_type != "Placeholder" and entity.layout_tab != "Available"


MODULE = CategorySpec(
    comparison_type=ComparisonType.MODULE,
    snapshot_key="modules",
    entity_type=Module,
    key_attributes=("Name",),
    excluded=frozenset({"Id", "UpdatedBy", "UpdatedDate"}),
    severity=SeverityPolicy(source_only=Severity.WARNING, mismatch=Severity.WARNING),
    labels=_module_labels,
)

FIELD = CategorySpec(
    comparison_type=ComparisonType.FIELD,
    snapshot_key="fields",
    entity_type=Field,
    key_attributes=("Module", "Level", "Name"),
    excluded=frozenset({"Id", "LevelId", "Guid", "RelatedValuesListId"}),
    # A field missing from the target breaks anything imported there
    severity=SeverityPolicy(source_only=Severity.CRITICAL, mismatch=Severity.WARNING),
    labels=_field_labels,
    prefilter=_field_is_functional,
)

LAYOUT = CategorySpec(
    comparison_type=ComparisonType.LAYOUT,
    snapshot_key="layouts",
    entity_type=Layout,
    key_attributes=("Module", "Level", "LayoutName", "LayoutTab", "LayoutSection", "LayoutField"),
    required_attributes=("Module",),
    excluded=frozenset({"Id", "LevelId"}),
    severity=SeverityPolicy(source_only=Severity.WARNING, mismatch=Severity.WARNING),
    labels=_layout_labels,
    prefilter=_layout_is_placed,
)

VALUES_LIST = CategorySpec(
    comparison_type=ComparisonType.VALUES_LIST,
    snapshot_key="values_lists",
    entity_type=ValuesList,
    key_attributes=("Name",),
    excluded=frozenset({"Id", "LevelId", "RelatedValuesListId", "Values"}),
    severity=SeverityPolicy(source_only=Severity.WARNING, mismatch=Severity.WARNING),
    labels=_name_labels,
    children_attribute="Values",
)

VALUES_LIST_VALUE = CategorySpec(
    comparison_type=ComparisonType.VALUES_LIST_VALUE,
    snapshot_key="values_lists",
    entity_type=ValuesListValue,
    key_attributes=("Name",),
    excluded=frozenset({"Id", "ValuesListId", "ParentId", "Children"}),
    severity=SeverityPolicy(source_only=Severity.WARNING, mismatch=Severity.INFO),
    labels=_value_labels,
    children_attribute="Children",
)

LAYOUT_OBJECT = CategorySpec(
    comparison_type=ComparisonType.LAYOUT_OBJECT,
    snapshot_key="layout_objects",
    entity_type=LayoutObject,
    key_attributes=("ObjectType", "Name"),
    required_attributes=("Name",),
    excluded=frozenset({"Id", "LayoutId"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_layout_object_labels,
)

DDE_RULE = CategorySpec(
    comparison_type=ComparisonType.DDE_RULE,
    snapshot_key="dde_rules",
    entity_type=DDERule,
    key_attributes=("Name",),
    excluded=frozenset({"Id", "LayoutId"}),
    severity=SeverityPolicy(mismatch=Severity.WARNING),
    labels=_name_labels,
)

DDE_ACTION = CategorySpec(
    comparison_type=ComparisonType.DDE_ACTION,
    snapshot_key="dde_actions",
    entity_type=DDEAction,
    key_attributes=("Name",),
    excluded=frozenset({"Id", "LayoutId"}),
    severity=SeverityPolicy(mismatch=Severity.WARNING),
    labels=_name_labels,
)

REPORT = CategorySpec(
    comparison_type=ComparisonType.REPORT,
    snapshot_key="reports",
    entity_type=Report,
    key_attributes=("Name",),
    excluded=frozenset({"Id", "LastUpdatedBy", "LastUpdatedDate"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_name_labels,
)

DASHBOARD = CategorySpec(
    comparison_type=ComparisonType.DASHBOARD,
    snapshot_key="dashboards",
    entity_type=Dashboard,
    key_attributes=("Alias", "Name"),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_name_labels,
    key_fn=_dashboard_key,
)

WORKSPACE = CategorySpec(
    comparison_type=ComparisonType.WORKSPACE,
    snapshot_key="workspaces",
    entity_type=Workspace,
    key_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_name_labels,
)

IVIEW = CategorySpec(
    comparison_type=ComparisonType.IVIEW,
    snapshot_key="iviews",
    entity_type=IView,
    key_attributes=("IViewFolderName", "Name"),
    required_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_scoped_labels("iview_folder_name"),
)

ROLE = CategorySpec(
    comparison_type=ComparisonType.ROLE,
    snapshot_key="roles",
    entity_type=Role,
    key_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.WARNING),
    labels=_name_labels,
)

SECURITY_PARAMETER = CategorySpec(
    comparison_type=ComparisonType.SECURITY_PARAMETER,
    snapshot_key="security_parameters",
    entity_type=SecurityParameter,
    key_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.WARNING),
    labels=_name_labels,
)

NOTIFICATION = CategorySpec(
    comparison_type=ComparisonType.NOTIFICATION,
    snapshot_key="notifications",
    entity_type=Notification,
    key_attributes=("ApplicationName", "Name"),
    required_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_scoped_labels("application_name"),
)

DATA_FEED = CategorySpec(
    comparison_type=ComparisonType.DATA_FEED,
    snapshot_key="data_feeds",
    entity_type=DataFeed,
    key_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.WARNING),
    labels=_name_labels,
)

SCHEDULE = CategorySpec(
    comparison_type=ComparisonType.SCHEDULE,
    snapshot_key="schedules",
    entity_type=Schedule,
    key_attributes=("ModuleName", "Name"),
    required_attributes=("Name",),
    excluded=frozenset({"Id"}),
    severity=SeverityPolicy(mismatch=Severity.INFO),
    labels=_scoped_labels("module_name"),
)


# Top-level categories, in report order. Values list values are compared
# as part of VALUES_LIST.
CATEGORY_SPECS: dict[ComparisonType, CategorySpec] = {
    spec.comparison_type: spec for spec in (
        MODULE, FIELD, VALUES_LIST, LAYOUT, LAYOUT_OBJECT, DDE_RULE, DDE_ACTION,
        REPORT, DASHBOARD, WORKSPACE, IVIEW, ROLE, SECURITY_PARAMETER,
        NOTIFICATION, DATA_FEED, SCHEDULE,
    )
}


def resolve_category(name: str) -> ComparisonType:
    """
    Resolve a user-supplied category name.

    Accepts the comparison type ("ValuesList"), the snapshot key
    ("values_lists") or the enum member name ("VALUES_LIST"), in any case.

    Raises:
        ValueError: if no category matches
    """
    wanted = name.strip().lower().replace("-", "_")
    for comparison_type, spec in CATEGORY_SPECS.items():
        candidates = {
            comparison_type.value.lower(),
            comparison_type.name.lower(),
            spec.snapshot_key,
        }
        if wanted in candidates:
            return comparison_type
    raise ValueError(f"Unknown category: {name}")
