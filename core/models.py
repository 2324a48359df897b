"""
Metadata entity models for Parity.

Each entity category collected from a platform instance is a frozen
dataclass. The ATTRIBUTES tuple on every class is the explicit list of
comparable attributes: the wire name used by the collector, the Python
field that holds the value, and the value kind used when loading
snapshots. Comparison never introspects the classes themselves.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Optional

from core.results import ComparisonType


@dataclass(frozen=True)
class Attribute:
    """A named, readable attribute of an entity."""
    name: str
    field: str
    kind: str = "str"  # str | int | bool | datetime | children

    @property
    def is_collection(self) -> bool:
        return self.kind == "children"

    def read(self, entity: Any) -> Any:
        return getattr(entity, self.field)


def _attrs(*specs: tuple) -> tuple[Attribute, ...]:
    return tuple(Attribute(*spec) for spec in specs)


@dataclass(frozen=True)
class Module:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    alias: Optional[str] = None
    type: Optional[str] = None
    status_label: Optional[str] = None
    target_application: Optional[str] = None
    is_leveled: bool = False
    is_system: bool = False
    updated_by: Optional[str] = None
    updated_date: Optional[datetime] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("Alias", "alias"),
        ("Type", "type"),
        ("StatusLabel", "status_label"),
        ("TargetApplication", "target_application"),
        ("IsLeveled", "is_leveled", "bool"),
        ("IsSystem", "is_system", "bool"),
        ("UpdatedBy", "updated_by"),
        ("UpdatedDate", "updated_date", "datetime"),
    )


@dataclass(frozen=True)
class Field:
    id: int = 0
    name: str = ""
    module: Optional[str] = None
    level: Optional[str] = None
    guid: Optional[str] = None
    alias: Optional[str] = None
    level_id: int = 0
    type_label: Optional[str] = None
    access: Optional[str] = None
    is_active: bool = False
    is_required: bool = False
    is_calculated: bool = False
    formula: Optional[str] = None
    related_values_list_id: Optional[int] = None
    help_text: Optional[str] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Module", "module"),
        ("Level", "level"),
        ("Guid", "guid"),
        ("Alias", "alias"),
        ("LevelId", "level_id", "int"),
        ("TypeLabel", "type_label"),
        ("Access", "access"),
        ("IsActive", "is_active", "bool"),
        ("IsRequired", "is_required", "bool"),
        ("IsCalculated", "is_calculated", "bool"),
        ("Formula", "formula"),
        ("RelatedValuesListId", "related_values_list_id", "int"),
        ("HelpText", "help_text"),
    )


@dataclass(frozen=True)
class ValuesListValue:
    """A node of a values list hierarchy."""
    id: int = 0
    name: str = ""
    values_list_id: int = 0
    parent_id: Optional[int] = None
    sort_order: int = 0
    is_active: bool = False
    is_default: bool = False
    children: tuple["ValuesListValue", ...] = ()

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("ValuesListId", "values_list_id", "int"),
        ("ParentId", "parent_id", "int"),
        ("SortOrder", "sort_order", "int"),
        ("IsActive", "is_active", "bool"),
        ("IsDefault", "is_default", "bool"),
        ("Children", "children", "children"),
    )


@dataclass(frozen=True)
class ValuesList:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    alias: Optional[str] = None
    level_id: int = 0
    related_values_list_id: Optional[int] = None
    is_active: bool = False
    values: tuple[ValuesListValue, ...] = ()

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("Alias", "alias"),
        ("LevelId", "level_id", "int"),
        ("RelatedValuesListId", "related_values_list_id", "int"),
        ("IsActive", "is_active", "bool"),
        ("Values", "values", "children"),
    )


@dataclass(frozen=True)
class Layout:
    id: int = 0
    name: str = ""
    module: Optional[str] = None
    level: Optional[str] = None
    layout_name: Optional[str] = None
    layout_tab: Optional[str] = None
    layout_section: Optional[str] = None
    layout_field: Optional[str] = None
    layout_type: Optional[str] = None
    guid: Optional[str] = None
    level_id: int = 0
    is_active: bool = False
    is_default: bool = False

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Module", "module"),
        ("Level", "level"),
        ("LayoutName", "layout_name"),
        ("LayoutTab", "layout_tab"),
        ("LayoutSection", "layout_section"),
        ("LayoutField", "layout_field"),
        ("LayoutType", "layout_type"),
        ("Guid", "guid"),
        ("LevelId", "level_id", "int"),
        ("IsActive", "is_active", "bool"),
        ("IsDefault", "is_default", "bool"),
    )


@dataclass(frozen=True)
class LayoutObject:
    id: int = 0
    name: str = ""
    layout_id: int = 0
    object_type: Optional[str] = None
    depth: int = 0

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("LayoutId", "layout_id", "int"),
        ("ObjectType", "object_type"),
        ("Depth", "depth", "int"),
    )


@dataclass(frozen=True)
class DDERule:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    layout_id: int = 0
    is_active: bool = False
    execution_order: int = 0

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("LayoutId", "layout_id", "int"),
        ("IsActive", "is_active", "bool"),
        ("ExecutionOrder", "execution_order", "int"),
    )


@dataclass(frozen=True)
class DDEAction:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    layout_id: int = 0
    is_active: bool = False
    type_label: Optional[str] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("LayoutId", "layout_id", "int"),
        ("IsActive", "is_active", "bool"),
        ("TypeLabel", "type_label"),
    )


@dataclass(frozen=True)
class Report:
    id: int = 0
    name: str = ""
    module_name: Optional[str] = None
    report_type_display_column_string: Optional[str] = None
    last_updated_by: Optional[str] = None
    last_updated_date: Optional[datetime] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("ModuleName", "module_name"),
        ("ReportTypeDisplayColumnString", "report_type_display_column_string"),
        ("LastUpdatedBy", "last_updated_by"),
        ("LastUpdatedDate", "last_updated_date", "datetime"),
    )


@dataclass(frozen=True)
class Dashboard:
    id: int = 0
    name: str = ""
    alias: Optional[str] = None
    is_active: bool = False
    is_system: bool = False

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Alias", "alias"),
        ("IsActive", "is_active", "bool"),
        ("IsSystem", "is_system", "bool"),
    )


@dataclass(frozen=True)
class Workspace:
    id: int = 0
    name: str = ""
    is_active: bool = False

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("IsActive", "is_active", "bool"),
    )


@dataclass(frozen=True)
class IView:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    iview_folder_name: Optional[str] = None
    type_string: Optional[str] = None
    is_active: bool = False

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("IViewFolderName", "iview_folder_name"),
        ("TypeString", "type_string"),
        ("IsActive", "is_active", "bool"),
    )


@dataclass(frozen=True)
class Role:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    alias: Optional[str] = None
    is_sys_admin: bool = False

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("Alias", "alias"),
        ("IsSysAdmin", "is_sys_admin", "bool"),
    )


@dataclass(frozen=True)
class SecurityParameter:
    id: int = 0
    name: str = ""
    value: Optional[str] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Value", "value"),
    )


@dataclass(frozen=True)
class Notification:
    id: int = 0
    name: str = ""
    application_name: Optional[str] = None
    active: bool = False
    type_display_text: Optional[str] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("ApplicationName", "application_name"),
        ("Active", "active", "bool"),
        ("TypeDisplayText", "type_display_text"),
    )


@dataclass(frozen=True)
class DataFeed:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    is_active: bool = False
    target: Optional[str] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("IsActive", "is_active", "bool"),
        ("Target", "target"),
    )


@dataclass(frozen=True)
class Schedule:
    id: int = 0
    name: str = ""
    guid: Optional[str] = None
    module_name: Optional[str] = None
    is_active: bool = False
    frequency: Optional[str] = None

    ATTRIBUTES: ClassVar[tuple[Attribute, ...]] = _attrs(
        ("Id", "id", "int"),
        ("Name", "name"),
        ("Guid", "guid"),
        ("ModuleName", "module_name"),
        ("IsActive", "is_active", "bool"),
        ("Frequency", "frequency"),
    )


# Snapshot category name -> entity class
ENTITY_TYPES: dict[str, type] = {
    "modules": Module,
    "fields": Field,
    "values_lists": ValuesList,
    "layouts": Layout,
    "layout_objects": LayoutObject,
    "dde_rules": DDERule,
    "dde_actions": DDEAction,
    "reports": Report,
    "dashboards": Dashboard,
    "workspaces": Workspace,
    "iviews": IView,
    "roles": Role,
    "security_parameters": SecurityParameter,
    "notifications": Notification,
    "data_feeds": DataFeed,
    "schedules": Schedule,
}


@dataclass(frozen=True)
class MetadataSnapshot:
    """
    Every entity collected from one environment at one point in time.

    `entities` maps a category name (see ENTITY_TYPES) to the ordered
    entities of that category. Missing categories read as empty.
    """
    environment_name: str = ""
    platform_version: str = ""
    collection_date: Optional[datetime] = None
    entities: dict[str, tuple] = field(default_factory=dict)

    def get(self, category: str) -> tuple:
        if category not in ENTITY_TYPES:
            raise KeyError(f"Unknown snapshot category: {category}")
        return tuple(self.entities.get(category, ()))

    def count(self) -> dict[str, int]:
        return {name: len(self.entities.get(name, ())) for name in ENTITY_TYPES}


# Include flag -> comparison type run when the flag is set
_INCLUDE_FLAGS: dict[str, ComparisonType] = {
    "include_modules": ComparisonType.MODULE,
    "include_fields": ComparisonType.FIELD,
    "include_values_lists": ComparisonType.VALUES_LIST,
    "include_layouts": ComparisonType.LAYOUT,
    "include_layout_objects": ComparisonType.LAYOUT_OBJECT,
    "include_dde_rules": ComparisonType.DDE_RULE,
    "include_dde_actions": ComparisonType.DDE_ACTION,
    "include_reports": ComparisonType.REPORT,
    "include_dashboards": ComparisonType.DASHBOARD,
    "include_workspaces": ComparisonType.WORKSPACE,
    "include_iviews": ComparisonType.IVIEW,
    "include_roles": ComparisonType.ROLE,
    "include_security_parameters": ComparisonType.SECURITY_PARAMETER,
    "include_notifications": ComparisonType.NOTIFICATION,
    "include_data_feeds": ComparisonType.DATA_FEED,
    "include_schedules": ComparisonType.SCHEDULE,
}


@dataclass
class CollectionOptions:
    """
    Category selection for a comparison run.

    selected_module_ids records which modules the collector was asked
    for. The engine trusts snapshots to already reflect that scope and
    does not filter on it again.
    """
    selected_module_ids: list[int] = field(default_factory=list)
    include_modules: bool = True
    include_fields: bool = True
    include_values_lists: bool = True
    include_layouts: bool = True
    include_layout_objects: bool = True
    include_dde_rules: bool = True
    include_dde_actions: bool = True
    include_reports: bool = True
    include_dashboards: bool = True
    include_workspaces: bool = True
    include_iviews: bool = True
    include_roles: bool = True
    include_security_parameters: bool = True
    include_notifications: bool = True
    include_data_feeds: bool = True
    include_schedules: bool = True
    max_depth: int = 10

    def enabled_types(self) -> list[ComparisonType]:
        return [t for flag, t in _INCLUDE_FLAGS.items() if getattr(self, flag)]

    @classmethod
    def only(cls, comparison_types, max_depth: int = 10) -> "CollectionOptions":
        """Build options enabling exactly the given comparison types."""
        wanted = set(comparison_types)
        flags = {flag: t in wanted for flag, t in _INCLUDE_FLAGS.items()}
        return cls(max_depth=max_depth, **flags)
