"""
Pydantic schemas for the Parity API.
"""
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field


# ============================================================
# REQUEST SCHEMAS
# ============================================================

class CollectionOptionsSchema(BaseModel):
    """
    Category selection for a comparison.

    When `categories` is given it replaces the include flags.
    """
    selected_module_ids: list[int] = []
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
    categories: Optional[list[str]] = None
    max_depth: Optional[int] = Field(default=None, ge=0)


class ComparisonRequest(BaseModel):
    source: dict[str, Any]
    target: dict[str, Any]
    options: CollectionOptionsSchema = Field(default_factory=CollectionOptionsSchema)


# ============================================================
# REPORT SCHEMAS
# ============================================================

class ComparisonResultSchema(BaseModel):
    comparison_type: str
    item_name: str
    item_identifier: str
    entry_name: str = ""
    property_name: str
    source_value: Optional[str] = None
    target_value: Optional[str] = None
    status: str
    severity: str


class CategoryDiagnosticsSchema(BaseModel):
    source_duplicates: int = 0
    target_duplicates: int = 0
    source_rejected: int = 0
    target_rejected: int = 0


class ReportSummarySchema(BaseModel):
    source_only: int
    target_only: int
    differences: int
    matches: int
    total: int
    is_identical: bool
    by_type: dict[str, int] = {}
    by_severity: dict[str, int] = {}


class ComparisonReportResponse(BaseModel):
    source_environment_name: str
    target_environment_name: str
    comparison_date: datetime
    summary: ReportSummarySchema
    categories: dict[str, list[ComparisonResultSchema]]
    diagnostics: dict[str, CategoryDiagnosticsSchema] = {}


class CategoryInfo(BaseModel):
    name: str
    snapshot_key: str
    key_attributes: list[str]
    excluded_attributes: list[str]
    severity: dict[str, str]
