"""
Sample snapshots for demonstrations and smoke tests.

build_sample_snapshot("Dev") and build_sample_snapshot("Prod") produce
two environments around a "Risk Register" application that differ in a
small, known set of places:

- Risk Score formula differs
- "Dev Only Field" exists only in Dev, "Legacy Field" only in Prod
- the Likelihood values list has an extra "Rare" value in Dev
- the "Open Risks" report has a different display column string
"""
from datetime import datetime, timedelta, timezone

from core.models import (
    Dashboard, DataFeed, DDERule, Field, Layout, MetadataSnapshot, Module,
    Report, Role, Schedule, SecurityParameter, ValuesList, ValuesListValue,
)


def _priority_values(values_list_id: int) -> tuple[ValuesListValue, ...]:
    return tuple(
        ValuesListValue(id=values_list_id * 10 + i, name=name, values_list_id=values_list_id,
                        sort_order=i, is_active=True, is_default=(name == "Medium"))
        for i, name in enumerate(("High", "Medium", "Low"), start=1)
    )


def _likelihood_values(values_list_id: int, is_dev: bool) -> tuple[ValuesListValue, ...]:
    unlikely_children = [
        ValuesListValue(id=611, name="Possible", values_list_id=values_list_id, parent_id=61, sort_order=1, is_active=True),
    ]
    if is_dev:
        unlikely_children.append(
            ValuesListValue(id=612, name="Rare", values_list_id=values_list_id, parent_id=61, sort_order=2, is_active=True)
        )

    return (
        ValuesListValue(id=60, name="Likely", values_list_id=values_list_id, sort_order=1, is_active=True),
        ValuesListValue(id=61, name="Unlikely", values_list_id=values_list_id, sort_order=2, is_active=True,
                        children=tuple(unlikely_children)),
    )


def build_sample_snapshot(environment_name: str) -> MetadataSnapshot:
    """Build a demo snapshot; names containing "dev" get the Dev variant."""
    is_dev = "dev" in environment_name.lower()
    # Surrogate IDs differ between environments
    id_offset = 0 if is_dev else 1000
    updated = datetime(2026, 9, 1, 8, 30, tzinfo=timezone.utc) - timedelta(days=10 if is_dev else 40)

    modules = (
        Module(id=1 + id_offset, name="Risk Register", type="Application", guid="GUID-RISK-REG",
               alias="risk_reg", is_leveled=True, updated_by="System Admin", updated_date=updated),
        Module(id=2 + id_offset, name="Incident Management", type="Application", guid="GUID-INC-MGT",
               alias="inc_mgt"),
    )

    fields = [
        Field(id=101 + id_offset, name="Risk Title", module="Risk Register", level="Risk Assessment",
              type_label="Text", guid="GUID-FLD-TITLE", is_active=True, is_required=True),
        Field(id=102 + id_offset, name="Risk Score", module="Risk Register", level="Risk Assessment",
              type_label="Numeric", guid="GUID-FLD-SCORE", is_active=True, is_calculated=True,
              formula="(Impact * Likelihood) + 1" if is_dev else "Impact * Likelihood"),
    ]
    if is_dev:
        fields.append(Field(id=103, name="Dev Only Field", module="Risk Register", level="Risk Assessment",
                            type_label="Text", guid="GUID-FLD-DEV", is_active=True))
    else:
        fields.append(Field(id=1104, name="Legacy Field", module="Risk Register", level="Risk Assessment",
                            type_label="Text", guid="GUID-FLD-PROD", is_active=True))

    layouts = (
        Layout(id=201 + id_offset, name="Default Layout", module="Risk Register", level="Risk Assessment",
               layout_name="Default", layout_tab="General", layout_section="Risk Details",
               layout_field="Risk Title", guid="GUID-LAY-1", is_active=True),
        Layout(id=202 + id_offset, name="Default Layout", module="Risk Register", level="Risk Assessment",
               layout_name="Default", layout_tab="Available", layout_field="Risk Score"),
    )

    values_lists = (
        ValuesList(id=5 + id_offset, name="Priority", is_active=True, values=_priority_values(5 + id_offset)),
        ValuesList(id=6 + id_offset, name="Likelihood", is_active=True,
                   values=_likelihood_values(6 + id_offset, is_dev)),
    )

    reports = (
        Report(id=401 + id_offset, name="Open Risks", module_name="Risk Register",
               report_type_display_column_string="Column" if is_dev else "Column,Chart",
               last_updated_by="System Admin", last_updated_date=updated),
    )

    return MetadataSnapshot(
        environment_name=environment_name,
        platform_version="6.9.100.1000",
        collection_date=datetime(2026, 9, 1, 9, 0, tzinfo=timezone.utc),
        entities={
            "modules": modules,
            "fields": tuple(fields),
            "layouts": layouts,
            "values_lists": values_lists,
            "dde_rules": (
                DDERule(id=301 + id_offset, name="Hide Score if Inactive", guid="GUID-DDE-1",
                        layout_id=201 + id_offset, is_active=True, execution_order=1),
            ),
            "reports": reports,
            "dashboards": (
                Dashboard(id=501 + id_offset, name="Risk Overview", alias="risk_overview", is_active=True),
            ),
            "roles": (
                Role(id=701 + id_offset, name="Risk Manager", guid="GUID-ROLE-RM", alias="risk_manager"),
            ),
            "security_parameters": (
                SecurityParameter(id=801 + id_offset, name="Password Minimum Length", value="12"),
            ),
            "data_feeds": (
                DataFeed(id=901 + id_offset, name="Asset Import", guid="GUID-FEED-1", is_active=True,
                         target="Risk Register"),
            ),
            "schedules": (
                Schedule(id=951 + id_offset, name="Nightly Asset Import", guid="GUID-SCH-1",
                         module_name="Risk Register", is_active=True, frequency="Daily"),
            ),
        }
    )
