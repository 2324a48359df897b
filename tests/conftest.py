"""Shared factory helpers and fixtures for Parity tests.

Factories build small snapshots with realistic platform metadata so each
test states only the entities it cares about.
"""

import pytest

from core.models import (
    Dashboard, Field, Layout, MetadataSnapshot, Module, ValuesList, ValuesListValue,
)
from core.samples import build_sample_snapshot

# ---------------------------------------------------------------------------
# Entity factory helpers
# ---------------------------------------------------------------------------


def make_module(name: str = "Risk Register", **overrides) -> Module:
    defaults = dict(id=1, name=name, type="Application", guid=f"GUID-{name}")
    defaults.update(overrides)
    return Module(**defaults)


def make_field(name: str = "Risk Score", **overrides) -> Field:
    defaults = dict(
        id=100,
        name=name,
        module="Risk Register",
        level="Risk Assessment",
        type_label="Numeric",
        is_active=True,
    )
    defaults.update(overrides)
    return Field(**defaults)


def make_layout(layout_field: str = "Risk Title", **overrides) -> Layout:
    defaults = dict(
        id=200,
        name="Default Layout",
        module="Risk Register",
        level="Risk Assessment",
        layout_name="Default",
        layout_tab="General",
        layout_section="Details",
        layout_field=layout_field,
    )
    defaults.update(overrides)
    return Layout(**defaults)


def make_value(name: str, *children: ValuesListValue, **overrides) -> ValuesListValue:
    defaults = dict(id=0, name=name, is_active=True, children=tuple(children))
    defaults.update(overrides)
    return ValuesListValue(**defaults)


def make_values_list(name: str = "Priority", *values: ValuesListValue, **overrides) -> ValuesList:
    defaults = dict(id=5, name=name, is_active=True, values=tuple(values))
    defaults.update(overrides)
    return ValuesList(**defaults)


def make_dashboard(name: str = "Risk Overview", **overrides) -> Dashboard:
    defaults = dict(id=500, name=name, is_active=True)
    defaults.update(overrides)
    return Dashboard(**defaults)


def make_snapshot(environment_name: str = "Dev", **entities) -> MetadataSnapshot:
    """Build a snapshot; keyword arguments are snapshot categories."""
    return MetadataSnapshot(
        environment_name=environment_name,
        platform_version="6.9",
        entities={category: tuple(rows) for category, rows in entities.items()},
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def dev_snapshot() -> MetadataSnapshot:
    return build_sample_snapshot("Dev")


@pytest.fixture
def prod_snapshot() -> MetadataSnapshot:
    return build_sample_snapshot("Prod")
