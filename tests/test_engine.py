"""Tests for the comparison orchestrator and report model."""

import logging

import pytest

from core.comparators import CategoryOutcome
from core.engine import ComparisonEngine, ComparisonError, compare_environments
from core.models import CollectionOptions
from core.results import SOURCE_ONLY, ComparisonStatus, ComparisonType, Severity

from .conftest import make_field, make_module, make_snapshot, make_value, make_values_list


def _flip(status: ComparisonStatus) -> ComparisonStatus:
    return {
        ComparisonStatus.MISSING_IN_SOURCE: ComparisonStatus.MISSING_IN_TARGET,
        ComparisonStatus.MISSING_IN_TARGET: ComparisonStatus.MISSING_IN_SOURCE,
    }.get(status, status)


def _failing_comparator(source, target, options) -> CategoryOutcome:
    raise RuntimeError("collector returned garbage")


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------


class TestComparisonEngine:
    def test_reflexive_comparison_has_no_differences(self, dev_snapshot) -> None:
        report = ComparisonEngine().compare(dev_snapshot, dev_snapshot)

        assert report.differences() == []
        assert report.summary().is_identical
        assert report.summary().matches > 0

    def test_symmetric_comparison(self, dev_snapshot, prod_snapshot) -> None:
        engine = ComparisonEngine()
        forward = engine.compare(dev_snapshot, prod_snapshot)
        backward = engine.compare(prod_snapshot, dev_snapshot)

        def keyed(report, flip=False):
            return sorted(
                (r.comparison_type.value, r.item_name, r.item_identifier, r.entry_name,
                 (_flip(r.status) if flip else r.status).value)
                for r in report.differences()
                if r.status != ComparisonStatus.MISMATCH
            )

        assert keyed(forward) == keyed(backward, flip=True)

        forward_mismatches = {(r.property_name, r.source_value, r.target_value)
                              for r in forward.differences() if r.status == ComparisonStatus.MISMATCH}
        backward_mismatches = {(r.property_name, r.target_value, r.source_value)
                               for r in backward.differences() if r.status == ComparisonStatus.MISMATCH}
        assert forward_mismatches == backward_mismatches

    def test_sample_environments_differ_where_expected(self, dev_snapshot, prod_snapshot) -> None:
        report = ComparisonEngine().compare(dev_snapshot, prod_snapshot)
        summary = report.summary()

        assert summary.source_only == 2
        assert summary.target_only == 1
        assert summary.differences == 2

        fields = report.for_type(ComparisonType.FIELD)
        dev_only = [r for r in fields if r.entry_name == "Dev Only Field"]
        assert dev_only[0].status == ComparisonStatus.MISSING_IN_TARGET
        assert dev_only[0].severity == Severity.CRITICAL

        rare = [r for r in report.for_type(ComparisonType.VALUES_LIST_VALUE) if r.item_identifier == "Rare"]
        assert rare[0].item_name == "Likelihood > Unlikely"

    def test_parallel_and_sequential_agree(self, dev_snapshot, prod_snapshot) -> None:
        parallel = ComparisonEngine(parallel=True, max_workers=4).compare(dev_snapshot, prod_snapshot)
        sequential = ComparisonEngine(parallel=False).compare(dev_snapshot, prod_snapshot)

        assert parallel.results == sequential.results
        assert parallel.summary() == sequential.summary()

    def test_only_enabled_categories_run(self, dev_snapshot, prod_snapshot) -> None:
        options = CollectionOptions.only([ComparisonType.MODULE, ComparisonType.REPORT])

        report = ComparisonEngine().compare(dev_snapshot, prod_snapshot, options)

        assert set(report.results) == {ComparisonType.MODULE, ComparisonType.REPORT}

    def test_values_list_flag_also_produces_value_rows(self, dev_snapshot, prod_snapshot) -> None:
        options = CollectionOptions.only([ComparisonType.VALUES_LIST])

        report = ComparisonEngine().compare(dev_snapshot, prod_snapshot, options)

        assert set(report.results) == {ComparisonType.VALUES_LIST, ComparisonType.VALUES_LIST_VALUE}

    def test_max_depth_zero_has_no_value_rows(self, dev_snapshot, prod_snapshot) -> None:
        options = CollectionOptions(max_depth=0)

        report = ComparisonEngine().compare(dev_snapshot, prod_snapshot, options)

        assert report.for_type(ComparisonType.VALUES_LIST_VALUE) == []
        assert report.for_type(ComparisonType.VALUES_LIST) != []

    def test_max_depth_one_hides_nested_value_differences(self, dev_snapshot, prod_snapshot) -> None:
        report = ComparisonEngine().compare(dev_snapshot, prod_snapshot, CollectionOptions(max_depth=1))

        values = report.for_type(ComparisonType.VALUES_LIST_VALUE)
        assert all(r.status == ComparisonStatus.MATCH for r in values)
        assert not any(r.item_identifier == "Rare" for r in values)

    def test_module_missing_in_target(self) -> None:
        source = make_snapshot("Dev", modules=[make_module("Risk Register")])
        target = make_snapshot("Prod")

        report = ComparisonEngine().compare(source, target)

        results = report.all_results()
        assert len(results) == 1
        assert results[0].comparison_type == ComparisonType.MODULE
        assert results[0].status == ComparisonStatus.MISSING_IN_TARGET
        assert results[0].property_name == SOURCE_ONLY

    def test_empty_snapshots_give_empty_report(self) -> None:
        report = ComparisonEngine().compare(make_snapshot("Dev"), make_snapshot("Prod"))

        assert report.all_results() == []
        assert report.summary().total == 0
        assert len(report.results) == len(ComparisonType)

    def test_failing_category_raises_with_every_failure(self, dev_snapshot) -> None:
        comparators = {
            ComparisonType.MODULE: _failing_comparator,
            ComparisonType.FIELD: _failing_comparator,
        }
        engine = ComparisonEngine(comparators=comparators)

        with pytest.raises(ComparisonError) as excinfo:
            engine.compare(dev_snapshot, dev_snapshot)

        assert set(excinfo.value.categories) == {ComparisonType.MODULE, ComparisonType.FIELD}
        assert "collector returned garbage" in str(excinfo.value)

    def test_sequential_failure_still_runs_other_categories(self, dev_snapshot) -> None:
        calls = []

        def recording(source, target, options):
            calls.append("report")
            return CategoryOutcome()

        engine = ComparisonEngine(
            parallel=False,
            comparators={ComparisonType.MODULE: _failing_comparator, ComparisonType.REPORT: recording},
        )

        with pytest.raises(ComparisonError):
            engine.compare(dev_snapshot, dev_snapshot)
        assert calls == ["report"]

    def test_duplicate_keys_logged_as_warning(self, caplog) -> None:
        source = make_snapshot("Dev", fields=[make_field(formula="A"), make_field(formula="B")])
        target = make_snapshot("Prod", fields=[make_field(formula="A")])

        with caplog.at_level(logging.WARNING, logger="core.engine"):
            report = ComparisonEngine().compare(source, target)

        assert report.diagnostics[ComparisonType.FIELD].source_duplicates == 1
        assert "duplicate keys" in caplog.text

    def test_compare_environments_uses_settings(self, dev_snapshot, prod_snapshot, monkeypatch) -> None:
        from config import settings

        monkeypatch.setattr(settings, "PARALLEL_COMPARISON", False)

        report = compare_environments(dev_snapshot, prod_snapshot)

        assert report.source_environment_name == "Dev"
        assert report.target_environment_name == "Prod"


# ---------------------------------------------------------------------------
# Report model
# ---------------------------------------------------------------------------


class TestComparisonReport:
    def test_to_dict_excludes_matches_on_request(self, dev_snapshot, prod_snapshot) -> None:
        report = ComparisonEngine().compare(dev_snapshot, prod_snapshot)

        data = report.to_dict(include_matches=False)

        rows = [row for rows in data["categories"].values() for row in rows]
        assert rows
        assert all(row["status"] != "Match" for row in rows)
        assert data["summary"]["matches"] > 0

    def test_values_are_serialized_as_canonical_strings(self) -> None:
        source = make_snapshot("Dev", modules=[make_module(is_leveled=True)])
        target = make_snapshot("Prod", modules=[make_module(is_leveled=False)])

        data = ComparisonEngine().compare(source, target).to_dict()

        row = data["categories"]["Module"][0]
        assert row["property_name"] == "IsLeveled"
        assert row["source_value"] == "True"
        assert row["target_value"] == "False"

    def test_summary_breakdown(self) -> None:
        source = make_snapshot(
            "Dev",
            modules=[make_module("Risk Register")],
            values_lists=[make_values_list("Priority", make_value("High"), make_value("Low"))],
        )
        target = make_snapshot(
            "Prod",
            values_lists=[make_values_list("Priority", make_value("High"))],
        )

        summary = ComparisonEngine().compare(source, target).summary()

        assert summary.source_only == 2
        assert summary.matches == 2
        assert summary.by_type == {"Module": 1, "ValuesList": 1, "ValuesListValue": 2}
        assert summary.by_severity == {"Warning": 2}
