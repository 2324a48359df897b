"""
Comparison orchestrator.

Runs one worker per enabled category and assembles a single report.
Workers read only the two immutable snapshots and return their own
result slots, so they run concurrently without locking. The only
blocking point is the final join.

A failure in any category aborts the whole run: a partial report
cannot distinguish "everything matched" from "category never ran".
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Optional

from core.comparators import CategoryOutcome, Comparator, default_comparators
from core.models import CollectionOptions, MetadataSnapshot
from core.results import ComparisonReport, ComparisonType

logger = logging.getLogger(__name__)


class ComparisonError(RuntimeError):
    """Raised when one or more category workers fail."""

    def __init__(self, failures: dict[ComparisonType, BaseException]):
        self.failures = failures
        details = "; ".join(
            f"{comparison_type.value}: {type(error).__name__}: {error}"
            for comparison_type, error in failures.items()
        )
        super().__init__(f"Comparison failed in {len(failures)} category(ies): {details}")

    @property
    def categories(self) -> list[ComparisonType]:
        return list(self.failures)


class ComparisonEngine:
    """
    Compares two metadata snapshots category by category.

    Args:
        parallel: Run category workers on a thread pool
        max_workers: Pool size (None lets the executor decide)
        comparators: Override the comparator per category
    """

    def __init__(
        self,
        parallel: bool = True,
        max_workers: Optional[int] = None,
        comparators: Optional[dict[ComparisonType, Comparator]] = None
    ):
        self.parallel = parallel
        self.max_workers = max_workers
        self.comparators = comparators if comparators is not None else default_comparators()

    def compare(
        self,
        source: MetadataSnapshot,
        target: MetadataSnapshot,
        options: Optional[CollectionOptions] = None
    ) -> ComparisonReport:
        """
        Compare every enabled category of two snapshots.

        Returns:
            ComparisonReport with one sorted result list per category

        Raises:
            ComparisonError: if any category worker raised
        """
        options = options or CollectionOptions()
        enabled = [t for t in options.enabled_types() if t in self.comparators]

        logger.info(
            f"Comparing {source.environment_name or 'source'} -> "
            f"{target.environment_name or 'target'}: {len(enabled)} categories"
        )
        started = time.monotonic()

        if self.parallel and len(enabled) > 1:
            outcomes, failures = self._run_parallel(enabled, source, target, options)
        else:
            outcomes, failures = self._run_sequential(enabled, source, target, options)

        if failures:
            for comparison_type, error in failures.items():
                logger.error(f"Category {comparison_type.value} failed: {error}")
            raise ComparisonError(failures)

        report = ComparisonReport(
            source_environment_name=source.environment_name,
            target_environment_name=target.environment_name,
            comparison_date=datetime.now(timezone.utc)
        )
        for comparison_type in enabled:
            outcome = outcomes[comparison_type]
            report.results.update(outcome.results)
            report.diagnostics.update(outcome.diagnostics)

        for comparison_type, diagnostics in report.diagnostics.items():
            if diagnostics.has_warnings:
                logger.warning(
                    f"{comparison_type.value}: duplicate keys collapsed "
                    f"(source={diagnostics.source_duplicates}, target={diagnostics.target_duplicates}); "
                    f"first occurrence kept"
                )

        elapsed = time.monotonic() - started
        logger.info(f"Comparison completed. Total results: {len(report.all_results())} in {elapsed:.2f}s")

        return report

    def _run_sequential(self, enabled, source, target, options):
        outcomes: dict[ComparisonType, CategoryOutcome] = {}
        failures: dict[ComparisonType, BaseException] = {}

        for comparison_type in enabled:
            try:
                outcomes[comparison_type] = self.comparators[comparison_type](source, target, options)
            except Exception as e:
                failures[comparison_type] = e

        return outcomes, failures

    def _run_parallel(self, enabled, source, target, options):
        outcomes: dict[ComparisonType, CategoryOutcome] = {}
        failures: dict[ComparisonType, BaseException] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="compare") as executor:
            futures = {
                comparison_type: executor.submit(self.comparators[comparison_type], source, target, options)
                for comparison_type in enabled
            }
            # No cancellation: every dispatched worker runs to completion
            wait(futures.values())

        for comparison_type, future in futures.items():
            error = future.exception()
            if error is not None:
                failures[comparison_type] = error
            else:
                outcomes[comparison_type] = future.result()

        return outcomes, failures


def compare_environments(
    source: MetadataSnapshot,
    target: MetadataSnapshot,
    options: Optional[CollectionOptions] = None
) -> ComparisonReport:
    """
    Main entry point for comparing two environments.

    Uses the parallelism settings from config.
    """
    from config import settings

    engine = ComparisonEngine(
        parallel=settings.PARALLEL_COMPARISON,
        max_workers=settings.MAX_WORKERS
    )
    return engine.compare(source, target, options)
