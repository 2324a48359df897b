# Parity v1.2.0
#!/usr/bin/env python3
"""
Parity CLI

Command-line interface for comparing platform metadata snapshots.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from config import settings

# Differences printed per category before truncating
MAX_ROWS_PER_CATEGORY = 25


def _parse_categories(values):
    """Resolve comma-separated category names from repeated arguments."""
    from core import resolve_category

    names = [name for value in values or [] for name in value.split(",") if name.strip()]
    return [resolve_category(name) for name in names]


def _build_options(only, skip, max_depth):
    from core import CATEGORY_SPECS, CollectionOptions

    wanted = _parse_categories(only) or list(CATEGORY_SPECS)
    skipped = set(_parse_categories(skip))
    return CollectionOptions.only(
        [t for t in wanted if t not in skipped],
        max_depth=settings.DEFAULT_MAX_DEPTH if max_depth is None else max_depth
    )


def print_report(report, show_matches: bool = False):
    """Print a report summary and its rows grouped by category."""
    from core import ComparisonStatus

    summary = report.summary()

    print(f"\nComparing: {report.source_environment_name} vs {report.target_environment_name}")
    print("=" * 60)

    if summary.is_identical:
        print(f"✅ Environments are identical ({summary.matches} matching item(s))")
    else:
        print(f"⚠️  {summary.source_only + summary.target_only + summary.differences} difference(s) found")
        print(f"   Source only: {summary.source_only}")
        print(f"   Target only: {summary.target_only}")
        print(f"   Mismatches:  {summary.differences}")
        print(f"   Matches:     {summary.matches}")

    for comparison_type, results in report.results.items():
        rows = results if show_matches else [r for r in results if r.status != ComparisonStatus.MATCH]
        if not rows:
            continue

        print(f"\n{comparison_type.value} ({len(rows)}):")
        print("-" * 60)
        for row in rows[:MAX_ROWS_PER_CATEGORY]:
            label = " / ".join(part for part in (row.item_name, row.item_identifier, row.entry_name) if part)
            print(f"  [{row.severity.value}] {label}")
            print(f"    {row.property_name}: {row.status.value}")
            if row.status == ComparisonStatus.MISMATCH:
                print(f"    Source: {row.to_dict()['source_value']}")
                print(f"    Target: {row.to_dict()['target_value']}")
        if len(rows) > MAX_ROWS_PER_CATEGORY:
            print(f"  ... and {len(rows) - MAX_ROWS_PER_CATEGORY} more")

    for comparison_type, diagnostics in report.diagnostics.items():
        if diagnostics.has_warnings:
            print(
                f"\n⚠️  {comparison_type.value}: {diagnostics.source_duplicates} duplicate key(s) in source, "
                f"{diagnostics.target_duplicates} in target (first occurrence kept)"
            )


def compare_snapshots(source_path: str, target_path: str, only=None, skip=None, max_depth=None,
                      sequential: bool = False, show_matches: bool = False, json_path: str = None) -> int:
    """Compare two snapshot files and print differences."""
    from core import ComparisonEngine, ComparisonError, SnapshotParseError, parse_snapshot_file

    try:
        options = _build_options(only, skip, max_depth)
        source = parse_snapshot_file(source_path)
        target = parse_snapshot_file(target_path)
    except (SnapshotParseError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    engine = ComparisonEngine(
        parallel=settings.PARALLEL_COMPARISON and not sequential,
        max_workers=settings.MAX_WORKERS
    )
    try:
        report = engine.compare(source, target, options)
    except ComparisonError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    print_report(report, show_matches)

    if json_path:
        Path(json_path).write_text(
            json.dumps(report.to_dict(include_matches=show_matches), indent=2),
            encoding="utf-8"
        )
        print(f"\n📄 Report written to {json_path}")

    return 0


def list_categories() -> int:
    """List the comparable categories."""
    from core import CATEGORY_SPECS

    print(f"\nCategories ({len(CATEGORY_SPECS)}):")
    print("-" * 60)
    for comparison_type, spec in CATEGORY_SPECS.items():
        print(f"  {comparison_type.value:<20} {spec.snapshot_key:<22} key: {' | '.join(spec.key_attributes)}")
    return 0


def write_samples(out_dir: str) -> int:
    """Write the Dev and Prod demo snapshots as JSON files."""
    from core import snapshot_to_dict
    from core.samples import build_sample_snapshot

    directory = Path(out_dir)
    directory.mkdir(parents=True, exist_ok=True)

    for name in ("Dev", "Prod"):
        path = directory / f"{name.lower()}.json"
        path.write_text(json.dumps(snapshot_to_dict(build_sample_snapshot(name)), indent=2), encoding="utf-8")
        print(f"  ✅ Wrote {path}")

    print(f"\nTry: parity compare {directory / 'dev.json'} {directory / 'prod.json'}")
    return 0


def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the FastAPI server."""
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower()
    )
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Parity - platform metadata comparison",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # compare
    compare_parser = subparsers.add_parser("compare", help="Compare two snapshot files")
    compare_parser.add_argument("source", help="Source environment snapshot (JSON)")
    compare_parser.add_argument("target", help="Target environment snapshot (JSON)")
    compare_parser.add_argument("--only", action="append", help="Categories to compare (comma-separated)")
    compare_parser.add_argument("--skip", action="append", help="Categories to skip (comma-separated)")
    compare_parser.add_argument("--max-depth", type=int, default=None, help="Values list depth to compare")
    compare_parser.add_argument("--sequential", action="store_true", help="Compare categories one at a time")
    compare_parser.add_argument("--show-matches", action="store_true", help="Include matching items")
    compare_parser.add_argument("--json", dest="json_path", help="Write the report as JSON to this path")

    # categories
    subparsers.add_parser("categories", help="List comparable categories")

    # sample
    sample_parser = subparsers.add_parser("sample", help="Write demo Dev/Prod snapshots")
    sample_parser.add_argument("out_dir", help="Directory to write the snapshots to")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose or settings.DEBUG else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not args.command:
        parser.print_help()
        return 0

    if args.command == "compare":
        if args.max_depth is not None and args.max_depth < 0:
            parser.error("--max-depth must be zero or greater")
        return compare_snapshots(
            args.source, args.target, args.only, args.skip, args.max_depth,
            args.sequential, args.show_matches, args.json_path
        )
    elif args.command == "categories":
        return list_categories()
    elif args.command == "sample":
        return write_samples(args.out_dir)
    elif args.command == "serve":
        return run_server(args.host, args.port, args.reload)

    return 0


if __name__ == "__main__":
    sys.exit(main())
