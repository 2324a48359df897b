"""
Comparison routes for Parity.

Accepts two metadata snapshots and returns the comparison report.
Nothing is stored.
"""
import logging
from typing import Optional

from fastapi import APIRouter, UploadFile, File, HTTPException, Query
from starlette.concurrency import run_in_threadpool

from config import settings
from core import (
    CATEGORY_SPECS,
    CollectionOptions,
    ComparisonError,
    SnapshotParseError,
    compare_environments,
    parse_snapshot_content,
    parse_snapshot_dict,
    resolve_category,
)
from api.schemas import (
    CategoryInfo,
    CollectionOptionsSchema,
    ComparisonReportResponse,
    ComparisonRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _build_options(schema: CollectionOptionsSchema) -> CollectionOptions:
    """Translate request options, resolving category names."""
    max_depth = schema.max_depth if schema.max_depth is not None else settings.DEFAULT_MAX_DEPTH

    if schema.categories is not None:
        try:
            types = [resolve_category(name) for name in schema.categories]
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        options = CollectionOptions.only(types, max_depth=max_depth)
        options.selected_module_ids = list(schema.selected_module_ids)
        return options

    flags = schema.model_dump(exclude={"categories", "max_depth"})
    return CollectionOptions(max_depth=max_depth, **flags)


async def _run_comparison(source, target, options: CollectionOptions, include_matches: bool) -> ComparisonReportResponse:
    try:
        report = await run_in_threadpool(compare_environments, source, target, options)
    except ComparisonError as e:
        logger.error(f"Comparison failed: {e}")
        raise HTTPException(
            status_code=500,
            detail={
                "message": "Comparison failed",
                "categories": {t.value: str(err) for t, err in e.failures.items()},
            }
        )

    return ComparisonReportResponse(**report.to_dict(include_matches=include_matches))


@router.get("/categories", response_model=list[CategoryInfo])
async def list_categories():
    """List the categories that can be compared and how they are keyed."""
    return [
        CategoryInfo(
            name=comparison_type.value,
            snapshot_key=spec.snapshot_key,
            key_attributes=list(spec.key_attributes),
            excluded_attributes=sorted(spec.excluded),
            severity={
                "source_only": spec.severity.source_only.value,
                "target_only": spec.severity.target_only.value,
                "mismatch": spec.severity.mismatch.value,
                "match": spec.severity.match.value,
            }
        )
        for comparison_type, spec in CATEGORY_SPECS.items()
    ]


@router.post("", response_model=ComparisonReportResponse)
async def compare_snapshots(
    request: ComparisonRequest,
    include_matches: bool = Query(True, description="Include Match rows in the report")
):
    """
    Compare two snapshots and return the categorized differences.
    """
    try:
        source = parse_snapshot_dict(request.source, "source")
        target = parse_snapshot_dict(request.target, "target")
    except SnapshotParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    options = _build_options(request.options)
    return await _run_comparison(source, target, options, include_matches)


@router.post("/files", response_model=ComparisonReportResponse)
async def compare_files(
    source_file: UploadFile = File(...),
    target_file: UploadFile = File(...),
    only: Optional[list[str]] = Query(None, description="Categories to compare (default: all)"),
    max_depth: Optional[int] = Query(None, ge=0),
    include_matches: bool = Query(True)
):
    """
    Compare two uploaded snapshot JSON files.
    """
    if not (source_file.filename or "").lower().endswith('.json'):
        raise HTTPException(status_code=400, detail="Source file must be JSON")
    if not (target_file.filename or "").lower().endswith('.json'):
        raise HTTPException(status_code=400, detail="Target file must be JSON")

    try:
        source = parse_snapshot_content(await source_file.read(), source_file.filename)
        target = parse_snapshot_content(await target_file.read(), target_file.filename)
    except SnapshotParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    options = _build_options(CollectionOptionsSchema(categories=only, max_depth=max_depth))
    return await _run_comparison(source, target, options, include_matches)
