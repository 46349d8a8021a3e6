"""
app/api/routers/visibility.py

Keyword visibility run endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.errors import ConfigurationError
from app.schemas.visibility import PublishReportResponse, RunSummaryResponse
from app.services.visibility_run_service import (
    VisibilityRunService,
    get_visibility_run_service,
)

router = APIRouter(prefix="/visibility", tags=["visibility"])


@router.post("/run", response_model=RunSummaryResponse)
def run_visibility(
    keyword: list[str] | None = Query(
        default=None,
        description="Keywords to harvest; defaults to the configured keyword set",
    ),
    mode: str | None = Query(default=None, description="Harvest mode: api or rendered"),
    publish: bool = Query(default=True, description="Send metrics rows to the spreadsheet"),
    dry_run: bool | None = Query(default=None, description="Log payloads instead of posting"),
    service: VisibilityRunService = Depends(get_visibility_run_service),
) -> RunSummaryResponse:
    """
    Harvest, aggregate, persist and optionally publish one visibility run.
    """

    try:
        summary = service.run(keywords=keyword, mode=mode, publish=publish, dry_run=dry_run)
    except (ConfigurationError, FileNotFoundError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return RunSummaryResponse.from_summary(summary)


@router.post("/publish", response_model=PublishReportResponse)
def publish_visibility(
    dry_run: bool | None = Query(default=None, description="Log payloads instead of posting"),
    service: VisibilityRunService = Depends(get_visibility_run_service),
) -> PublishReportResponse:
    """
    Re-publish the last persisted metrics CSV without harvesting.
    """

    try:
        report = service.replay(dry_run=dry_run)
    except (ConfigurationError, FileNotFoundError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return PublishReportResponse.from_report(report)
