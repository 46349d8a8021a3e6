"""
app/schemas/visibility.py

Response schemas for visibility runs.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.visibility import PublishOutcome, PublishReport, RunSummary


class FailedKeywordResponse(BaseModel):
    keyword: str
    error: str


class PublishOutcomeResponse(BaseModel):
    """
    Delivery result for one metrics row.
    """

    keyword: str
    status: str
    attempts: int = Field(..., ge=0)
    retries: int = Field(..., ge=0)
    status_code: int | None = None
    error: str | None = None


class RunSummaryResponse(BaseModel):
    """
    API/CLI response model for one visibility run.
    """

    run_date: str
    keywords_total: int = Field(..., ge=0)
    keywords_succeeded: int = Field(..., ge=0)
    keywords_failed: int = Field(..., ge=0)
    offers_total: int = Field(..., ge=0)
    rows_total: int = Field(..., ge=0)
    rows_published: int = Field(..., ge=0)
    rows_failed: int = Field(..., ge=0)
    publish_skipped: bool = False
    failed_keywords: list[FailedKeywordResponse] = Field(default_factory=list)
    publish_outcomes: list[PublishOutcomeResponse] = Field(default_factory=list)
    offers_path: str | None = None
    metrics_path: str | None = None

    @classmethod
    def from_summary(cls, summary: RunSummary) -> "RunSummaryResponse":
        return cls(
            run_date=summary.run_date,
            keywords_total=summary.keywords_total,
            keywords_succeeded=summary.keywords_succeeded,
            keywords_failed=summary.keywords_failed,
            offers_total=summary.offers_total,
            rows_total=summary.rows_total,
            rows_published=summary.rows_published,
            rows_failed=summary.rows_failed,
            publish_skipped=summary.publish_skipped,
            failed_keywords=[
                FailedKeywordResponse(keyword=item.keyword, error=item.error)
                for item in summary.failed_keywords
            ],
            publish_outcomes=[_outcome(outcome) for outcome in summary.publish_outcomes],
            offers_path=summary.offers_path,
            metrics_path=summary.metrics_path,
        )


class PublishReportResponse(BaseModel):
    published: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    skipped: bool = False
    outcomes: list[PublishOutcomeResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: PublishReport) -> "PublishReportResponse":
        return cls(
            published=report.published,
            failed=report.failed,
            skipped=report.skipped,
            outcomes=[_outcome(outcome) for outcome in report.outcomes],
        )


def _outcome(outcome: PublishOutcome) -> PublishOutcomeResponse:
    return PublishOutcomeResponse(
        keyword=outcome.keyword,
        status=outcome.status,
        attempts=outcome.attempts,
        retries=outcome.retries,
        status_code=outcome.status_code,
        error=outcome.error,
    )


class HealthResponse(BaseModel):
    status: str = "ok"
    scheduler_enabled: bool = False
    publish_configured: bool = False
