"""
app/schemas package marker.
"""

from app.schemas.visibility import (
    FailedKeywordResponse,
    HealthResponse,
    PublishOutcomeResponse,
    PublishReportResponse,
    RunSummaryResponse,
)

__all__ = [
    "FailedKeywordResponse",
    "HealthResponse",
    "PublishOutcomeResponse",
    "PublishReportResponse",
    "RunSummaryResponse",
]
