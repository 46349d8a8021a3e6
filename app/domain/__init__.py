"""
app/domain package marker.
"""

from app.domain.visibility import (
    UNKNOWN_CATEGORY,
    ApiPagePayload,
    FailedKeyword,
    KeywordEntry,
    KeywordHarvestResult,
    MetricsRow,
    Offer,
    PublishOutcome,
    PublishReport,
    PublishStatus,
    RunSummary,
)

__all__ = [
    "UNKNOWN_CATEGORY",
    "ApiPagePayload",
    "FailedKeyword",
    "KeywordEntry",
    "KeywordHarvestResult",
    "MetricsRow",
    "Offer",
    "PublishOutcome",
    "PublishReport",
    "PublishStatus",
    "RunSummary",
]
