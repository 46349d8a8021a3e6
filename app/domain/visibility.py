"""
app/domain/visibility.py

Domain models for keyword harvesting, visibility metrics and publishing.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

UNKNOWN_CATEGORY = "UNKNOWN"


@dataclass(frozen=True)
class KeywordEntry:
    """
    One search keyword with its business category.
    """

    keyword: str
    category: str = UNKNOWN_CATEGORY


@dataclass(frozen=True)
class Offer:
    """
    One scraped course listing.

    ``termine`` is the number of available dates, or ``None`` when the
    listing did not expose a parseable count.
    """

    title: str
    provider: str
    termine: int | None
    keyword: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "termine": self.termine,
            "title": self.title,
            "provider": self.provider,
            "keyword": self.keyword,
        }


@dataclass(frozen=True)
class ApiPagePayload:
    """
    Raw JSON body of one search API page, kept for audit and replay.
    """

    keyword: str
    page: int
    data: Any

    def to_dict(self) -> dict[str, Any]:
        return {"keyword": self.keyword, "page": self.page, "data": self.data}


@dataclass(frozen=True)
class KeywordHarvestResult:
    """
    Outcome of harvesting one keyword: offers on success, a reason on failure.
    """

    keyword: str
    offers: tuple[Offer, ...] = ()
    error: str | None = None
    failed_pages: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        keyword: str,
        offers: list[Offer] | tuple[Offer, ...],
        *,
        failed_pages: int = 0,
    ) -> "KeywordHarvestResult":
        return cls(keyword=keyword, offers=tuple(offers), failed_pages=failed_pages)

    @classmethod
    def failure(cls, keyword: str, reason: str) -> "KeywordHarvestResult":
        return cls(keyword=keyword, offers=(), error=reason)


@dataclass(frozen=True)
class MetricsRow:
    """
    Visibility metrics for one keyword in one run.

    ``visibility`` maps pattern name to a percentage in [0, 100] rounded to
    two decimals, ordered like the pattern registry that produced it.
    """

    date: str
    keyword: str
    category: str
    total_offer_count: int
    visibility: Mapping[str, float] = field(default_factory=dict)


class PublishStatus:
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PublishOutcome:
    """
    Delivery result for one metrics row.
    """

    keyword: str
    status: str
    attempts: int = 0
    retries: int = 0
    status_code: int | None = None
    error: str | None = None
    response: Any = None

    @property
    def succeeded(self) -> bool:
        return self.status == PublishStatus.DONE


@dataclass(frozen=True)
class PublishReport:
    """
    Aggregate of all publish outcomes for one batch.
    """

    outcomes: list[PublishOutcome] = field(default_factory=list)
    skipped: bool = False

    @property
    def published(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.succeeded)


@dataclass(frozen=True)
class FailedKeyword:
    keyword: str
    error: str


@dataclass(frozen=True)
class RunSummary:
    """
    End-of-run counters for harvesting and publishing.
    """

    run_date: str
    keywords_total: int
    keywords_succeeded: int
    keywords_failed: int
    offers_total: int
    rows_total: int
    rows_published: int
    rows_failed: int
    publish_skipped: bool = False
    failed_keywords: list[FailedKeyword] = field(default_factory=list)
    publish_outcomes: list[PublishOutcome] = field(default_factory=list)
    offers_path: str | None = None
    metrics_path: str | None = None
