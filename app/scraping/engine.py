"""
Keyword harvesting and visibility pipeline.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from datetime import datetime, timezone

from app.domain.visibility import (
    FailedKeyword,
    KeywordEntry,
    KeywordHarvestResult,
    PublishReport,
    RunSummary,
)
from app.errors import ConfigurationError
from app.publishing.metrics_publisher import MetricsPublisher
from app.scraping.base import OfferFetcher
from app.scraping.logging_utils import log_event
from app.scraping.storage import ResultSink
from app.visibility.aggregator import aggregate_all, collect_offers
from app.visibility.patterns import PatternRegistry

logger = logging.getLogger(__name__)

CANCELLED_REASON = "cancelled"


class VisibilityPipeline:
    """
    Harvest every keyword, aggregate, persist, then publish.

    Keywords run strictly one after another on a single fetcher. A failed
    keyword still yields an all-zero metrics row, and publishing always runs.
    """

    def __init__(
        self,
        *,
        fetcher: OfferFetcher,
        sink: ResultSink,
        publisher: MetricsPublisher | None,
        patterns: PatternRegistry,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._sink = sink
        self._publisher = publisher
        self._patterns = patterns
        self._cancel_event = cancel_event

    def run(
        self,
        keywords: Sequence[KeywordEntry],
        *,
        run_date: str | None = None,
    ) -> RunSummary:
        if not keywords:
            raise ConfigurationError("No keywords supplied for the visibility run.")

        date = run_date or datetime.now(timezone.utc).date().isoformat()
        log_event(
            logger,
            logging.INFO,
            "visibility_run_started",
            keywords=len(keywords),
            mode=self._fetcher.mode,
            run_date=date,
        )

        with self._fetcher:
            results = self.harvest(keywords)
        self._log_harvest_summary(results)

        offers = collect_offers(results)
        rows = aggregate_all(keywords=keywords, offers=offers, date=date, patterns=self._patterns)

        offers_path = self._sink.persist_offers(offers)
        if self._fetcher.pages:
            self._sink.persist_api_pages(self._fetcher.pages)
        metrics_path = self._sink.persist_metrics(rows)

        if self._publisher is not None:
            report = self._publisher.publish(rows)
        else:
            report = PublishReport(skipped=True)

        failed = [
            FailedKeyword(keyword=result.keyword, error=result.error or "")
            for result in results
            if not result.ok
        ]
        summary = RunSummary(
            run_date=date,
            keywords_total=len(keywords),
            keywords_succeeded=len(results) - len(failed),
            keywords_failed=len(failed),
            offers_total=len(offers),
            rows_total=len(rows),
            rows_published=report.published,
            rows_failed=report.failed,
            publish_skipped=report.skipped,
            failed_keywords=failed,
            publish_outcomes=list(report.outcomes),
            offers_path=offers_path,
            metrics_path=metrics_path,
        )
        log_event(
            logger,
            logging.INFO,
            "visibility_run_completed",
            keywords_succeeded=summary.keywords_succeeded,
            keywords_failed=summary.keywords_failed,
            offers=summary.offers_total,
            rows_published=summary.rows_published,
            rows_failed=summary.rows_failed,
        )
        return summary

    def harvest(self, keywords: Sequence[KeywordEntry]) -> list[KeywordHarvestResult]:
        results: list[KeywordHarvestResult] = []
        for entry in keywords:
            if self._cancel_event is not None and self._cancel_event.is_set():
                results.append(KeywordHarvestResult.failure(entry.keyword, CANCELLED_REASON))
                continue
            results.append(self._fetcher.harvest(entry.keyword))
        return results

    @staticmethod
    def _log_harvest_summary(results: Sequence[KeywordHarvestResult]) -> None:
        failed = [result for result in results if not result.ok]
        log_event(
            logger,
            logging.INFO,
            "harvest_summary",
            succeeded=len(results) - len(failed),
            failed=len(failed),
            total=len(results),
        )
        for result in failed:
            log_event(
                logger,
                logging.WARNING,
                "harvest_keyword_failed",
                keyword=result.keyword,
                error=result.error,
            )
