"""
tests/test_visibility_pipeline.py

Pytest tests for VisibilityPipeline with an in-memory fetcher and sink.

Coverage
--------
- Failure isolation: a failing keyword still yields an all-zero row
- Ordering: harvest, persist, publish; fetcher closed afterwards
- Cancellation between keywords
- Empty keyword list is a configuration error
"""

from __future__ import annotations

import threading
from collections.abc import Sequence

import pytest

from app.config import PublisherSettings
from app.domain.visibility import ApiPagePayload, KeywordEntry, MetricsRow, Offer
from app.errors import ConfigurationError
from app.publishing import MetricsPublisher
from app.scraping.base import OfferFetcher
from app.scraping.config.models import HarvestSettings
from app.scraping.engine import CANCELLED_REASON, VisibilityPipeline
from app.scraping.storage import ResultSink
from app.visibility import PatternRegistry

RUN_DATE = "2025-01-15"


class InMemoryFetcher(OfferFetcher):
    mode = "memory"

    def __init__(
        self,
        *,
        settings: HarvestSettings,
        providers: dict[str, list[str]],
        failing: Sequence[str] = (),
        cancel_after: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        super().__init__(settings=settings)
        self._providers = providers
        self._failing = set(failing)
        self._cancel_after = cancel_after
        self._cancel_event = cancel_event
        self.events: list[str] = []

    def open(self) -> None:
        self.events.append("open")

    def close(self) -> None:
        self.events.append("close")

    def fetch(self, keyword: str) -> list[Offer]:
        self.events.append(f"fetch:{keyword}")
        if keyword == self._cancel_after and self._cancel_event is not None:
            self._cancel_event.set()
        if keyword in self._failing:
            raise TimeoutError("navigation timed out")
        self.pages.append(ApiPagePayload(keyword=keyword, page=1, data={}))
        return [
            Offer(title=f"{keyword} {index}", provider=provider, termine=1, keyword=keyword)
            for index, provider in enumerate(self._providers.get(keyword, []))
        ]


class RecordingSink(ResultSink):
    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.offers: list[Offer] = []
        self.rows: list[MetricsRow] = []
        self.pages: list[ApiPagePayload] = []

    def persist_offers(self, offers):
        self.events.append("persist_offers")
        self.offers = list(offers)
        return "memory:offers" if offers else None

    def persist_metrics(self, rows):
        self.events.append("persist_metrics")
        self.rows = list(rows)
        return "memory:metrics"

    def persist_api_pages(self, pages):
        self.pages = list(pages)
        return "memory:pages"


class RecordingPublisher(MetricsPublisher):
    def __init__(self, events: list[str]) -> None:
        super().__init__(
            settings=PublisherSettings(dry_run=True),
            patterns=PatternRegistry.default(),
            sleep=lambda _: None,
        )
        self.events = events

    def publish(self, rows):
        self.events.append("publish")
        return super().publish(rows)


KEYWORDS = [KeywordEntry("sales", "PM"), KeywordEntry("vertrieb", "PM"), KeywordEntry("python", "ITS")]


def _pipeline(fetcher: InMemoryFetcher, *, publish: bool = True, cancel_event=None):
    sink = RecordingSink(fetcher.events)
    publisher = RecordingPublisher(fetcher.events) if publish else None
    pipeline = VisibilityPipeline(
        fetcher=fetcher,
        sink=sink,
        publisher=publisher,
        patterns=PatternRegistry.default(),
        cancel_event=cancel_event,
    )
    return pipeline, sink


def test_failed_keyword_still_gets_zero_row(harvest_settings: HarvestSettings) -> None:
    fetcher = InMemoryFetcher(
        settings=harvest_settings,
        providers={"sales": ["Forward", "Franklin", "X"], "python": ["impaqt"]},
        failing=["vertrieb"],
    )
    pipeline, sink = _pipeline(fetcher)

    summary = pipeline.run(KEYWORDS, run_date=RUN_DATE)

    assert [row.keyword for row in sink.rows] == ["sales", "vertrieb", "python"]
    assert sink.rows[0].visibility["forward"] == 33.33
    assert sink.rows[1].total_offer_count == 0
    assert sink.rows[2].visibility["impaqt"] == 100.0
    assert summary.keywords_total == 3
    assert summary.keywords_succeeded == 2
    assert summary.keywords_failed == 1
    assert summary.failed_keywords[0].keyword == "vertrieb"
    assert summary.offers_total == 4
    assert summary.rows_total == 3
    assert summary.rows_published == 3
    assert summary.metrics_path == "memory:metrics"
    assert len(sink.pages) == 2


def test_steps_run_in_order(harvest_settings: HarvestSettings) -> None:
    fetcher = InMemoryFetcher(settings=harvest_settings, providers={"sales": ["Forward"]})
    pipeline, _ = _pipeline(fetcher)

    pipeline.run(KEYWORDS[:2], run_date=RUN_DATE)

    assert fetcher.events == [
        "open",
        "fetch:sales",
        "fetch:vertrieb",
        "close",
        "persist_offers",
        "persist_metrics",
        "publish",
    ]


def test_without_publisher_publishing_is_skipped(harvest_settings: HarvestSettings) -> None:
    fetcher = InMemoryFetcher(settings=harvest_settings, providers={})
    pipeline, sink = _pipeline(fetcher, publish=False)

    summary = pipeline.run(KEYWORDS, run_date=RUN_DATE)

    assert summary.publish_skipped is True
    assert summary.rows_published == 0
    assert summary.offers_path is None
    assert len(sink.rows) == 3


def test_cancel_marks_remaining_keywords_failed(harvest_settings: HarvestSettings) -> None:
    cancel_event = threading.Event()
    fetcher = InMemoryFetcher(
        settings=harvest_settings,
        providers={"sales": ["Forward"]},
        cancel_after="sales",
        cancel_event=cancel_event,
    )
    pipeline, sink = _pipeline(fetcher, publish=False, cancel_event=cancel_event)

    summary = pipeline.run(KEYWORDS, run_date=RUN_DATE)

    assert "fetch:vertrieb" not in fetcher.events
    assert [item.error for item in summary.failed_keywords] == [CANCELLED_REASON, CANCELLED_REASON]
    assert len(sink.rows) == 3


def test_default_run_date_is_iso_date(harvest_settings: HarvestSettings) -> None:
    fetcher = InMemoryFetcher(settings=harvest_settings, providers={})
    pipeline, _ = _pipeline(fetcher, publish=False)

    summary = pipeline.run(KEYWORDS[:1])

    assert len(summary.run_date) == 10
    assert summary.run_date[4] == "-"


def test_empty_keyword_list_is_rejected(harvest_settings: HarvestSettings) -> None:
    fetcher = InMemoryFetcher(settings=harvest_settings, providers={})
    pipeline, _ = _pipeline(fetcher)

    with pytest.raises(ConfigurationError):
        pipeline.run([])
    assert fetcher.events == []
