"""
Base offer fetcher abstraction for keyword harvesting.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from app.domain.visibility import ApiPagePayload, KeywordHarvestResult, Offer
from app.scraping.config.models import HarvestSettings
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


class OfferFetcher(ABC):
    """
    Collects offers for one keyword at a time.

    Subclasses implement ``fetch``, which may raise. ``harvest`` is the
    keyword boundary: it converts any failure into an error result so the
    caller never needs its own exception handling. A fetcher is opened once
    per run and reused for every keyword.
    """

    mode: str = ""

    def __init__(self, *, settings: HarvestSettings) -> None:
        self.settings = settings
        self.pages: list[ApiPagePayload] = []
        self._failed_pages = 0

    def __enter__(self) -> "OfferFetcher":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """
        Acquire long-lived resources (browser, HTTP session).
        """

    def close(self) -> None:
        """
        Release resources acquired in ``open``.
        """

    @abstractmethod
    def fetch(self, keyword: str) -> list[Offer]:
        """
        Return all offers for ``keyword``.
        """

    def harvest(self, keyword: str) -> KeywordHarvestResult:
        self._failed_pages = 0
        try:
            offers = self.fetch(keyword)
        except Exception as exc:
            reason = str(exc) or exc.__class__.__name__
            log_event(
                logger,
                logging.ERROR,
                "keyword_harvest_failed",
                mode=self.mode,
                keyword=keyword,
                error=reason,
            )
            return KeywordHarvestResult.failure(keyword, reason)

        log_event(
            logger,
            logging.INFO,
            "keyword_harvested",
            mode=self.mode,
            keyword=keyword,
            offers=len(offers),
            failed_pages=self._failed_pages,
        )
        return KeywordHarvestResult.success(keyword, offers, failed_pages=self._failed_pages)

    def record_page_failure(self) -> None:
        self._failed_pages += 1
