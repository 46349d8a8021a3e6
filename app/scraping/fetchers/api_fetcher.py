"""
Search API fetcher: pages through the JSON course-search endpoint.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.domain.visibility import ApiPagePayload, Offer
from app.errors import PageFetchError
from app.scraping.base import OfferFetcher
from app.scraping.config.models import HarvestMode, HarvestSettings
from app.scraping.logging_utils import log_event
from app.scraping.rate_limiter import DomainRateLimiter

logger = logging.getLogger(__name__)


def build_search_params(*, keyword: str, page: int, sort: str = "std") -> dict[str, str]:
    """
    Deterministic query parameters for one (keyword, page) request.
    """

    return {
        "ortsunabhaengig": "false",
        "page": str(page),
        "sort": sort,
        "sw": keyword,
        "ute": "false",
        "dac": "false",
    }


def resolve_path(data: Any, path: str) -> Any:
    """
    Follow a dot-separated path through nested dicts; None when absent.
    """

    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


class ApiOfferFetcher(OfferFetcher):
    """
    Fetches a fixed page range per keyword. A failing page is logged and
    skipped; the remaining pages of the keyword still count.
    """

    mode = HarvestMode.API

    def __init__(
        self,
        *,
        settings: HarvestSettings,
        session: requests.Session | None = None,
        rate_limiter: DomainRateLimiter | None = None,
    ) -> None:
        super().__init__(settings=settings)
        self._session = session
        self._owns_session = session is None
        self._rate_limiter = rate_limiter or DomainRateLimiter(
            rate_limit_per_second=settings.rate_limit_per_second
        )

    def open(self) -> None:
        if self._session is None:
            self._session = requests.Session()

    def close(self) -> None:
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None

    def fetch(self, keyword: str) -> list[Offer]:
        offers: list[Offer] = []
        for page in range(self.settings.page_start, self.settings.page_end + 1):
            try:
                data = self.fetch_page(keyword=keyword, page=page)
            except PageFetchError as exc:
                self.record_page_failure()
                log_event(
                    logger,
                    logging.WARNING,
                    "api_page_failed",
                    keyword=keyword,
                    page=page,
                    status_code=exc.status_code,
                    error=str(exc),
                )
                continue

            self.pages.append(ApiPagePayload(keyword=keyword, page=page, data=data))
            offers.extend(self.map_offers(data, keyword=keyword))
        return offers

    def fetch_page(self, *, keyword: str, page: int) -> Any:
        if self._session is None:
            self.open()

        url = self.settings.api_endpoint
        self._rate_limiter.wait(url)
        try:
            response = self._session.get(
                url,
                params=build_search_params(keyword=keyword, page=page, sort=self.settings.api_sort),
                headers={"Accept": "application/json", "User-Agent": self.settings.user_agent},
                timeout=self.settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise PageFetchError(f"request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise PageFetchError(
                f"HTTP {response.status_code} {response.reason or ''}".strip(),
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise PageFetchError(
                "response was not valid JSON",
                status_code=response.status_code,
            ) from exc

    def map_offers(self, data: Any, *, keyword: str) -> list[Offer]:
        items = self._first_list(data, self.settings.api_fields.items)
        offers: list[Offer] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            offers.append(
                Offer(
                    title=self._first_text(item, self.settings.api_fields.title),
                    provider=self._first_text(item, self.settings.api_fields.provider),
                    termine=self._first_count(item, self.settings.api_fields.termine),
                    keyword=keyword,
                )
            )
        return offers

    @staticmethod
    def _first_list(data: Any, paths: tuple[str, ...]) -> list[Any]:
        if isinstance(data, list):
            return data
        for path in paths:
            value = resolve_path(data, path)
            if isinstance(value, list):
                return value
        return []

    @staticmethod
    def _first_text(item: dict[str, Any], paths: tuple[str, ...]) -> str:
        for path in paths:
            value = resolve_path(item, path)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return ""

    @staticmethod
    def _first_count(item: dict[str, Any], paths: tuple[str, ...]) -> int | None:
        for path in paths:
            value = resolve_path(item, path)
            if isinstance(value, bool):
                continue
            if isinstance(value, int) and value >= 0:
                return value
            if isinstance(value, list):
                return len(value)
            if isinstance(value, str) and value.strip().isdigit():
                return int(value.strip())
        return None
