"""
Rendered-page fetcher: drives the search site in a headless browser.

Playwright is imported lazily so API-mode runs and tests do not need a
browser installation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode, urlsplit, urlunsplit

from app.domain.visibility import Offer
from app.errors import KeywordHarvestError
from app.scraping.base import OfferFetcher
from app.scraping.config.models import HarvestMode, HarvestSettings
from app.scraping.logging_utils import log_event
from app.scraping.network_idle import IdleResolution, wait_for_network_idle
from app.scraping.parsing import OfferListingParser

logger = logging.getLogger(__name__)

# Handlers on the target page listen on intermediate pointer events, so a
# bare element.click() is not enough.
DISPATCH_LOAD_MORE_SCRIPT = """
selector => {
  const button = document.querySelector(selector);
  if (!button) return false;
  ['pointerdown', 'mousedown', 'mouseup', 'click'].forEach(type => {
    button.dispatchEvent(new MouseEvent(type, {bubbles: true, cancelable: true, view: window}));
  });
  return true;
}
"""

BROWSER_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


def build_search_url(base_url: str, keyword: str) -> str:
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode({"sw": keyword}), ""))


class RenderedOfferFetcher(OfferFetcher):
    """
    Navigates to the keyword search page, expands it with the "load more"
    control and parses the listing items.

    One page is opened per run and reused for every keyword.
    """

    mode = HarvestMode.RENDERED

    def __init__(
        self,
        *,
        settings: HarvestSettings,
        page: Any | None = None,
        parser: OfferListingParser | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(settings=settings)
        self._page = page
        self._parser = parser or OfferListingParser(listing_selector=settings.listing_selector)
        self._clock = clock
        self._playwright = None
        self._browser = None

    def open(self) -> None:
        if self._page is not None:
            return

        try:
            from playwright.sync_api import sync_playwright
        except ImportError as exc:
            raise RuntimeError(
                "Playwright not installed. Install with: "
                "pip install playwright && playwright install chromium"
            ) from exc

        headless = self.settings.headless
        launch_options: dict[str, Any] = {
            "headless": headless,
            "slow_mo": self.settings.slow_mo_ms,
            "args": [*BROWSER_ARGS, *([] if headless else ["--start-maximized"])],
        }
        if self.settings.executable_path:
            launch_options["executable_path"] = self.settings.executable_path

        context_options: dict[str, Any] = {"user_agent": self.settings.user_agent}
        if headless:
            context_options["viewport"] = {"width": 1280, "height": 720}
        else:
            context_options["no_viewport"] = True

        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(**launch_options)
            context = self._browser.new_context(**context_options)
            self._page = context.new_page()
        except BaseException:
            self.close()
            raise
        log_event(logger, logging.INFO, "browser_started", headless=headless)

    def close(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None
            self._page = None
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None

    def fetch(self, keyword: str) -> list[Offer]:
        if self._page is None:
            self.open()

        search_url = build_search_url(self.settings.search_url, keyword)
        log_event(logger, logging.INFO, "keyword_navigation", keyword=keyword, url=search_url)
        try:
            self._page.goto(
                search_url,
                wait_until="domcontentloaded",
                timeout=self.settings.navigation_timeout_seconds * 1000,
            )
        except Exception as exc:
            raise KeywordHarvestError(f"navigation failed: {exc}") from exc
        if self.wait_for_idle() == IdleResolution.TIMEOUT:
            log_event(logger, logging.WARNING, "initial_load_not_idle", keyword=keyword)

        expansions = 0
        for _ in range(self.settings.load_more_iterations):
            if not self.click_load_more():
                log_event(
                    logger,
                    logging.WARNING,
                    "load_more_stopped",
                    keyword=keyword,
                    expansions=expansions,
                )
                break
            expansions += 1

        return self._parser.parse(self._page.content(), keyword=keyword)

    def click_load_more(self) -> bool:
        """
        Expand the listing once. Returns False when the control is gone.
        """

        selector = self.settings.load_more_selector
        if self._page.query_selector(selector) is None:
            return False

        if not self._page.evaluate(DISPATCH_LOAD_MORE_SCRIPT, selector):
            return False

        if self.wait_for_idle() == IdleResolution.TIMEOUT:
            logger.debug("Load-more expansion settled by timeout selector=%s", selector)
        return True

    def wait_for_idle(self) -> str:
        """
        Block until at most ``max_inflight`` requests remain for a full idle window.
        """

        wait_kwargs: dict[str, Any] = {"settings": self.settings.network_idle}
        if self._clock is not None:
            wait_kwargs["clock"] = self._clock
        return wait_for_network_idle(self._page, **wait_kwargs)
