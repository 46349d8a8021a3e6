"""
BeautifulSoup-based extraction of course offers from rendered search pages.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from app.domain.visibility import Offer

TERMINE_REGEX = re.compile(r"(\d+)")
PROVIDER_PREFIX_REGEX = re.compile(r"^Bildungsanbieter\s*", flags=re.IGNORECASE)

HEADING_SELECTOR = "h2.now-heading.heading"
TITLE_SELECTOR = f"{HEADING_SELECTOR} span:not(.sr-only)"
SCREEN_READER_SELECTOR = f"{HEADING_SELECTOR} .sr-only"
TAG_TEXT_SELECTOR = ".now-card-tag-text"
PROVIDER_SELECTOR = 'span[id$="_anbieter"]'


class OfferListingParser:
    """
    Deterministic mapping from listing markup to ``Offer`` records.

    Markup drift does not raise: items that no longer match the selectors
    simply yield empty fields, and a changed container selector yields no
    offers at all.
    """

    def __init__(self, *, listing_selector: str) -> None:
        self._listing_selector = listing_selector

    def parse(self, html: str, *, keyword: str) -> list[Offer]:
        soup = BeautifulSoup(html, "html.parser")
        return [self.parse_item(item, keyword=keyword) for item in soup.select(self._listing_selector)]

    @classmethod
    def parse_item(cls, item: Tag, *, keyword: str) -> Offer:
        return Offer(
            title=cls._extract_title(item),
            provider=cls._extract_provider(item),
            termine=cls._extract_termine(item),
            keyword=keyword,
        )

    @staticmethod
    def _extract_termine(item: Tag) -> int | None:
        node = item.select_one(TAG_TEXT_SELECTOR)
        if node is None:
            return None
        match = TERMINE_REGEX.search(node.get_text(strip=True))
        return int(match.group(1)) if match else None

    @classmethod
    def _extract_title(cls, item: Tag) -> str:
        node = item.select_one(TITLE_SELECTOR) or item.select_one(HEADING_SELECTOR)
        return cls._clean_text(node.get_text()) if node is not None else ""

    @classmethod
    def _extract_provider(cls, item: Tag) -> str:
        provider_span = item.select_one(PROVIDER_SELECTOR)
        if provider_span is not None:
            return cls._clean_text(provider_span.get_text())

        screen_reader = item.select_one(SCREEN_READER_SELECTOR)
        if screen_reader is not None:
            return PROVIDER_PREFIX_REGEX.sub("", cls._clean_text(screen_reader.get_text())).strip()
        return ""

    @staticmethod
    def _clean_text(value: str) -> str:
        return " ".join(value.split())
