"""
Offer fetcher registry and factory.
"""

from __future__ import annotations

from collections.abc import Mapping

from app.errors import ConfigurationError
from app.scraping.base import OfferFetcher
from app.scraping.config.models import HarvestMode, HarvestSettings
from app.scraping.fetchers import ApiOfferFetcher, RenderedOfferFetcher


class FetcherRegistry:
    """
    Maps harvest modes to fetcher classes.
    """

    def __init__(self, registrations: Mapping[str, type[OfferFetcher]] | None = None) -> None:
        builtins: dict[str, type[OfferFetcher]] = {
            HarvestMode.API: ApiOfferFetcher,
            HarvestMode.RENDERED: RenderedOfferFetcher,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins

    def create_fetcher(self, *, mode: str, settings: HarvestSettings) -> OfferFetcher:
        return self.resolve(mode)(settings=settings)

    def resolve(self, mode: str) -> type[OfferFetcher]:
        resolved = self._registrations.get(mode.strip().lower())
        if resolved is None:
            allowed = ", ".join(sorted(self._registrations.keys()))
            raise ConfigurationError(f"Unknown harvest mode='{mode}'. Allowed modes: {allowed}.")
        return resolved
