"""
Offer fetcher implementations.
"""

from app.scraping.fetchers.api_fetcher import ApiOfferFetcher
from app.scraping.fetchers.rendered_fetcher import RenderedOfferFetcher

__all__ = ["ApiOfferFetcher", "RenderedOfferFetcher"]
