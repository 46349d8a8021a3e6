"""
HTML parsing layer exports.
"""

from app.scraping.parsing.offer_parser import OfferListingParser

__all__ = ["OfferListingParser"]
