"""
Keyword sources and the built-in keyword catalog.
"""

from app.keywords.catalog import KeywordCatalog
from app.keywords.sources import (
    CSVKeywordSource,
    KeywordSource,
    RequestKeywordSource,
    StaticKeywordSource,
)

__all__ = [
    "CSVKeywordSource",
    "KeywordCatalog",
    "KeywordSource",
    "RequestKeywordSource",
    "StaticKeywordSource",
]
