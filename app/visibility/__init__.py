"""
Visibility metric computation.
"""

from app.visibility.aggregator import aggregate, aggregate_all, visibility_percent
from app.visibility.patterns import (
    PERCENT_SUFFIX,
    TOTAL_COLUMN,
    PatternRegistry,
    VisibilityPattern,
)

__all__ = [
    "PERCENT_SUFFIX",
    "TOTAL_COLUMN",
    "PatternRegistry",
    "VisibilityPattern",
    "aggregate",
    "aggregate_all",
    "visibility_percent",
]
