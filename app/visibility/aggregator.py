"""
app/visibility/aggregator.py

Deterministic visibility metric calculation.

No I/O lives here: callers hand in offers that were already harvested and
receive immutable ``MetricsRow`` objects back.

Formulas
--------
total              = number of offers whose keyword equals the row keyword
visibility_percent = 100 * matching_offers / total, rounded half-up to two
                     decimals; exactly 0 when total is 0

An offer matches a pattern when its provider is non-empty and the pattern's
case-insensitive regex finds a match in it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from app.domain.visibility import (
    UNKNOWN_CATEGORY,
    KeywordEntry,
    KeywordHarvestResult,
    MetricsRow,
    Offer,
)
from app.visibility.patterns import PatternRegistry

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def visibility_percent(match_count: int, total: int) -> float:
    """
    Return ``100 * match_count / total`` rounded half-up to two decimals.

    The ratio is computed with ``Decimal`` so values such as 1/8 (12.5) or
    1/32 (3.125 -> 3.13) round the same way on every platform.
    """

    if total <= 0:
        return 0.0
    ratio = Decimal(100 * match_count) / Decimal(total)
    return float(ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def aggregate(
    offers: Iterable[Offer],
    *,
    keyword: str,
    category: str,
    date: str,
    patterns: PatternRegistry,
) -> MetricsRow:
    """
    Build the metrics row for one keyword.
    """

    matching = [offer for offer in offers if offer.keyword == keyword]
    total = len(matching)

    visibility: dict[str, float] = {}
    for pattern in patterns:
        match_count = sum(1 for offer in matching if pattern.matches(offer.provider))
        visibility[pattern.name] = visibility_percent(match_count, total)

    return MetricsRow(
        date=date,
        keyword=keyword,
        category=category or UNKNOWN_CATEGORY,
        total_offer_count=total,
        visibility=visibility,
    )


def aggregate_all(
    *,
    keywords: Sequence[KeywordEntry],
    offers: Sequence[Offer],
    date: str,
    patterns: PatternRegistry,
) -> list[MetricsRow]:
    """
    Produce exactly one row per input keyword, in input order.

    Keywords whose harvest failed contribute no offers and therefore get an
    all-zero row.
    """

    by_keyword: dict[str, list[Offer]] = {}
    for offer in offers:
        by_keyword.setdefault(offer.keyword, []).append(offer)

    rows = [
        aggregate(
            by_keyword.get(entry.keyword, ()),
            keyword=entry.keyword,
            category=entry.category,
            date=date,
            patterns=patterns,
        )
        for entry in keywords
    ]
    logger.debug("Aggregated visibility rows=%s offers=%s", len(rows), len(offers))
    return rows


def collect_offers(results: Iterable[KeywordHarvestResult]) -> list[Offer]:
    offers: list[Offer] = []
    for result in results:
        offers.extend(result.offers)
    return offers

