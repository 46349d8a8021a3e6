"""
tests/test_visibility_aggregator.py

Pytest unit tests for the visibility aggregator.

Pure Python: offers are built in memory, no fetcher and no I/O.

Coverage
--------
- Half-up rounding (1/3, 2/3, 1/8, 1/32)
- Zero-total rows
- Case-insensitive provider matching and empty providers
- One row per keyword, in input order, including failed keywords
- Offers from other keywords never leak into a row
"""

from __future__ import annotations

import pytest

from app.domain.visibility import KeywordEntry, KeywordHarvestResult, Offer
from app.visibility import PatternRegistry, aggregate, aggregate_all, visibility_percent
from app.visibility.aggregator import collect_offers

RUN_DATE = "2025-01-15"


def _offer(provider: str, keyword: str = "sales") -> Offer:
    return Offer(title=f"Kurs bei {provider}", provider=provider, termine=1, keyword=keyword)


@pytest.fixture()
def patterns() -> PatternRegistry:
    return PatternRegistry.default()


# ---------------------------------------------------------------------------
# visibility_percent
# ---------------------------------------------------------------------------


class TestVisibilityPercent:
    @pytest.mark.parametrize(
        ("match_count", "total", "expected"),
        [
            (1, 3, 33.33),
            (2, 3, 66.67),
            (1, 8, 12.5),
            (1, 32, 3.13),
            (3, 3, 100.0),
            (0, 5, 0.0),
        ],
    )
    def test_rounds_half_up_to_two_decimals(self, match_count: int, total: int, expected: float) -> None:
        assert visibility_percent(match_count, total) == expected

    def test_zero_total_is_zero(self) -> None:
        assert visibility_percent(0, 0) == 0.0

    def test_negative_total_is_zero(self) -> None:
        assert visibility_percent(1, -1) == 0.0


# ---------------------------------------------------------------------------
# aggregate
# ---------------------------------------------------------------------------


class TestAggregate:
    def test_zero_total_row_is_all_zero(self, patterns: PatternRegistry) -> None:
        row = aggregate([], keyword="sales", category="PM", date=RUN_DATE, patterns=patterns)

        assert row.total_offer_count == 0
        assert dict(row.visibility) == {"forward": 0.0, "franklin": 0.0, "impaqt": 0.0}

    def test_matching_is_case_insensitive(self, patterns: PatternRegistry) -> None:
        offers = [_offer("FORWARD Academy"), _offer("Franklin Covey"), _offer("Other GmbH")]

        row = aggregate(offers, keyword="sales", category="PM", date=RUN_DATE, patterns=patterns)

        assert row.total_offer_count == 3
        assert row.visibility["forward"] == 33.33
        assert row.visibility["franklin"] == 33.33
        assert row.visibility["impaqt"] == 0.0

    def test_empty_provider_counts_toward_total_but_never_matches(self) -> None:
        registry = PatternRegistry.from_mapping({"anything": ".*"})
        offers = [_offer(""), _offer("Forward")]

        row = aggregate(offers, keyword="sales", category="PM", date=RUN_DATE, patterns=registry)

        assert row.total_offer_count == 2
        assert row.visibility["anything"] == 50.0

    def test_ignores_offers_of_other_keywords(self, patterns: PatternRegistry) -> None:
        offers = [_offer("Forward", keyword="sales"), _offer("Forward", keyword="vertrieb")]

        row = aggregate(offers, keyword="sales", category="PM", date=RUN_DATE, patterns=patterns)

        assert row.total_offer_count == 1
        assert row.visibility["forward"] == 100.0

    def test_blank_category_becomes_unknown(self, patterns: PatternRegistry) -> None:
        row = aggregate([], keyword="sales", category="", date=RUN_DATE, patterns=patterns)
        assert row.category == "UNKNOWN"

    def test_visibility_follows_registry_order(self) -> None:
        registry = PatternRegistry.from_mapping({"zeta": "z", "alpha": "a"})
        row = aggregate([], keyword="sales", category="PM", date=RUN_DATE, patterns=registry)
        assert list(row.visibility) == ["zeta", "alpha"]


# ---------------------------------------------------------------------------
# aggregate_all
# ---------------------------------------------------------------------------


class TestAggregateAll:
    def test_one_row_per_keyword_in_input_order(self, patterns: PatternRegistry) -> None:
        keywords = [
            KeywordEntry("vertrieb", "PM"),
            KeywordEntry("sales", "PM"),
            KeywordEntry("python", "ITS"),
        ]
        offers = [_offer("Forward", keyword="sales")]

        rows = aggregate_all(keywords=keywords, offers=offers, date=RUN_DATE, patterns=patterns)

        assert [row.keyword for row in rows] == ["vertrieb", "sales", "python"]
        assert all(row.date == RUN_DATE for row in rows)
        assert rows[0].total_offer_count == 0
        assert rows[2].total_offer_count == 0

    def test_sales_and_vertrieb_end_to_end(self, patterns: PatternRegistry) -> None:
        results = [
            KeywordHarvestResult.success(
                "sales",
                [_offer("Forward GmbH"), _offer("Franklin"), _offer("X")],
            ),
            KeywordHarvestResult.failure("vertrieb", "timeout"),
        ]
        keywords = [KeywordEntry("sales", "PM"), KeywordEntry("vertrieb", "PM")]

        rows = aggregate_all(
            keywords=keywords,
            offers=collect_offers(results),
            date=RUN_DATE,
            patterns=patterns,
        )

        sales, vertrieb = rows
        assert sales.total_offer_count == 3
        assert dict(sales.visibility) == {"forward": 33.33, "franklin": 33.33, "impaqt": 0.0}
        assert vertrieb.total_offer_count == 0
        assert dict(vertrieb.visibility) == {"forward": 0.0, "franklin": 0.0, "impaqt": 0.0}

    def test_percentages_stay_within_bounds(self, patterns: PatternRegistry) -> None:
        offers = [_offer(name) for name in ("Forward", "forward", "Impaqt", "nobody", "")]
        rows = aggregate_all(
            keywords=[KeywordEntry("sales", "PM")],
            offers=offers,
            date=RUN_DATE,
            patterns=patterns,
        )

        for value in rows[0].visibility.values():
            assert 0.0 <= value <= 100.0
