"""
Result sink interfaces for harvested offers and visibility metrics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.domain.visibility import ApiPagePayload, MetricsRow, Offer


class ResultSink(ABC):
    """
    Durable storage for one run's raw offers and metrics rows.

    Implementations never mutate their inputs and let storage errors
    propagate to the caller.
    """

    @abstractmethod
    def persist_offers(self, offers: Sequence[Offer]) -> str | None:
        """
        Persist raw offers; return a location description when something was written.
        """

    @abstractmethod
    def persist_metrics(self, rows: Sequence[MetricsRow]) -> str | None:
        """
        Persist metrics rows; return a location description.
        """

    def persist_api_pages(self, pages: Sequence[ApiPagePayload]) -> str | None:
        """
        Persist raw API page bodies. Sinks without a raw store ignore them.
        """

        return None


class CompositeResultSink(ResultSink):
    """
    Fans every write out to several sinks; the first sink's location wins.
    """

    def __init__(self, sinks: Sequence[ResultSink]) -> None:
        self._sinks = list(sinks)

    def persist_offers(self, offers: Sequence[Offer]) -> str | None:
        return self._first([sink.persist_offers(offers) for sink in self._sinks])

    def persist_metrics(self, rows: Sequence[MetricsRow]) -> str | None:
        return self._first([sink.persist_metrics(rows) for sink in self._sinks])

    def persist_api_pages(self, pages: Sequence[ApiPagePayload]) -> str | None:
        return self._first([sink.persist_api_pages(pages) for sink in self._sinks])

    @staticmethod
    def _first(locations: list[str | None]) -> str | None:
        return next((location for location in locations if location), None)
