"""
SQLAlchemy-backed result sink for visibility metrics.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.domain.visibility import MetricsRow, Offer
from app.repositories.visibility_metric_repository import VisibilityMetricRepository
from app.scraping.storage.base import ResultSink


class SQLAlchemyResultSink(ResultSink):
    """
    Persist metrics rows through the repository; raw offers stay file-only.
    """

    def __init__(self, *, session_factory: sessionmaker, batch_size: int = 500) -> None:
        self._session_factory = session_factory
        self._batch_size = max(1, batch_size)

    def persist_offers(self, offers: Sequence[Offer]) -> str | None:
        return None

    def persist_metrics(self, rows: Sequence[MetricsRow]) -> str | None:
        if not rows:
            return None

        session: Session = self._session_factory()
        repository = VisibilityMetricRepository(session)
        try:
            for start in range(0, len(rows), self._batch_size):
                repository.replace_rows(rows[start : start + self._batch_size])
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()
        return "table:visibility_metrics"
