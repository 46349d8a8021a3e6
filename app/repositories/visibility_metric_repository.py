"""
app/repositories/visibility_metric_repository.py

Persistence layer for visibility metrics rows.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session

from app.domain.visibility import MetricsRow
from db.models.visibility_metric import VisibilityMetricRecord


class VisibilityMetricRepository:
    """
    Repository for run-scoped replacement of metrics rows.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def replace_rows(self, rows: Sequence[MetricsRow]) -> int:
        """
        Store rows, replacing earlier rows for the same (run_date, keyword).

        The caller owns the transaction.
        """

        if not rows:
            return 0

        for run_date in sorted({row.date for row in rows}):
            keywords = [row.keyword for row in rows if row.date == run_date]
            self._session.execute(
                delete(VisibilityMetricRecord).where(
                    VisibilityMetricRecord.run_date == run_date,
                    VisibilityMetricRecord.keyword.in_(keywords),
                )
            )

        self._session.add_all(
            VisibilityMetricRecord(
                run_date=row.date,
                keyword=row.keyword,
                category=row.category,
                visibility_total=row.total_offer_count,
                visibility=dict(row.visibility),
            )
            for row in rows
        )
        self._session.flush()
        return len(rows)
