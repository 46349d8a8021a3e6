"""
db/models/visibility_metric.py

One persisted visibility metrics row per (run date, keyword).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class VisibilityMetricRecord(Base):
    __tablename__ = "visibility_metrics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_date: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="ISO calendar date of the run",
    )
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    visibility_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    visibility: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        comment="pattern name -> visibility percent",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint("run_date", "keyword", name="uq_visibility_metrics_run_date_keyword"),
    )
