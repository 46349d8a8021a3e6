"""
File-backed result sink: JSON for raw offers, CSV for metrics rows.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from collections.abc import Sequence
from pathlib import Path

from app.domain.visibility import ApiPagePayload, MetricsRow, Offer
from app.errors import ConfigurationError
from app.keywords.catalog import KeywordCatalog
from app.scraping.logging_utils import log_event
from app.scraping.storage.base import ResultSink
from app.visibility.patterns import TOTAL_COLUMN, PatternRegistry

logger = logging.getLogger(__name__)

OFFERS_FILENAME = "meinnow_offers_all.json"
METRICS_FILENAME = "meinnow_forward_visibility.csv"
API_PAGES_FILENAME = "meinnow_api_results.json"


class FileResultSink(ResultSink):
    """
    Writes run artifacts below ``output_dir``; directories are created on demand.
    """

    def __init__(self, *, output_dir: str | Path, patterns: PatternRegistry) -> None:
        self._output_dir = Path(output_dir)
        self._patterns = patterns

    @property
    def offers_path(self) -> Path:
        return self._output_dir / OFFERS_FILENAME

    @property
    def metrics_path(self) -> Path:
        return self._output_dir / METRICS_FILENAME

    @property
    def api_pages_path(self) -> Path:
        return self._output_dir / API_PAGES_FILENAME

    def persist_offers(self, offers: Sequence[Offer]) -> str | None:
        if not offers:
            log_event(logger, logging.WARNING, "offers_not_written", reason="no offers")
            return None
        self._write_json(self.offers_path, [offer.to_dict() for offer in offers])
        log_event(logger, logging.INFO, "offers_written", path=self.offers_path, count=len(offers))
        return str(self.offers_path)

    def persist_metrics(self, rows: Sequence[MetricsRow]) -> str | None:
        path = self.metrics_path
        path.parent.mkdir(parents=True, exist_ok=True)
        header = self._patterns.csv_header()
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=header, lineterminator="\n")
            writer.writeheader()
            for row in rows:
                writer.writerow(self._format_row(row))
        log_event(logger, logging.INFO, "metrics_written", path=path, rows=len(rows))
        return str(path)

    def persist_api_pages(self, pages: Sequence[ApiPagePayload]) -> str | None:
        if not pages:
            return None
        self._write_json(self.api_pages_path, [page.to_dict() for page in pages])
        log_event(logger, logging.INFO, "api_pages_written", path=self.api_pages_path, pages=len(pages))
        return str(self.api_pages_path)

    def _format_row(self, row: MetricsRow) -> dict[str, object]:
        fields = self._patterns.row_fields(row)
        for column in self._patterns.percent_columns():
            fields[column] = f"{float(fields[column]):.2f}"
        return fields

    @staticmethod
    def _write_json(path: Path, payload: object) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def parse_percent(value: object) -> float:
    """
    Parse a percent cell tolerantly: blanks, garbage and NaN become 0.
    """

    if value is None:
        return 0.0
    normalized = str(value).strip().rstrip("%").strip()
    if not normalized:
        return 0.0
    try:
        parsed = float(normalized)
    except ValueError:
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def load_metrics_csv(
    path: str | Path,
    *,
    patterns: PatternRegistry,
    catalog: KeywordCatalog | None = None,
) -> list[MetricsRow]:
    """
    Read a metrics CSV back into rows for replay publishing.

    ``date`` and ``keyword`` columns are required. A missing ``category``
    column falls back to the keyword catalog, and a missing pattern column
    is read as 0.
    """

    csv_path = Path(path)
    if not csv_path.exists():
        raise ConfigurationError(f"Metrics file not found: {csv_path}")

    lookup = catalog or KeywordCatalog()
    rows: list[MetricsRow] = []
    with csv_path.open("r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        headers = {(name or "").strip() for name in (reader.fieldnames or [])}
        if "date" not in headers or "keyword" not in headers:
            raise ConfigurationError("Metrics CSV requires at least the columns 'date' and 'keyword'.")

        for record in reader:
            cleaned = {(key or "").strip(): (value or "").strip() for key, value in record.items()}
            keyword = cleaned.get("keyword", "")
            if not keyword:
                continue
            total_raw = cleaned.get(TOTAL_COLUMN, "")
            rows.append(
                MetricsRow(
                    date=cleaned.get("date", ""),
                    keyword=keyword,
                    category=cleaned.get("category") or lookup.category_for(keyword),
                    total_offer_count=int(total_raw) if total_raw.isdigit() else 0,
                    visibility={
                        pattern.name: parse_percent(cleaned.get(pattern.column))
                        for pattern in patterns
                    },
                )
            )
    return rows
