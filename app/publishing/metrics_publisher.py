"""
app/publishing/metrics_publisher.py

Sequential delivery of visibility metrics rows to the spreadsheet endpoint.

Per-row state machine
---------------------
PENDING -> DONE                 2xx response
PENDING -> retry (fixed delay)  HTTP 429 while retries < max_retries
PENDING -> FAILED               429 with the retry budget spent, any other
                                non-2xx status, or a network error

Rows are sent one at a time with a fixed pause between consecutive rows.
A failed row never stops the batch.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Sequence
from typing import Any

import requests

from app.config import PublisherSettings
from app.domain.visibility import MetricsRow, PublishOutcome, PublishReport, PublishStatus
from app.errors import PublishError, RateLimitedError
from app.scraping.logging_utils import log_event
from app.visibility.patterns import PatternRegistry

logger = logging.getLogger(__name__)

PAYLOAD_ACTION = "visibility_metrics"
HTTP_TOO_MANY_REQUESTS = 429
BODY_PREVIEW_CHARS = 100


def build_payload(row: MetricsRow, patterns: PatternRegistry) -> dict[str, Any]:
    """
    Request body for one row; keys mirror the metrics CSV columns.
    """

    return {"action": PAYLOAD_ACTION, **patterns.row_fields(row)}


class MetricsPublisher:
    """
    Posts metrics rows as JSON with bounded 429 retries and inter-row pacing.
    """

    def __init__(
        self,
        *,
        settings: PublisherSettings,
        patterns: PatternRegistry,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._settings = settings
        self._patterns = patterns
        self._session = session or requests.Session()
        self._sleep = sleep
        self._cancel_event = cancel_event

    def publish(self, rows: Sequence[MetricsRow]) -> PublishReport:
        if not rows:
            return PublishReport()

        if not self._settings.dry_run and not self._settings.app_script_url:
            log_event(
                logger,
                logging.WARNING,
                "publish_skipped",
                reason="GOOGLE_SHEET_APP_SCRIPT_URL not set",
                rows=len(rows),
            )
            return PublishReport(skipped=True)

        log_event(
            logger,
            logging.INFO,
            "publish_started",
            rows=len(rows),
            dry_run=self._settings.dry_run,
        )

        outcomes: list[PublishOutcome] = []
        for index, row in enumerate(rows):
            if self._is_cancelled():
                outcomes.append(
                    PublishOutcome(
                        keyword=row.keyword,
                        status=PublishStatus.FAILED,
                        error="cancelled",
                    )
                )
                continue

            outcome = self.publish_row(row, position=index + 1, total=len(rows))
            outcomes.append(outcome)

            is_last = index == len(rows) - 1
            if is_last or self._is_cancelled():
                continue
            if not self._settings.dry_run and self._settings.post_delay_seconds > 0:
                self._sleep(self._settings.post_delay_seconds)

        report = PublishReport(outcomes=outcomes)
        log_event(
            logger,
            logging.INFO,
            "publish_summary",
            published=report.published,
            failed=report.failed,
            total=len(rows),
        )
        return report

    def _is_cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def publish_row(self, row: MetricsRow, *, position: int = 1, total: int = 1) -> PublishOutcome:
        payload = build_payload(row, self._patterns)

        if self._settings.dry_run:
            log_event(logger, logging.INFO, "publish_dry_run", payload=payload)
            return PublishOutcome(
                keyword=row.keyword,
                status=PublishStatus.DONE,
                response={"dry_run": True},
            )

        attempts = 0
        retries = 0
        while True:
            attempts += 1
            try:
                status_code, result = self._send(payload)
            except RateLimitedError as exc:
                if retries < self._settings.max_retries:
                    retries += 1
                    log_event(
                        logger,
                        logging.WARNING,
                        "publish_rate_limited",
                        keyword=row.keyword,
                        retry=retries,
                        max_retries=self._settings.max_retries,
                        delay_seconds=self._settings.retry_delay_seconds,
                    )
                    self._sleep(self._settings.retry_delay_seconds)
                    continue
                return self._failed(
                    row,
                    exc,
                    attempts=attempts,
                    retries=retries,
                    position=position,
                    total=total,
                )
            except PublishError as exc:
                return self._failed(
                    row,
                    exc,
                    attempts=attempts,
                    retries=retries,
                    position=position,
                    total=total,
                )

            log_event(
                logger,
                logging.INFO,
                "row_published",
                keyword=row.keyword,
                category=row.category,
                position=position,
                total=total,
                attempts=attempts,
            )
            return PublishOutcome(
                keyword=row.keyword,
                status=PublishStatus.DONE,
                attempts=attempts,
                retries=retries,
                status_code=status_code,
                response=result,
            )

    def _send(self, payload: dict[str, Any]) -> tuple[int, Any]:
        url = self._settings.require_url()
        try:
            response = self._session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise PublishError(f"request failed: {exc}") from exc

        status_code = response.status_code
        body = response.text or ""
        if status_code == HTTP_TOO_MANY_REQUESTS:
            raise RateLimitedError("HTTP 429 rate limited", status_code=status_code, body=body)
        if not 200 <= status_code < 300:
            raise PublishError(
                f"HTTP {status_code} {response.reason or ''}".strip(),
                status_code=status_code,
                body=body,
            )

        try:
            return status_code, json.loads(body)
        except ValueError:
            return status_code, {"raw": body}

    @staticmethod
    def _failed(
        row: MetricsRow,
        exc: PublishError,
        *,
        attempts: int,
        retries: int,
        position: int,
        total: int,
    ) -> PublishOutcome:
        log_event(
            logger,
            logging.ERROR,
            "row_publish_failed",
            keyword=row.keyword,
            date=row.date,
            position=position,
            total=total,
            status_code=exc.status_code,
            body=exc.body[:BODY_PREVIEW_CHARS],
            error=str(exc),
            retries=retries,
        )
        return PublishOutcome(
            keyword=row.keyword,
            status=PublishStatus.FAILED,
            attempts=attempts,
            retries=retries,
            status_code=exc.status_code,
            error=str(exc),
        )
