"""
app/scheduler/jobs.py

APScheduler job definitions for the daily visibility run.

The job runs in the background thread pool owned by the scheduler, so it
must not touch request-scoped state. It builds its own service through the
cached factory and never lets an exception escape to the scheduler.
"""

from __future__ import annotations

import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import SchedulerSettings, get_scheduler_settings
from app.scraping.logging_utils import log_event
from app.services.visibility_run_service import get_visibility_run_service

logger = logging.getLogger(__name__)

JOB_ID = "daily_visibility_run"


def run_daily_visibility(
    cancel_event: threading.Event | None = None,
    mode: str | None = None,
) -> None:
    """
    Harvest the configured keyword set and publish the resulting rows.
    """

    try:
        summary = get_visibility_run_service().run(mode=mode, cancel_event=cancel_event)
    except Exception:
        logger.exception("Scheduled visibility run failed")
        return

    log_event(
        logger,
        logging.INFO,
        "scheduled_run_completed",
        run_date=summary.run_date,
        keywords_failed=summary.keywords_failed,
        rows_published=summary.rows_published,
        rows_failed=summary.rows_failed,
    )


def build_scheduler(
    settings: SchedulerSettings | None = None,
    cancel_event: threading.Event | None = None,
) -> BackgroundScheduler:
    """
    Build the scheduler with the daily visibility job registered.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points. Setting ``cancel_event`` before shutdown
    stops a running harvest at the next keyword boundary.
    """

    resolved = settings or get_scheduler_settings()
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_daily_visibility,
        trigger="cron",
        hour=resolved.hour,
        minute=resolved.minute,
        kwargs={"cancel_event": cancel_event, "mode": resolved.mode},
        id=JOB_ID,
        name="Daily keyword visibility run",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )
    return scheduler
