from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_app_settings, get_publisher_settings, get_scheduler_settings
from app.schemas.visibility import HealthResponse
from app.scraping.logging_utils import configure_logging


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Start the daily visibility scheduler when enabled; cancel and shut it down on exit."""
    settings = get_scheduler_settings()
    if not settings.enabled:
        logging.getLogger(__name__).info("Visibility scheduler disabled")
        yield
        return

    from app.scheduler.jobs import build_scheduler

    cancel_event = threading.Event()
    scheduler = build_scheduler(settings, cancel_event=cancel_event)
    scheduler.start()
    logging.getLogger(__name__).info(
        "Scheduler started with %d jobs at %02d:%02d UTC",
        len(scheduler.get_jobs()),
        settings.hour,
        settings.minute,
    )
    try:
        yield
    finally:
        cancel_event.set()
        scheduler.shutdown(wait=True)
        logging.getLogger(__name__).info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging(get_app_settings().log_level)

    application = FastAPI(
        title="Offer Visibility API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import visibility_router

    application.include_router(visibility_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="ok",
            scheduler_enabled=get_scheduler_settings().enabled,
            publish_configured=bool(get_publisher_settings().app_script_url),
        )

    return application


app = create_app()
