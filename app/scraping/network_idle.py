"""
Network quiescence detection for rendered pages.

``NetworkIdleTracker`` is a plain state machine over request lifecycle
events and a clock. ``wait_for_network_idle`` wires it to a Playwright page.
The tracker resolves when the in-flight count has stayed at or below
``max_inflight`` for a full ``idle_ms`` window, or when ``timeout_ms`` has
elapsed since the wait started, whichever comes first.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from app.scraping.config.models import NetworkIdleSettings
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


class IdleResolution:
    PENDING = "pending"
    IDLE = "idle"
    TIMEOUT = "timeout"


@dataclass
class NetworkIdleTracker:
    """
    Debounce timer plus in-flight counter, driven by explicit events.

    All times are in milliseconds on the caller's clock.
    """

    started_at: float
    idle_ms: float
    max_inflight: int
    timeout_ms: float
    inflight: int = 0
    idle_deadline: float = 0.0

    def __post_init__(self) -> None:
        self.idle_deadline = self.started_at + self.idle_ms

    @property
    def hard_deadline(self) -> float:
        return self.started_at + self.timeout_ms

    def request_started(self, now: float) -> None:
        self.inflight += 1
        self._reset(now)

    def request_finished(self, now: float) -> None:
        if self.inflight > 0:
            self.inflight -= 1
        self._reset(now)

    def request_failed(self, now: float) -> None:
        self.request_finished(now)

    def state(self, now: float) -> str:
        if self.inflight <= self.max_inflight and now >= self.idle_deadline:
            return IdleResolution.IDLE
        if now >= self.hard_deadline:
            return IdleResolution.TIMEOUT
        return IdleResolution.PENDING

    def next_wakeup(self, now: float) -> float:
        """
        Milliseconds until the state can next change without a new event.
        """

        candidates = [self.hard_deadline - now]
        if self.inflight <= self.max_inflight:
            candidates.append(self.idle_deadline - now)
        return max(0.0, min(candidates))

    def _reset(self, now: float) -> None:
        self.idle_deadline = now + self.idle_ms


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def wait_for_network_idle(
    page: Any,
    *,
    settings: NetworkIdleSettings,
    clock: Callable[[], float] = _monotonic_ms,
) -> str:
    """
    Block until the page's network settles or the hard timeout elapses.

    ``page`` must offer Playwright's ``on``/``remove_listener`` event API and
    ``wait_for_timeout``, which also dispatches pending page events. Returns
    the final ``IdleResolution`` value.
    """

    tracker = NetworkIdleTracker(
        started_at=clock(),
        idle_ms=settings.idle_ms,
        max_inflight=settings.max_inflight,
        timeout_ms=settings.timeout_ms,
    )

    def on_request(_request: Any) -> None:
        tracker.request_started(clock())

    def on_request_finished(_request: Any) -> None:
        tracker.request_finished(clock())

    def on_request_failed(_request: Any) -> None:
        tracker.request_failed(clock())

    page.on("request", on_request)
    page.on("requestfinished", on_request_finished)
    page.on("requestfailed", on_request_failed)
    try:
        while True:
            now = clock()
            resolution = tracker.state(now)
            if resolution != IdleResolution.PENDING:
                break
            step = min(float(settings.poll_ms), tracker.next_wakeup(now))
            page.wait_for_timeout(max(1.0, step))
    finally:
        page.remove_listener("request", on_request)
        page.remove_listener("requestfinished", on_request_finished)
        page.remove_listener("requestfailed", on_request_failed)

    if resolution == IdleResolution.TIMEOUT:
        log_event(
            logger,
            logging.WARNING,
            "network_idle_timeout",
            inflight=tracker.inflight,
            timeout_ms=settings.timeout_ms,
        )
    return resolution
