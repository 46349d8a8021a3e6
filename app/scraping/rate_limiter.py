"""
Per-host request pacing for the search API.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces a minimum interval between requests to the same host.
    """

    def __init__(
        self,
        *,
        rate_limit_per_second: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_interval = 1.0 / max(0.1, rate_limit_per_second)
        self._clock = clock
        self._sleep = sleep
        self._last_request_by_host: dict[str, float] = {}
        self._lock = threading.Lock()

    def wait(self, url: str) -> float:
        """
        Sleep as needed before a request to ``url``; return the seconds slept.
        """

        parsed = urlparse(url)
        host = parsed.netloc.lower() or parsed.path.lower()
        if not host:
            return 0.0

        with self._lock:
            slept = 0.0
            last_time = self._last_request_by_host.get(host)
            if last_time is not None:
                remaining = self._min_interval - (self._clock() - last_time)
                if remaining > 0:
                    self._sleep(remaining)
                    slept = remaining
            self._last_request_by_host[host] = self._clock()
            return slept
