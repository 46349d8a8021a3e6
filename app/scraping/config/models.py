"""
Harvest configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass


class HarvestMode:
    API = "api"
    RENDERED = "rendered"

    ALL = (API, RENDERED)


@dataclass(frozen=True)
class ApiFieldPaths:
    """
    Dot-separated lookup paths into the search API JSON.

    Each field lists candidate paths that are tried in order.
    """

    items: tuple[str, ...]
    title: tuple[str, ...]
    provider: tuple[str, ...]
    termine: tuple[str, ...]


@dataclass(frozen=True)
class NetworkIdleSettings:
    idle_ms: int = 1000
    max_inflight: int = 2
    timeout_ms: int = 15000
    poll_ms: int = 50


@dataclass(frozen=True)
class HarvestSettings:
    """
    Runtime settings for keyword harvesting.
    """

    mode: str
    api_endpoint: str
    search_url: str
    page_start: int
    page_end: int
    api_sort: str
    load_more_selector: str
    listing_selector: str
    load_more_iterations: int
    navigation_timeout_seconds: float
    network_idle: NetworkIdleSettings
    headless: bool
    slow_mo_ms: int
    executable_path: str | None
    user_agent: str
    timeout_seconds: float
    rate_limit_per_second: float
    api_fields: ApiFieldPaths
    keywords_csv_path: str | None
    output_dir: str
    patterns_path: str
