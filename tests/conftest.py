"""
Shared fixtures for harvesting tests.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from app.scraping.config.loader import (
    DEFAULT_API_ITEMS_PATHS,
    DEFAULT_API_PROVIDER_PATHS,
    DEFAULT_API_TERMINE_PATHS,
    DEFAULT_API_TITLE_PATHS,
    DEFAULT_LISTING_SELECTOR,
    DEFAULT_LOAD_MORE_SELECTOR,
)
from app.scraping.config.models import (
    ApiFieldPaths,
    HarvestMode,
    HarvestSettings,
    NetworkIdleSettings,
)


@pytest.fixture()
def harvest_settings(tmp_path: Path) -> HarvestSettings:
    """Deterministic settings writing into a per-test directory."""
    return HarvestSettings(
        mode=HarvestMode.API,
        api_endpoint="https://api.example.test/suche",
        search_url="https://site.example.test/weiterbildungssuche/",
        page_start=1,
        page_end=3,
        api_sort="std",
        load_more_selector=DEFAULT_LOAD_MORE_SELECTOR,
        listing_selector=DEFAULT_LISTING_SELECTOR,
        load_more_iterations=4,
        navigation_timeout_seconds=60.0,
        network_idle=NetworkIdleSettings(idle_ms=1000, max_inflight=2, timeout_ms=15000, poll_ms=50),
        headless=True,
        slow_mo_ms=0,
        executable_path=None,
        user_agent="test-agent",
        timeout_seconds=5.0,
        rate_limit_per_second=100.0,
        api_fields=ApiFieldPaths(
            items=DEFAULT_API_ITEMS_PATHS,
            title=DEFAULT_API_TITLE_PATHS,
            provider=DEFAULT_API_PROVIDER_PATHS,
            termine=DEFAULT_API_TERMINE_PATHS,
        ),
        keywords_csv_path=None,
        output_dir=str(tmp_path / "data"),
        patterns_path=str(tmp_path / "missing_patterns.json"),
    )


@pytest.fixture()
def rendered_settings(harvest_settings: HarvestSettings) -> HarvestSettings:
    return replace(harvest_settings, mode=HarvestMode.RENDERED)
