"""
Environment + JSON config loader for keyword harvesting.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

from app.errors import ConfigurationError
from app.scraping.config.models import (
    ApiFieldPaths,
    HarvestMode,
    HarvestSettings,
    NetworkIdleSettings,
)
from app.visibility.patterns import DEFAULT_PATTERNS, PatternRegistry

DEFAULT_API_ENDPOINT = "https://rest.mein-now.de/now-prod/suche/pc/v1/bildungsangebot"
DEFAULT_SEARCH_URL = "https://mein-now.de/weiterbildungssuche/"
DEFAULT_LOAD_MORE_SELECTOR = "#load_more_angebote"
DEFAULT_LISTING_SELECTOR = "ul.now-card-stack li.now-card.now-link-card.now-with-tag"

DEFAULT_API_ITEMS_PATHS = ("_embedded.termine", "termine", "content", "items", "results")
DEFAULT_API_TITLE_PATHS = ("angebot.titel", "titel", "title", "name")
DEFAULT_API_PROVIDER_PATHS = (
    "angebot.bildungsanbieter.name",
    "bildungsanbieter.name",
    "anbieter.name",
    "anbieter",
    "provider",
)
DEFAULT_API_TERMINE_PATHS = ("anzahlTermine", "termine", "angebot.anzahlTermine")


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def _get_paths_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    paths = tuple(item.strip() for item in raw.split(",") if item.strip())
    return paths or default


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


@lru_cache(maxsize=1)
def get_harvest_settings() -> HarvestSettings:
    """
    Return cached harvest settings from environment variables.
    """

    load_env_files()
    mode = _get_str_env("VISIBILITY_HARVEST_MODE", HarvestMode.RENDERED).lower()
    if mode not in HarvestMode.ALL:
        raise ConfigurationError(
            f"VISIBILITY_HARVEST_MODE '{mode}' is not valid. Allowed values: {list(HarvestMode.ALL)}."
        )

    page_start = max(1, _get_int_env("VISIBILITY_API_PAGE_START", 1))
    page_end = max(page_start, _get_int_env("VISIBILITY_API_PAGE_END", 4))
    keywords_csv = _get_optional_str_env("VISIBILITY_KEYWORDS_CSV")

    return HarvestSettings(
        mode=mode,
        api_endpoint=_get_str_env("VISIBILITY_API_ENDPOINT", DEFAULT_API_ENDPOINT),
        search_url=_get_str_env("VISIBILITY_SEARCH_URL", DEFAULT_SEARCH_URL),
        page_start=page_start,
        page_end=page_end,
        api_sort=_get_str_env("VISIBILITY_API_SORT", "std"),
        load_more_selector=_get_str_env("VISIBILITY_LOAD_MORE_SELECTOR", DEFAULT_LOAD_MORE_SELECTOR),
        listing_selector=_get_str_env("VISIBILITY_LISTING_SELECTOR", DEFAULT_LISTING_SELECTOR),
        load_more_iterations=max(0, _get_int_env("VISIBILITY_LOAD_MORE_ITERATIONS", 4)),
        navigation_timeout_seconds=max(
            1.0,
            _get_float_env("VISIBILITY_NAVIGATION_TIMEOUT_SECONDS", 60.0),
        ),
        network_idle=NetworkIdleSettings(
            idle_ms=max(100, _get_int_env("VISIBILITY_NETWORK_IDLE_MS", 1000)),
            max_inflight=max(0, _get_int_env("VISIBILITY_NETWORK_IDLE_MAX_INFLIGHT", 2)),
            timeout_ms=max(500, _get_int_env("VISIBILITY_NETWORK_IDLE_TIMEOUT_MS", 15000)),
        ),
        headless=_get_bool_env("PLAYWRIGHT_HEADLESS", True),
        slow_mo_ms=max(0, _get_int_env("PLAYWRIGHT_SLOW_MO", 0)),
        executable_path=_get_optional_str_env("PLAYWRIGHT_EXECUTABLE_PATH"),
        user_agent=_get_str_env(
            "VISIBILITY_USER_AGENT",
            "OfferVisibilityBot/1.0 (+https://example.com/bot)",
        ),
        timeout_seconds=max(1.0, _get_float_env("VISIBILITY_HTTP_TIMEOUT_SECONDS", 15.0)),
        rate_limit_per_second=max(
            0.1,
            _get_float_env("VISIBILITY_RATE_LIMIT_PER_SECOND", 2.0),
        ),
        api_fields=ApiFieldPaths(
            items=_get_paths_env("VISIBILITY_API_ITEMS_PATHS", DEFAULT_API_ITEMS_PATHS),
            title=_get_paths_env("VISIBILITY_API_TITLE_PATHS", DEFAULT_API_TITLE_PATHS),
            provider=_get_paths_env("VISIBILITY_API_PROVIDER_PATHS", DEFAULT_API_PROVIDER_PATHS),
            termine=_get_paths_env("VISIBILITY_API_TERMINE_PATHS", DEFAULT_API_TERMINE_PATHS),
        ),
        keywords_csv_path=str(_resolve_path(keywords_csv)) if keywords_csv else None,
        output_dir=str(_resolve_path(_get_str_env("VISIBILITY_OUTPUT_DIR", "data"))),
        patterns_path=str(
            _resolve_path(
                _get_str_env(
                    "VISIBILITY_PATTERNS_PATH",
                    "app/scraping/config/visibility_patterns.json",
                )
            )
        ),
    )


def load_visibility_patterns(*, config_path: str | None) -> PatternRegistry:
    """
    Load the ordered pattern registry from a JSON file.

    The file shape is ``{"patterns": {"forward": "forward", ...}}``. A missing
    file falls back to the built-in defaults.
    """

    if not config_path:
        return PatternRegistry.from_mapping(DEFAULT_PATTERNS)

    path = _resolve_path(config_path)
    if not path.exists():
        return PatternRegistry.from_mapping(DEFAULT_PATTERNS)

    try:
        raw_data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid pattern config {path}: {exc}") from exc

    patterns = raw_data.get("patterns") if isinstance(raw_data, dict) else None
    if not isinstance(patterns, dict):
        raise ConfigurationError("Invalid pattern config: 'patterns' must be an object.")

    expressions: dict[str, str] = {}
    for name, expression in patterns.items():
        if not isinstance(name, str) or not isinstance(expression, str) or not expression.strip():
            raise ConfigurationError(f"Invalid pattern entry '{name}'.")
        expressions[name] = expression.strip()
    return PatternRegistry.from_mapping(expressions)
