"""
Run one keyword visibility harvest from CLI.

Exit codes: 0 on completion (even with failed keywords or rows),
2 on configuration errors, 1 on unexpected errors.
"""

from __future__ import annotations

import argparse
import logging
import sys

from app.config import get_app_settings
from app.errors import ConfigurationError
from app.schemas.visibility import RunSummaryResponse
from app.scraping.config.models import HarvestMode
from app.scraping.logging_utils import configure_logging
from app.services.visibility_run_service import VisibilityRunService

logger = logging.getLogger("run_visibility_scrape")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Harvest offer visibility per keyword and publish metrics.")
    parser.add_argument(
        "--mode",
        dest="mode",
        choices=list(HarvestMode.ALL),
        default=None,
        help="Harvest mode. Defaults to VISIBILITY_HARVEST_MODE.",
    )
    parser.add_argument(
        "--keywords-csv",
        dest="keywords_csv",
        default=None,
        help="CSV file with a 'keyword' column and optional 'category' column.",
    )
    parser.add_argument(
        "--keyword",
        dest="keywords",
        action="append",
        default=None,
        help="Keyword to harvest; repeat for several. Overrides --keywords-csv.",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=None,
        help="Log payloads instead of posting them.",
    )
    parser.add_argument(
        "--no-publish",
        dest="publish",
        action="store_false",
        help="Persist results but do not publish.",
    )
    parser.add_argument(
        "--require-publish",
        dest="require_publish",
        action="store_true",
        help="Fail before harvesting when GOOGLE_SHEET_APP_SCRIPT_URL is not set.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(get_app_settings().log_level)

    try:
        summary = VisibilityRunService().run(
            keywords=args.keywords,
            keywords_csv=args.keywords_csv,
            mode=args.mode,
            publish=args.publish,
            require_publish=args.require_publish,
            dry_run=args.dry_run,
        )
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except Exception:
        logger.exception("Visibility run failed")
        return 1

    print(RunSummaryResponse.from_summary(summary).model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
