"""
Publish a persisted visibility metrics CSV without harvesting.
"""

from __future__ import annotations

import argparse
import logging
import sys

from app.config import get_app_settings
from app.errors import ConfigurationError
from app.schemas.visibility import PublishReportResponse
from app.scraping.logging_utils import configure_logging
from app.services.visibility_run_service import VisibilityRunService

logger = logging.getLogger("post_visibility_from_csv")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Post visibility metrics rows from a CSV file.")
    parser.add_argument(
        "--csv",
        dest="csv_path",
        default=None,
        help="Metrics CSV path. Defaults to the run output file.",
    )
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=None,
        help="Log payloads instead of posting them.",
    )
    args = parser.parse_args(argv)
    configure_logging(get_app_settings().log_level)

    try:
        report = VisibilityRunService().replay(metrics_csv=args.csv_path, dry_run=args.dry_run)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except Exception:
        logger.exception("Publishing metrics CSV failed")
        return 1

    print(PublishReportResponse.from_report(report).model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
