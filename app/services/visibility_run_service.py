"""
app/services/visibility_run_service.py

Service orchestration for keyword visibility runs.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import replace
from functools import lru_cache

from sqlalchemy.orm import sessionmaker

from app.config import PublisherSettings, get_publisher_settings
from app.domain.visibility import KeywordEntry, PublishReport, RunSummary
from app.keywords import (
    CSVKeywordSource,
    KeywordCatalog,
    KeywordSource,
    RequestKeywordSource,
    StaticKeywordSource,
)
from app.publishing import MetricsPublisher
from app.scraping.config import HarvestSettings, get_harvest_settings, load_visibility_patterns
from app.scraping.engine import VisibilityPipeline
from app.scraping.registry import FetcherRegistry
from app.scraping.storage import (
    CompositeResultSink,
    FileResultSink,
    ResultSink,
    SQLAlchemyResultSink,
    load_metrics_csv,
)
from db.session import create_db_engine, create_session_factory

logger = logging.getLogger(__name__)


class VisibilityRunService:
    """
    Builds the pipeline from settings and runs it for one keyword source.

    Runs are serialised: an API request and a scheduled run never harvest
    at the same time.
    """

    def __init__(
        self,
        *,
        harvest_settings: HarvestSettings | None = None,
        publisher_settings: PublisherSettings | None = None,
        registry: FetcherRegistry | None = None,
        catalog: KeywordCatalog | None = None,
    ) -> None:
        self._harvest_settings = harvest_settings or get_harvest_settings()
        self._publisher_settings = publisher_settings or get_publisher_settings()
        self._registry = registry or FetcherRegistry()
        self._catalog = catalog or KeywordCatalog()
        self._patterns = load_visibility_patterns(config_path=self._harvest_settings.patterns_path)
        self._run_lock = threading.Lock()
        self._db_lock = threading.Lock()
        self._db_resolved = False
        self._session_factory: sessionmaker | None = None

    def keyword_source(
        self,
        *,
        keywords: Sequence[str] | None = None,
        keywords_csv: str | None = None,
    ) -> KeywordSource:
        """
        Request keywords win over a CSV file, which wins over the catalog.
        """

        if keywords:
            return RequestKeywordSource(keywords, catalog=self._catalog)
        csv_path = keywords_csv or self._harvest_settings.keywords_csv_path
        if csv_path:
            return CSVKeywordSource(csv_path, catalog=self._catalog)
        return StaticKeywordSource(catalog=self._catalog)

    def run(
        self,
        *,
        keywords: Sequence[str] | None = None,
        keywords_csv: str | None = None,
        mode: str | None = None,
        publish: bool = True,
        require_publish: bool = False,
        dry_run: bool | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RunSummary:
        publisher_settings = self._publisher_settings
        if dry_run is not None:
            publisher_settings = replace(publisher_settings, dry_run=dry_run)
        if publish and require_publish and not publisher_settings.dry_run:
            publisher_settings.require_url()

        entries: list[KeywordEntry] = self.keyword_source(
            keywords=keywords,
            keywords_csv=keywords_csv,
        ).load()

        fetcher = self._registry.create_fetcher(
            mode=mode or self._harvest_settings.mode,
            settings=self._harvest_settings,
        )
        publisher = (
            MetricsPublisher(
                settings=publisher_settings,
                patterns=self._patterns,
                cancel_event=cancel_event,
            )
            if publish
            else None
        )
        pipeline = VisibilityPipeline(
            fetcher=fetcher,
            sink=self.build_sink(),
            publisher=publisher,
            patterns=self._patterns,
            cancel_event=cancel_event,
        )
        with self._run_lock:
            return pipeline.run(entries)

    def replay(self, *, metrics_csv: str | None = None, dry_run: bool | None = None) -> PublishReport:
        """
        Re-publish a persisted metrics CSV without harvesting.
        """

        publisher_settings = self._publisher_settings
        if dry_run is not None:
            publisher_settings = replace(publisher_settings, dry_run=dry_run)
        if not publisher_settings.dry_run:
            publisher_settings.require_url()

        path = metrics_csv or str(self._file_sink().metrics_path)
        rows = load_metrics_csv(path, patterns=self._patterns, catalog=self._catalog)
        if not rows:
            logger.warning("No metrics rows to publish path=%s", path)
            return PublishReport()
        return MetricsPublisher(settings=publisher_settings, patterns=self._patterns).publish(rows)

    def build_sink(self) -> ResultSink:
        sinks: list[ResultSink] = [self._file_sink()]
        session_factory = self._database_session_factory()
        if session_factory is not None:
            sinks.append(SQLAlchemyResultSink(session_factory=session_factory))
        return sinks[0] if len(sinks) == 1 else CompositeResultSink(sinks)

    def _database_session_factory(self) -> sessionmaker | None:
        """
        One engine per service, resolved from the environment on first use.
        """

        with self._db_lock:
            if not self._db_resolved:
                engine = create_db_engine()
                if engine is not None:
                    self._session_factory = create_session_factory(engine)
                self._db_resolved = True
            return self._session_factory

    def _file_sink(self) -> FileResultSink:
        return FileResultSink(output_dir=self._harvest_settings.output_dir, patterns=self._patterns)


@lru_cache(maxsize=1)
def get_visibility_run_service() -> VisibilityRunService:
    """
    Build and cache the visibility run service.
    """

    return VisibilityRunService()
