"""
Keyword sources: static tables, CSV files and request parameters.
"""

from __future__ import annotations

import csv
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from app.domain.visibility import KeywordEntry
from app.errors import ConfigurationError
from app.keywords.catalog import KeywordCatalog, dedupe_keywords

logger = logging.getLogger(__name__)


class KeywordSource(ABC):
    """
    Supplies the ordered keyword list for one run.
    """

    def __init__(self, *, catalog: KeywordCatalog | None = None) -> None:
        self.catalog = catalog or KeywordCatalog()

    @abstractmethod
    def load(self) -> list[KeywordEntry]:
        """
        Return keywords in run order with their categories resolved.
        """


class StaticKeywordSource(KeywordSource):
    """
    Keywords from the built-in catalog, or from an explicit list.
    """

    def __init__(
        self,
        keywords: Iterable[str] | None = None,
        *,
        catalog: KeywordCatalog | None = None,
    ) -> None:
        super().__init__(catalog=catalog)
        self._keywords = list(keywords) if keywords is not None else None

    def load(self) -> list[KeywordEntry]:
        if self._keywords is None:
            return self.catalog.entries()
        return dedupe_keywords(
            KeywordEntry(keyword=keyword.strip(), category=self.catalog.category_for(keyword))
            for keyword in self._keywords
        )


class RequestKeywordSource(StaticKeywordSource):
    """
    Keywords passed as request parameters (CLI flags or HTTP query).
    """

    def load(self) -> list[KeywordEntry]:
        entries = super().load()
        if not entries:
            raise ConfigurationError("At least one keyword parameter is required.")
        return entries


class CSVKeywordSource(KeywordSource):
    """
    Keywords from a CSV file with a required ``keyword`` column.

    An optional ``category`` column overrides the catalog lookup; any other
    columns (e.g. ``weight``) are ignored.
    """

    def __init__(self, path: str | Path, *, catalog: KeywordCatalog | None = None) -> None:
        super().__init__(catalog=catalog)
        self._path = Path(path)

    def load(self) -> list[KeywordEntry]:
        if not self._path.exists():
            raise ConfigurationError(f"Keyword file not found: {self._path}")

        with self._path.open("r", encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            headers = {
                (name or "").strip().lower(): name for name in (reader.fieldnames or [])
            }
            if "keyword" not in headers:
                raise ConfigurationError(f"{self._path.name} requires a 'keyword' column.")
            keyword_column = headers["keyword"]
            category_column = headers.get("category")

            entries: list[KeywordEntry] = []
            for row in reader:
                keyword = (row.get(keyword_column) or "").strip()
                if not keyword:
                    continue
                category = ""
                if category_column is not None:
                    category = (row.get(category_column) or "").strip()
                entries.append(
                    KeywordEntry(
                        keyword=keyword,
                        category=category or self.catalog.category_for(keyword),
                    )
                )

        if not entries:
            raise ConfigurationError(f"{self._path.name} contains no keyword rows.")

        unique = dedupe_keywords(entries)
        logger.info("Loaded keywords count=%s path=%s", len(unique), self._path)
        return unique
