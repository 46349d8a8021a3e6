"""
Ordered registry of brand-match patterns and the column names derived from them.

The aggregator, the CSV sink and the publisher all read column labels from
the same ``PatternRegistry`` instance so their layouts cannot diverge.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from app.domain.visibility import MetricsRow
from app.errors import ConfigurationError

PERCENT_SUFFIX = "_visibility_percent"
TOTAL_COLUMN = "visibility_total"
LEADING_COLUMNS: tuple[str, ...] = ("date", "keyword", "category")

_NAME_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")

DEFAULT_PATTERNS: dict[str, str] = {
    "forward": "forward",
    "franklin": "franklin",
    "impaqt": "impaqt",
}


@dataclass(frozen=True)
class VisibilityPattern:
    """
    Named case-insensitive regex tested against an offer's provider.
    """

    name: str
    regex: re.Pattern[str]

    @classmethod
    def compile(cls, name: str, expression: str) -> "VisibilityPattern":
        normalized = name.strip().lower()
        if not _NAME_PATTERN.match(normalized):
            raise ConfigurationError(
                f"Invalid pattern name '{name}'. Use lowercase letters, digits and underscores."
            )
        try:
            compiled = re.compile(expression, flags=re.IGNORECASE)
        except re.error as exc:
            raise ConfigurationError(f"Invalid regex for pattern '{name}': {exc}") from exc
        return cls(name=normalized, regex=compiled)

    @property
    def column(self) -> str:
        return f"{self.name}{PERCENT_SUFFIX}"

    def matches(self, provider: str) -> bool:
        return bool(provider) and self.regex.search(provider) is not None


class PatternRegistry:
    """
    Immutable, ordered set of visibility patterns.
    """

    def __init__(self, patterns: Iterable[VisibilityPattern]) -> None:
        ordered: dict[str, VisibilityPattern] = {}
        for pattern in patterns:
            if pattern.name in ordered:
                raise ConfigurationError(f"Duplicate pattern name '{pattern.name}'.")
            ordered[pattern.name] = pattern
        if not ordered:
            raise ConfigurationError("At least one visibility pattern is required.")
        self._patterns = tuple(ordered.values())

    @classmethod
    def from_mapping(cls, expressions: Mapping[str, str]) -> "PatternRegistry":
        return cls(
            VisibilityPattern.compile(name, expression)
            for name, expression in expressions.items()
        )

    @classmethod
    def default(cls) -> "PatternRegistry":
        return cls.from_mapping(DEFAULT_PATTERNS)

    def __iter__(self) -> Iterator[VisibilityPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def percent_columns(self) -> list[str]:
        return [pattern.column for pattern in self._patterns]

    def csv_header(self) -> list[str]:
        return [*LEADING_COLUMNS, *self.percent_columns(), TOTAL_COLUMN]

    def row_fields(self, row: MetricsRow) -> dict[str, object]:
        """
        Flatten a metrics row into the shared column layout.

        Keys follow ``csv_header()`` exactly; patterns missing from the row
        are reported as 0.
        """

        fields: dict[str, object] = {
            "date": row.date,
            "keyword": row.keyword,
            "category": row.category,
        }
        for pattern in self._patterns:
            fields[pattern.column] = float(row.visibility.get(pattern.name, 0.0))
        fields[TOTAL_COLUMN] = row.total_offer_count
        return fields
