from __future__ import annotations

import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from app.domain.visibility import MetricsRow
from app.errors import ConfigurationError
from app.publishing import build_payload
from app.scraping.config import load_visibility_patterns
from app.visibility import PatternRegistry, VisibilityPattern


class TestPatternRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = PatternRegistry.default()

    def test_default_csv_header(self) -> None:
        self.assertEqual(
            self.registry.csv_header(),
            [
                "date",
                "keyword",
                "category",
                "forward_visibility_percent",
                "franklin_visibility_percent",
                "impaqt_visibility_percent",
                "visibility_total",
            ],
        )

    def test_payload_keys_match_csv_header(self) -> None:
        row = MetricsRow(
            date="2025-01-15",
            keyword="sales",
            category="PM",
            total_offer_count=3,
            visibility={"forward": 33.33, "franklin": 0.0, "impaqt": 66.67},
        )

        payload = build_payload(row, self.registry)

        self.assertEqual(payload.pop("action"), "visibility_metrics")
        self.assertEqual(list(payload), self.registry.csv_header())
        self.assertEqual(payload["impaqt_visibility_percent"], 66.67)
        self.assertEqual(payload["visibility_total"], 3)

    def test_missing_pattern_in_row_is_reported_as_zero(self) -> None:
        row = MetricsRow(date="d", keyword="k", category="c", total_offer_count=0, visibility={})
        fields = self.registry.row_fields(row)
        self.assertEqual(fields["forward_visibility_percent"], 0.0)

    def test_rejects_duplicate_names(self) -> None:
        pattern = VisibilityPattern.compile("forward", "forward")
        with self.assertRaises(ConfigurationError):
            PatternRegistry([pattern, pattern])

    def test_rejects_empty_registry(self) -> None:
        with self.assertRaises(ConfigurationError):
            PatternRegistry([])

    def test_rejects_invalid_regex(self) -> None:
        with self.assertRaises(ConfigurationError):
            VisibilityPattern.compile("broken", "(unclosed")

    def test_rejects_invalid_name(self) -> None:
        with self.assertRaises(ConfigurationError):
            VisibilityPattern.compile("Has Space", "x")


class TestLoadVisibilityPatterns(unittest.TestCase):
    def test_missing_file_falls_back_to_defaults(self) -> None:
        registry = load_visibility_patterns(config_path="/nonexistent/patterns.json")
        self.assertEqual([pattern.name for pattern in registry], ["forward", "franklin", "impaqt"])

    def test_reads_patterns_in_file_order(self) -> None:
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "patterns.json"
            path.write_text(
                json.dumps({"patterns": {"impaqt": "impaqt", "acme": "acme\\s+academy"}}),
                encoding="utf-8",
            )

            registry = load_visibility_patterns(config_path=str(path))

        self.assertEqual([pattern.name for pattern in registry], ["impaqt", "acme"])

    def test_invalid_content_raises_configuration_error(self) -> None:
        with TemporaryDirectory() as tmp:
            path = Path(tmp) / "patterns.json"
            path.write_text(json.dumps({"patterns": ["forward"]}), encoding="utf-8")

            with self.assertRaises(ConfigurationError):
                load_visibility_patterns(config_path=str(path))
