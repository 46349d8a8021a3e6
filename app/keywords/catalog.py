"""
Built-in keyword tables grouped by business vertical.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from app.domain.visibility import UNKNOWN_CATEGORY, KeywordEntry

ITS_KEYWORDS: tuple[str, ...] = (
    "JavaScript", "Python", "SQL", "Java", "Künstliche Intelligenz",
    "programmierung", "App Programmieren Lernen", "Excel Kurs", "HTML",
    "Maschinelles Lernen", "Phyton Kurs", "C++ Lernen", "Apps programmieren",
    "Java Script Lernen", "Python3 Kurs", "Javascripts Lernen",
    "Informationstechnologie Weiterbildung", "Programmierung Lernen", "excel",
    "Phyton Lernen", "Quereinstieg It", "informationstechnologie",
    "programmiersprache", "Programmiersprache Lernen", "Hmtl Lernen",
    "Javascript Lernen", "C++", "Excel Grundlagen", "java script", "Sql Lernen",
    "Verkauf Kurs", "Verkäufer werden", "Verkauf lernen", "Verkauf Training",
    "verkaufen lernen", "Vertrieb lernen", "Vertrieb Einstieg",
    "Verkäufer Weiterbildung", "Verkauf ohne Erfahrung", "Sales",
    "Quereinstieg Verkauf", "Verkauf Schulung", "Vertriebs Kurs",
    "Vertrieb Training", "Telefonverkauf Kurs", "Kaltakquise lernen",
    "Verkäufer Job", "IT Sales",
)

PM_KEYWORDS: tuple[str, ...] = (
    "Produktmanager", "Controller Weiterbildung", "Kooperation",
    "Weiterbildung Qualitätsmanager", "pflegedienstleitung", "Controlling",
    "Qualitätsmanagment Weiterbildung", "Qualitätsmanagment",
    "Controlling Weiterbildung", "Projektmanagement", "Qualitätsmanagement",
    "Weiterbildung Projektmanager", "Projektmanager Weiterbildung",
    "projektmanagement", "Soziales Lernen", "soziale Arbeit", "controlling",
    "qualitätsmanagement", "Qualitätsmanagement Weiterbildung",
    "Marketing Weiterbildung", "Vertrieb", "Quereinstieg Vertrieb",
    "Coaching Weiterbildung", "Handelsfachwirt Weiterbildung",
    "Ihk Weiterbildung", "Industriekauffrau Weiterbildung",
    "Betriebswirt Weiterbildung", "Fachwirt Weiterbildung", "Projektmanager",
    "Projektmanagement lernen", "Projektplanung lernen", "PM Weiterbildung",
    "Projektleiten lernen", "Projektmanagement Basics", "Projektmanager Einstieg",
    "PM Einsteiger", "Projektmanagement Schulung", "Projektmanagement Fortbildung",
    "Quereinstieg Projektmanagement", "Projektmanagement Job", "PM Grundlagen",
    "PM Training", "Projektarbeit lernen", "PM Kurs", "Teamarbeit lernen",
)

AI_AUTOMATION_KEYWORDS: tuple[str, ...] = (
    "KI Consultant", "KI Berater", "KI & Automation Consultant",
    "KI Consultant Weiterbildung", "Automation Specialist", "Automation Manager",
    "Automatisierung Manager", "Process Manager Digitalisierung",
    "Marketing Automation", "Marketing Automation Manager",
    "Marketing Automation Weiterbildung", "Sales Automation",
    "Vertrieb Automation", "CRM Automation", "Low-Code Developer",
    "No-Code Developer", "Zapier", "Make", "n8n", "Airtable",
    "AI Product Manager", "KI Produktmanager", "Digital Transformation Manager",
    "Chatbot", "KI Chatbot", "AI Chatbot", "KI Support", "AI Support",
    "Prompt Engineering", "KI Tools", "Machine Learning", "Maschinelles Lernen",
    "KI Strategie", "AI Strategie", "KI Einführung", "AI Einführung",
    "KI Marketing", "AI Marketing", "Marketing 4.0", "Vertrieb 4.0",
    "KI Vertrieb", "AI Sales", "Sales 4.0", "KI lernen", "AI lernen", "KI Kurs",
    "AI Kurs", "Quereinstieg KI", "KI Job", "KI Karriere",
)

DEFAULT_VERTICALS: dict[str, tuple[str, ...]] = {
    "ITS": ITS_KEYWORDS,
    "PM": PM_KEYWORDS,
    "AI_AUTOMATION": AI_AUTOMATION_KEYWORDS,
}


class KeywordCatalog:
    """
    Case-insensitive keyword -> category lookup.

    When a keyword appears in several verticals the last vertical wins,
    matching the order the tables are registered in.
    """

    def __init__(self, verticals: Mapping[str, Iterable[str]] | None = None) -> None:
        source = verticals if verticals is not None else DEFAULT_VERTICALS
        self._verticals = {category: tuple(keywords) for category, keywords in source.items()}
        self._lookup: dict[str, str] = {}
        for category, keywords in self._verticals.items():
            for keyword in keywords:
                self._lookup[keyword.strip().lower()] = category

    def category_for(self, keyword: str) -> str:
        return self._lookup.get(keyword.strip().lower(), UNKNOWN_CATEGORY)

    def entries(self) -> list[KeywordEntry]:
        """
        All catalog keywords in table order, case-insensitively de-duplicated.
        """

        keywords = [keyword for table in self._verticals.values() for keyword in table]
        return dedupe_keywords(
            KeywordEntry(keyword=keyword, category=self.category_for(keyword))
            for keyword in keywords
        )


def dedupe_keywords(entries: Iterable[KeywordEntry]) -> list[KeywordEntry]:
    seen: set[str] = set()
    unique: list[KeywordEntry] = []
    for entry in entries:
        normalized = entry.keyword.strip().lower()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        unique.append(entry)
    return unique
