from __future__ import annotations

import unittest

from app.scraping.config.loader import DEFAULT_LISTING_SELECTOR
from app.scraping.parsing import OfferListingParser

LISTING_HTML = """
<html><body>
<ul class="now-card-stack">
  <li class="now-card now-link-card now-with-tag">
    <span class="now-card-tag-text">12 Termine</span>
    <h2 class="now-heading heading">
      <span class="sr-only">Bildungsanbieter Forward Academy GmbH</span>
      <span>Vertriebstraining
        Kompakt</span>
    </h2>
    <span id="offer-1_anbieter">Forward   Academy GmbH</span>
  </li>
  <li class="now-card now-link-card now-with-tag">
    <span class="now-card-tag-text">Termin auf Anfrage</span>
    <h2 class="now-heading heading">
      <span class="sr-only">Bildungsanbieter impaqt Training</span>
      <span>Sales Excellence</span>
    </h2>
  </li>
  <li class="now-card now-link-card now-with-tag">
    <h2 class="now-heading heading">Nur Ueberschrift</h2>
  </li>
  <li class="now-card now-link-card">
    <h2 class="now-heading heading"><span>Ohne Tag</span></h2>
  </li>
</ul>
</body></html>
"""


class TestOfferListingParser(unittest.TestCase):
    def setUp(self) -> None:
        self.parser = OfferListingParser(listing_selector=DEFAULT_LISTING_SELECTOR)
        self.offers = self.parser.parse(LISTING_HTML, keyword="sales")

    def test_only_tagged_cards_are_parsed(self) -> None:
        self.assertEqual(len(self.offers), 3)
        self.assertTrue(all(offer.keyword == "sales" for offer in self.offers))

    def test_extracts_fields_with_whitespace_collapsed(self) -> None:
        first = self.offers[0]
        self.assertEqual(first.termine, 12)
        self.assertEqual(first.title, "Vertriebstraining Kompakt")
        self.assertEqual(first.provider, "Forward Academy GmbH")

    def test_provider_falls_back_to_screen_reader_text(self) -> None:
        second = self.offers[1]
        self.assertEqual(second.provider, "impaqt Training")
        self.assertEqual(second.title, "Sales Excellence")

    def test_unparseable_termine_is_none(self) -> None:
        self.assertIsNone(self.offers[1].termine)
        self.assertIsNone(self.offers[2].termine)

    def test_title_falls_back_to_heading_and_provider_to_empty(self) -> None:
        third = self.offers[2]
        self.assertEqual(third.title, "Nur Ueberschrift")
        self.assertEqual(third.provider, "")

    def test_changed_container_yields_no_offers(self) -> None:
        self.assertEqual(self.parser.parse("<div class='other'></div>", keyword="sales"), [])
