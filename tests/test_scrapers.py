# tests/test_scrapers.py

"""Tests for the Avenue de la Brique and Vinted listing parsers."""

import unittest
from pathlib import Path

from brickdeals.scrapers.avenue_de_la_brique_scraper import (
    AvenueDeLaBriqueScraper,
)
from brickdeals.scrapers.vinted_scraper import VintedScraper

FIXTURES = Path(__file__).parent / "fixtures"

_AVENUE_URL = "https://www.avenuedelabrique.com/promotions-lego"
_VINTED_URL = "https://www.vinted.fr/catalog?search_text=lego"


def _fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class TestAvenueDeLaBriqueScraper(unittest.TestCase):
    """Deal extraction from a promotions page."""

    def setUp(self) -> None:
        self.scraper = AvenueDeLaBriqueScraper()
        self.deals = list(
            self.scraper.parse(
                _fixture("avenuedelabrique_listing.html"), _AVENUE_URL
            )
        )

    def test_node_without_price_is_skipped(self) -> None:
        """Five cards, one lacks a price node: four deals."""
        self.assertEqual(len(self.deals), 4)
        self.assertFalse(any("42115" in d.title for d in self.deals))

    def test_document_order(self) -> None:
        self.assertEqual(
            [d.id for d in self.deals], ["75192", "10305", "60337", "21330"]
        )

    def test_full_card_fields(self) -> None:
        """Every badge on a complete card is normalised."""
        deal = self.deals[0]
        self.assertEqual(deal.title, "LEGO Star Wars 75192 Faucon Millenium UCS")
        self.assertEqual(
            deal.link,
            "https://www.avenuedelabrique.com/"
            "lego-star-wars-75192-faucon-millenium-ucs",
        )
        self.assertEqual(deal.price, 649.99)
        self.assertEqual(deal.discount, 19)
        self.assertEqual(
            deal.image, "https://www.avenuedelabrique.com/img/sets/75192.jpg"
        )
        self.assertEqual(deal.comments_count, 12)
        self.assertEqual(deal.temperature, 152)
        self.assertEqual(deal.posted_at, "16/01/2025 20:47:58")

    def test_sparse_card_defaults(self) -> None:
        """Missing optional badges fall back to defaults."""
        deal = self.deals[1]
        self.assertEqual(
            deal.link,
            "https://www.avenuedelabrique.com/lego-icons-10305-chateau-du-lion",
        )
        self.assertEqual(deal.price, 329.0)
        self.assertIsNone(deal.discount)
        self.assertEqual(deal.image, "")
        self.assertEqual(deal.comments_count, 0)
        self.assertIsNone(deal.temperature)

    def test_set_number_from_link_slug(self) -> None:
        """A title without a set number falls back to the link."""
        deal = self.deals[2]
        self.assertEqual(deal.id, "60337")
        self.assertEqual(deal.price, 119.99)
        self.assertEqual(deal.discount, 14)

    def test_unparsable_price_marked_none(self) -> None:
        """Price text that does not parse is kept as None."""
        self.assertIsNone(self.deals[3].price)

    def test_empty_document(self) -> None:
        self.assertEqual(list(self.scraper.parse("", _AVENUE_URL)), [])

    def test_no_listing_nodes(self) -> None:
        html = "<html><body><p>Aucune promotion</p></body></html>"
        self.assertEqual(list(self.scraper.parse(html, _AVENUE_URL)), [])


class TestVintedScraper(unittest.TestCase):
    """Sale extraction from a Vinted catalog page."""

    def setUp(self) -> None:
        self.scraper = VintedScraper()
        self.sales = list(
            self.scraper.parse(_fixture("vinted_catalog.html"), _VINTED_URL)
        )

    def test_box_without_price_is_skipped(self) -> None:
        self.assertEqual(len(self.sales), 2)

    def test_explicit_catalog_id(self) -> None:
        """The data attribute supplies the set number."""
        sale = self.sales[0]
        self.assertEqual(sale.catalog_id, "75192")
        self.assertEqual(sale.price, 500.0)
        self.assertEqual(sale.published_at, "16/01/2025 20:47:58")
        self.assertEqual(
            sale.url, "https://www.vinted.fr/items/4101-lego-faucon-millenium"
        )

    def test_missing_catalog_id_left_for_backfill(self) -> None:
        """Without the attribute the id stays empty at parse time."""
        sale = self.sales[1]
        self.assertIsNone(sale.catalog_id)
        self.assertEqual(sale.title, "Lego 75192 UCS neuf")
        self.assertEqual(sale.url, "https://www.vinted.fr/items/4102-lego-75192-ucs")
        self.assertEqual(sale.price, 450.0)


if __name__ == "__main__":
    unittest.main()
