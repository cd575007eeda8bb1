# tests/test_deduplicator.py

"""Tests for RecordDeduplicator."""

import unittest

from brickdeals.filters.deduplicator import RecordDeduplicator
from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale


def _deal(deal_id: str, price: float = 10.0) -> Deal:
    """Create a minimal Deal."""
    return Deal(
        id=deal_id,
        title=f"Set {deal_id}",
        link=f"https://www.avenuedelabrique.com/{deal_id}",
        price=price,
    )


def _sale(url: str, price: float = 10.0) -> Sale:
    """Create a minimal Sale."""
    return Sale(title="Lego", url=url, price=price)


class TestDeduplicateDeals(unittest.TestCase):
    """RecordDeduplicator.deduplicate_deals behaviour."""

    def test_empty_list(self) -> None:
        """Empty input returns empty output."""
        kept, removed = RecordDeduplicator.deduplicate_deals([])
        self.assertEqual(kept, [])
        self.assertEqual(removed, 0)

    def test_first_occurrence_wins(self) -> None:
        """A repeated catalog id keeps the earliest deal."""
        deals = [_deal("75192", 649.0), _deal("10305"), _deal("75192", 599.0)]
        kept, removed = RecordDeduplicator.deduplicate_deals(deals)
        self.assertEqual([d.id for d in kept], ["75192", "10305"])
        self.assertEqual(kept[0].price, 649.0)
        self.assertEqual(removed, 1)


class TestDeduplicateSales(unittest.TestCase):
    """RecordDeduplicator.deduplicate_sales behaviour."""

    def test_url_normalisation(self) -> None:
        """Query params, fragments, trailing slashes and case are ignored."""
        sales = [
            _sale("https://www.vinted.fr/items/1?referrer=catalog", 450.0),
            _sale("https://www.vinted.fr/items/1/", 400.0),
            _sale("https://www.Vinted.fr/items/1#photos", 410.0),
            _sale("https://www.vinted.fr/items/2", 300.0),
        ]
        kept, removed = RecordDeduplicator.deduplicate_sales(sales)
        self.assertEqual(len(kept), 2)
        self.assertEqual(kept[0].price, 450.0)
        self.assertEqual(removed, 2)

    def test_no_duplicates(self) -> None:
        sales = [_sale("https://a/1"), _sale("https://a/2")]
        kept, removed = RecordDeduplicator.deduplicate_sales(sales)
        self.assertEqual(len(kept), 2)
        self.assertEqual(removed, 0)


if __name__ == "__main__":
    unittest.main()
