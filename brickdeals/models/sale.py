# brickdeals/models/sale.py

"""Resale observation model."""

from dataclasses import dataclass
from typing import Any

from brickdeals.filters.normalizer import parse_locale_date, parse_price


@dataclass
class Sale:
    """A resale listing observed on a secondary marketplace."""

    title: str
    url: str
    price: float | None
    published_at: str = ""  # source format DD/MM/YYYY[ HH:MM:SS]
    catalog_id: str | None = None
    currency: str = "EUR"

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the stored document shape.

        ``publishedIso`` is the normalised publication instant, stored
        so the record store can order sales newest first.
        """
        published = parse_locale_date(self.published_at)
        return {
            "catalogId": self.catalog_id,
            "title": self.title,
            "url": self.url,
            "price": self.price,
            "currency": self.currency,
            "publishedAt": self.published_at,
            "publishedIso": published.isoformat() if published else None,
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "Sale":
        """Build a Sale from a stored document."""
        return cls(
            title=str(doc.get("title", "") or ""),
            url=str(doc.get("url", "") or ""),
            price=parse_price(doc.get("price")),
            published_at=str(doc.get("publishedAt", "") or ""),
            catalog_id=doc.get("catalogId") or None,
            currency=str(doc.get("currency", "EUR") or "EUR"),
        )

    @classmethod
    def from_source(cls, item: dict[str, Any]) -> "Sale":
        """Build a Sale from a raw marketplace dump entry.

        Source entries carry ``price`` as ``{amount, currency}``,
        the set number as ``lego_id`` and the date as
        ``published_time``.
        """
        raw_price: Any = item.get("price")
        currency = "EUR"
        if isinstance(raw_price, dict):
            currency = str(raw_price.get("currency") or currency)
            raw_price = raw_price.get("amount")
        catalog_id = item.get("lego_id") or item.get("catalogId")
        return cls(
            title=str(item.get("title", "") or ""),
            url=str(item.get("url", "") or item.get("link", "") or ""),
            price=parse_price(raw_price),
            published_at=str(
                item.get("published_time")
                or item.get("publishedAt")
                or ""
            ),
            catalog_id=str(catalog_id) if catalog_id else None,
            currency=currency,
        )
