# brickdeals/models/deal.py

"""Catalog deal model for inter-module data flow."""

from dataclasses import dataclass
from typing import Any

from brickdeals.filters.normalizer import parse_count, parse_discount, parse_price


@dataclass
class Deal:
    """A catalog listing for a LEGO set with price and popularity data.

    ``price`` is ``None`` when the source text could not be parsed;
    such deals never pass validation.
    """

    id: str
    title: str
    link: str
    price: float | None
    discount: int | None = None
    image: str = ""
    comments_count: int = 0
    temperature: int | None = None
    posted_at: str = ""  # source format DD/MM/YYYY[ HH:MM:SS]

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the stored document shape."""
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "image": self.image,
            "price": self.price,
            "discount": self.discount,
            "commentsCount": self.comments_count,
            "temperature": self.temperature,
            "postedAt": self.posted_at,
        }

    @classmethod
    def from_dict(cls, doc: dict[str, Any]) -> "Deal":
        """Build a Deal from a stored document, coercing loose numbers."""
        return cls(
            id=str(doc.get("id", "") or ""),
            title=str(doc.get("title", "") or ""),
            link=str(doc.get("link", "") or ""),
            price=parse_price(doc.get("price")),
            discount=parse_discount(doc.get("discount")),
            image=str(doc.get("image", "") or ""),
            comments_count=parse_count(doc.get("commentsCount")) or 0,
            temperature=parse_count(doc.get("temperature")),
            posted_at=str(doc.get("postedAt", "") or ""),
        )
