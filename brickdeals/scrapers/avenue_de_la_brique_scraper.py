# brickdeals/scrapers/avenue_de_la_brique_scraper.py

"""Scraper for avenuedelabrique.com LEGO deal listings."""

from collections.abc import Iterator

from brickdeals.filters.normalizer import (
    extract_set_number,
    parse_count,
    parse_discount,
    parse_price,
)
from brickdeals.models.deal import Deal
from brickdeals.scrapers.base_scraper import BaseScraper


class AvenueDeLaBriqueScraper(BaseScraper):
    """Parse deal cards from Avenue de la Brique promotion pages.

    Each card is an ``<a>`` inside ``div.prods`` carrying the title
    and link as attributes, with price and discount badges inside.
    """

    def __init__(self) -> None:
        super().__init__("avenuedelabrique")

    def parse(self, html: str, base_url: str) -> Iterator[Deal]:
        """Yield one Deal per listing node, skipping incomplete nodes."""
        for index, node in enumerate(self._listing_nodes(html)):
            title = self._attr(node, "title")
            href = self._attr(node, "href")
            price_text = self._node_text(node, self.selectors.get("price"))

            if not title or not href or price_text is None:
                self.logger.debug(
                    "[%s] Skipping listing #%d on %s "
                    "(title=%r, href=%r, price=%r)",
                    self.source_name,
                    index,
                    base_url,
                    title,
                    href,
                    price_text,
                )
                continue

            link = self._absolute_url(href)
            discount_text = self._node_text(
                node, self.selectors.get("discount")
            )
            image = self._attr(
                node.select_one(self.selectors.get("image", "img")), "src"
            )
            comments = parse_count(
                self._node_text(node, self.selectors.get("comments"))
            )

            yield Deal(
                id=extract_set_number(title) or extract_set_number(link) or "",
                title=title,
                link=link,
                price=parse_price(price_text),
                discount=(
                    parse_discount(discount_text)
                    if discount_text
                    else None
                ),
                image=self._absolute_url(image) if image else "",
                comments_count=comments or 0,
                temperature=parse_count(
                    self._node_text(node, self.selectors.get("temperature"))
                ),
                posted_at=self._node_text(
                    node, self.selectors.get("posted_at")
                ) or "",
            )
