# brickdeals/scrapers/vinted_scraper.py

"""Scraper for Vinted catalog pages (LEGO resale listings)."""

from collections.abc import Iterator

from brickdeals.filters.normalizer import extract_set_number, parse_price
from brickdeals.models.sale import Sale
from brickdeals.scrapers.base_scraper import BaseScraper


class VintedScraper(BaseScraper):
    """Parse resale item boxes from a Vinted catalog page.

    The overlay link carries both the href and the listing title.
    Some boxes expose the set number as a data attribute; otherwise
    it is inferred from the title later in the pipeline.
    """

    def __init__(self) -> None:
        super().__init__("vinted")

    def parse(self, html: str, base_url: str) -> Iterator[Sale]:
        """Yield one Sale per item box, skipping incomplete boxes."""
        for index, node in enumerate(self._listing_nodes(html)):
            anchor = node.select_one(self.selectors.get("link", "a"))
            title = self._attr(anchor, "title")
            href = self._attr(anchor, "href")
            price_text = self._node_text(node, self.selectors.get("price"))

            if not title or not href or price_text is None:
                self.logger.debug(
                    "[vinted] Skipping item #%d on %s "
                    "(title=%r, href=%r, price=%r)",
                    index,
                    base_url,
                    title,
                    href,
                    price_text,
                )
                continue

            explicit_id = self._attr(
                node, self.selectors.get("catalog_id_attr", "")
            )
            yield Sale(
                title=title,
                url=self._absolute_url(href),
                price=parse_price(price_text),
                published_at=self._node_text(
                    node, self.selectors.get("published_at")
                ) or "",
                catalog_id=extract_set_number(explicit_id),
            )
