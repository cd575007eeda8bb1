# brickdeals/filters/deduplicator.py

"""Record deduplication within one ingestion run."""

import logging
import re

from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale

logger = logging.getLogger("brickdeals.filters")


class RecordDeduplicator:
    """Remove duplicate deals (by catalog id) and sales (by URL)."""

    # Query params and fragments don't affect listing identity
    _STRIP_PARAMS_RE = re.compile(r"[?#].*$")

    @staticmethod
    def _normalise_url(url: str) -> str:
        """Normalise a listing URL for dedup comparison.

        Strips query parameters, fragments, trailing slashes,
        and lowercases the result.
        """
        if not url:
            return ""
        cleaned = RecordDeduplicator._STRIP_PARAMS_RE.sub("", url)
        return cleaned.rstrip("/").lower()

    @staticmethod
    def deduplicate_deals(
        deals: list[Deal],
    ) -> tuple[list[Deal], int]:
        """Keep the first deal per catalog id, in document order.

        Returns the deduplicated list and the count of removed dupes.
        """
        seen: set[str] = set()
        kept: list[Deal] = []
        removed = 0

        for deal in deals:
            if deal.id in seen:
                removed += 1
                continue
            seen.add(deal.id)
            kept.append(deal)

        if removed:
            logger.info("Deduplication removed %d duplicate deals", removed)

        return kept, removed

    @staticmethod
    def deduplicate_sales(
        sales: list[Sale],
    ) -> tuple[list[Sale], int]:
        """Keep the first sale per normalised URL."""
        seen: set[str] = set()
        kept: list[Sale] = []
        removed = 0

        for sale in sales:
            key = RecordDeduplicator._normalise_url(sale.url)
            if key and key in seen:
                removed += 1
                continue
            if key:
                seen.add(key)
            kept.append(sale)

        if removed:
            logger.info("Deduplication removed %d duplicate sales", removed)

        return kept, removed
