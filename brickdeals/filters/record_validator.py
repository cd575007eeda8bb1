# brickdeals/filters/record_validator.py

"""Record validation: drop invalid deals and sales before persistence."""

import logging

from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale

logger = logging.getLogger("brickdeals.filters")


class RecordValidator:
    """Validate extracted records and drop those that break invariants."""

    @staticmethod
    def _deal_problem(deal: Deal) -> str | None:
        """Return the reason a deal is invalid, or None."""
        if not deal.id:
            return "missing catalog id"
        if not deal.title.strip():
            return "empty title"
        if not deal.link:
            return "missing link"
        if deal.price is None or deal.price < 0:
            return "unparsed or negative price"
        if deal.discount is not None and not 0 <= deal.discount <= 100:
            return f"discount {deal.discount} out of range"
        if deal.comments_count < 0:
            return "negative comments count"
        return None

    @staticmethod
    def validate_deals(
        deals: list[Deal],
    ) -> tuple[list[Deal], int]:
        """Drop deals missing required fields or with bad numbers.

        Returns the valid deals and the count of dropped items.
        """
        valid: list[Deal] = []
        dropped = 0

        for deal in deals:
            problem = RecordValidator._deal_problem(deal)
            if problem:
                logger.debug(
                    "Dropped deal (%s): title=%s, link=%s",
                    problem,
                    deal.title,
                    deal.link,
                )
                dropped += 1
                continue
            valid.append(deal)

        if dropped:
            logger.info("Validation dropped %d invalid deals", dropped)

        return valid, dropped

    @staticmethod
    def validate_sales(
        sales: list[Sale],
    ) -> tuple[list[Sale], int]:
        """Drop sales with empty title/url or a negative price.

        Sales whose price could not be parsed are kept for browsing;
        the statistics engine skips them.
        """
        valid: list[Sale] = []
        dropped = 0

        for sale in sales:
            if not sale.title.strip() or not sale.url:
                logger.debug(
                    "Dropped sale with empty title or url (url=%s)",
                    sale.url,
                )
                dropped += 1
                continue
            if sale.price is not None and sale.price < 0:
                logger.debug(
                    "Dropped sale with negative price (title=%s)",
                    sale.title,
                )
                dropped += 1
                continue
            valid.append(sale)

        if dropped:
            logger.info("Validation dropped %d invalid sales", dropped)

        return valid, dropped
