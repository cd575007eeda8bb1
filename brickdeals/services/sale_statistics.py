# brickdeals/services/sale_statistics.py

"""Price percentiles and listing lifetime for one catalog item's sales."""

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from brickdeals.filters.normalizer import parse_locale_date, parse_price
from brickdeals.models.sale import Sale

logger = logging.getLogger("brickdeals.stats")

_SECONDS_PER_DAY = 86400


@dataclass
class SaleIndicators:
    """Summary of resale prices and how long listings have been around."""

    count: int = 0
    average: float = 0.0
    p5: float = 0.0
    p25: float = 0.0
    p50: float = 0.0
    lifetime_days: int = 0

    @property
    def lifetime(self) -> str:
        """Human label: ``'0 days'``, ``'1 day'``, ``'12 days'``."""
        return format_lifetime(self.lifetime_days)

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "average": self.average,
            "p5": self.p5,
            "p25": self.p25,
            "p50": self.p50,
            "lifetimeDays": self.lifetime_days,
            "lifetime": self.lifetime,
        }


def format_lifetime(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def percentile(sorted_prices: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: ``sorted[floor(p/100 * n)]``, clamped.

    No interpolation between neighbours.  Empty input gives 0.
    """
    if not sorted_prices:
        return 0.0
    index = math.floor(p * len(sorted_prices) / 100)
    return sorted_prices[min(index, len(sorted_prices) - 1)]


def compute_lifetime_days(published: Iterable[str]) -> int:
    """Whole days between the earliest and latest parsable dates.

    No valid date gives 0 and a single one gives 1.  Otherwise the
    span is rounded half-up and never below 1.
    """
    instants = sorted(
        dt for dt in (parse_locale_date(v) for v in published)
        if dt is not None
    )
    if not instants:
        return 0
    if len(instants) == 1:
        return 1
    span_days = (instants[-1] - instants[0]).total_seconds() / _SECONDS_PER_DAY
    return max(1, math.floor(span_days + 0.5))


def compute_stats(sales: Iterable[Sale]) -> SaleIndicators:
    """Compute count, average, p5/p25/p50 and lifetime for *sales*.

    Sales whose price does not normalise are left out entirely: both the
    price math and the lifetime run over the priced subset, so zero
    priced sales always means a zero-day lifetime.
    """
    priced = [
        (price, s.published_at)
        for price, s in ((parse_price(s.price), s) for s in sales)
        if price is not None
    ]
    if not priced:
        return SaleIndicators()

    prices = sorted(price for price, _ in priced)
    lifetime_days = compute_lifetime_days(published for _, published in priced)

    indicators = SaleIndicators(
        count=len(prices),
        average=round(sum(prices) / len(prices), 2),
        p5=percentile(prices, 5),
        p25=percentile(prices, 25),
        p50=percentile(prices, 50),
        lifetime_days=lifetime_days,
    )
    logger.debug(
        "Stats over %d priced sales: avg=%.2f p5=%s p25=%s p50=%s, %s",
        indicators.count,
        indicators.average,
        indicators.p5,
        indicators.p25,
        indicators.p50,
        indicators.lifetime,
    )
    return indicators
