# brickdeals/services/query_engine.py

"""Filtered, sorted, paginated read access to deals and sales."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from brickdeals.config.settings import Settings
from brickdeals.filters.normalizer import parse_price, to_date_prefix
from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale
from brickdeals.services.sale_statistics import SaleIndicators, compute_stats
from brickdeals.storage.record_store import (
    Document,
    FieldCondition,
    RecordStore,
    SortSpec,
)

logger = logging.getLogger("brickdeals.query")

# Preset name -> (stored field, descending); None is the collection date field
SORT_PRESETS: dict[str, tuple[str | None, bool]] = {
    "best-discount": ("discount", True),
    "most-commented": ("commentsCount", True),
    "hot-deals": ("temperature", True),
    "price-asc": ("price", False),
    "price-desc": ("price", True),
    "date-asc": (None, False),
    "date-desc": (None, True),
}


@dataclass(frozen=True)
class CollectionSchema:
    """Where a collection keeps its catalog id and listing date."""

    name: str
    catalog_field: str
    date_field: str


DEALS = CollectionSchema(Settings.DEALS_COLLECTION, "id", "postedAt")
SALES = CollectionSchema(Settings.SALES_COLLECTION, "catalogId", "publishedAt")


@dataclass
class SearchFilters:
    """User-supplied filter intent; raw values are coerced at query time.

    ``date`` may be a ``date``, a ``DD/MM/YYYY`` string or an ISO
    string; it matches records whose stored date starts with that day.
    """

    max_price: Any = None
    catalog_id: Any = None
    date: Any = None


@dataclass
class SearchPage:
    """One page of stored documents plus the pre-pagination total."""

    results: list[Document] = field(
        default_factory=lambda: list[Document]()
    )
    total: int = 0
    page: int = 1
    page_size: int = Settings.DEFAULT_PAGE_SIZE

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": self.results,
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "pageCount": self.page_count,
        }


def _coerce_positive(value: Any, default: int) -> int:
    """Parse a positive int, falling back to *default*."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def build_conditions(
    filters: SearchFilters | None,
    schema: CollectionSchema,
) -> list[FieldCondition]:
    """Translate filter intent into AND-ed store conditions.

    Values that cannot be interpreted are dropped with a warning.
    """
    if filters is None:
        return []
    conditions: list[FieldCondition] = []

    if filters.max_price not in (None, ""):
        max_price = parse_price(filters.max_price)
        if max_price is None:
            logger.warning("Ignoring invalid max price: %r", filters.max_price)
        else:
            conditions.append(FieldCondition("price", "lte", max_price))

    if filters.catalog_id not in (None, ""):
        conditions.append(
            FieldCondition(
                schema.catalog_field, "eq", str(filters.catalog_id).strip()
            )
        )

    if filters.date not in (None, ""):
        prefix = to_date_prefix(filters.date)
        if prefix is None:
            logger.warning("Ignoring invalid date filter: %r", filters.date)
        else:
            conditions.append(
                FieldCondition(schema.date_field, "prefix", prefix)
            )

    return conditions


def resolve_sort(
    sort_preset: str | None,
    schema: CollectionSchema,
) -> SortSpec | None:
    """Map a preset name to a sort; unknown presets mean natural order."""
    if not sort_preset:
        return None
    preset = SORT_PRESETS.get(sort_preset)
    if preset is None:
        logger.warning(
            "Unknown sort preset '%s', using natural order", sort_preset
        )
        return None
    sort_field, descending = preset
    return SortSpec(field=sort_field or schema.date_field, descending=descending)


class QueryEngine:
    """Read-only projections over a record store."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def search(
        self,
        schema: CollectionSchema,
        filters: SearchFilters | None = None,
        sort_preset: str | None = None,
        page: Any = 1,
        page_size: Any = None,
    ) -> SearchPage:
        """Return one page of matches and the total before paging."""
        page_num = _coerce_positive(page, 1)
        size = _coerce_positive(page_size, Settings.DEFAULT_PAGE_SIZE)
        conditions = build_conditions(filters, schema)

        total = self.store.count(schema.name, conditions)
        results = self.store.find(
            schema.name,
            conditions,
            sort=resolve_sort(sort_preset, schema),
            skip=(page_num - 1) * size,
            limit=size,
        )
        logger.info(
            "Search %s: %d conditions, page %d/%d, %d of %d results",
            schema.name,
            len(conditions),
            page_num,
            max(1, math.ceil(total / size)),
            len(results),
            total,
        )
        return SearchPage(
            results=results, total=total, page=page_num, page_size=size,
        )

    def search_deals(
        self,
        filters: SearchFilters | None = None,
        sort_preset: str | None = None,
        page: Any = 1,
        page_size: Any = None,
    ) -> SearchPage:
        return self.search(DEALS, filters, sort_preset, page, page_size)

    def get_deal(self, deal_id: str) -> Deal | None:
        """Look up one deal by its catalog id."""
        docs = self.store.find(
            DEALS.name, [FieldCondition("id", "eq", deal_id)], limit=1,
        )
        return Deal.from_dict(docs[0]) if docs else None

    def search_sales(
        self,
        catalog_id: str | None = None,
        limit: Any = None,
    ) -> list[Sale]:
        """Return the newest sales for a catalog item.

        Without a catalog id every sale is eligible.  The store sorts on
        the normalised publication instant and applies the limit, so
        only the returned page is loaded; unparsable dates sort last.
        """
        size = _coerce_positive(limit, Settings.DEFAULT_SALES_LIMIT)
        conditions = (
            [FieldCondition("catalogId", "eq", str(catalog_id))]
            if catalog_id
            else []
        )
        docs = self.store.find(
            SALES.name,
            conditions,
            sort=SortSpec("publishedIso", descending=True),
            limit=size,
        )
        return [Sale.from_dict(doc) for doc in docs]

    def sale_indicators(self, catalog_id: str | None) -> SaleIndicators:
        """Price and lifetime statistics for one catalog item."""
        if not catalog_id:
            logger.warning("Sale indicators requested without a catalog id")
            return SaleIndicators()
        docs = self.store.find(
            SALES.name,
            [
                FieldCondition("catalogId", "eq", str(catalog_id)),
                FieldCondition("price", "not_null"),
            ],
        )
        indicators = compute_stats(Sale.from_dict(doc) for doc in docs)
        logger.info(
            "Indicators for %s: %d sales, p50=%s, %s",
            catalog_id,
            indicators.count,
            indicators.p50,
            indicators.lifetime,
        )
        return indicators
