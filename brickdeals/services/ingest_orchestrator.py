# brickdeals/services/ingest_orchestrator.py

"""Ingestion runs: extract, normalise, validate, then resync the store."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from brickdeals.config.settings import Settings
from brickdeals.filters.deduplicator import RecordDeduplicator
from brickdeals.filters.normalizer import (
    backfill_catalog_id,
    extract_set_number,
)
from brickdeals.filters.record_validator import RecordValidator
from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale
from brickdeals.scrapers.extractor import (
    extract,
    resolve_source,
    scraper_for_url,
)
from brickdeals.storage.file_manager import FileManager
from brickdeals.storage.record_store import RecordStore

logger = logging.getLogger("brickdeals.ingest")


@dataclass
class IngestResult:
    """Outcome of one ingestion run."""

    deals_inserted: int = 0
    sales_inserted: int = 0
    dropped: int = 0
    deduplicated: int = 0
    errors: list[str] = field(
        default_factory=lambda: list[str]()
    )


class IngestOrchestrator:
    """Turns source documents into a full resync of deals and sales.

    Each collection is replaced wholesale (delete-all, insert-all).
    A collection is only touched when the run carried at least one
    document for it, so a deals-only run leaves sales alone.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    # ── Private helpers ──────────────────────────────────

    def _persist_deals(
        self, deals: list[Deal], result: IngestResult,
    ) -> None:
        valid, dropped = RecordValidator.validate_deals(deals)
        unique, removed = RecordDeduplicator.deduplicate_deals(valid)
        result.dropped += dropped
        result.deduplicated += removed
        result.deals_inserted = self.store.replace_all(
            Settings.DEALS_COLLECTION, [d.to_dict() for d in unique],
        )

    def _persist_sales(
        self, sales: list[Sale], result: IngestResult,
    ) -> None:
        backfilled = [backfill_catalog_id(s) for s in sales]
        valid, dropped = RecordValidator.validate_sales(backfilled)
        unique, removed = RecordDeduplicator.deduplicate_sales(valid)
        result.dropped += dropped
        result.deduplicated += removed
        result.sales_inserted = self.store.replace_all(
            Settings.SALES_COLLECTION, [s.to_dict() for s in unique],
        )

    def _extract_document(
        self, html: str, base_url: str, result: IngestResult,
    ) -> list[Deal | Sale]:
        """Extract one document; a parser crash costs only this document."""
        try:
            return list(extract(html, base_url))
        except Exception as exc:
            result.errors.append(f"{base_url}: extraction failed: {exc}")
            logger.error(
                "Extraction failed for %s: %s", base_url, exc, exc_info=True,
            )
            return []

    # ── Public entry points ──────────────────────────────

    def ingest(
        self, documents: Iterable[tuple[str, str]],
    ) -> IngestResult:
        """Extract every ``(html, base_url)`` document and resync the store.

        Raises ``StoreUnavailableError`` if the store fails.
        """
        result = IngestResult()
        deals: list[Deal] = []
        sales: list[Sale] = []
        kinds: set[str] = set()

        for html, base_url in documents:
            source = resolve_source(base_url)
            if source is None:
                result.errors.append(f"{base_url}: no registered source")
                logger.warning("Skipping document from unknown source %s", base_url)
                continue
            kinds.add(source["kind"])
            records = self._extract_document(html, base_url, result)
            logger.info("Extracted %d records from %s", len(records), base_url)
            for record in records:
                if isinstance(record, Deal):
                    deals.append(record)
                else:
                    sales.append(record)

        if "deals" in kinds:
            self._persist_deals(deals, result)
        if "sales" in kinds:
            self._persist_sales(sales, result)

        logger.info(
            "Ingestion done: %d deals, %d sales inserted "
            "(%d dropped, %d duplicates, %d errors)",
            result.deals_inserted,
            result.sales_inserted,
            result.dropped,
            result.deduplicated,
            len(result.errors),
        )
        return result

    async def ingest_urls(self, urls: list[str]) -> IngestResult:
        """Fetch *urls* concurrently, then ingest whatever succeeded.

        A failed fetch contributes no records and is reported in
        ``errors``; it never aborts the other documents.
        """
        async def fetch_one(url: str) -> str:
            scraper = scraper_for_url(url)
            if scraper is None:
                raise ValueError(f"no registered source for {url}")
            html: str | None = await asyncio.to_thread(scraper.fetch, url)
            if html is None:
                raise ConnectionError(f"fetch failed for {url}")
            return html

        pages = await asyncio.gather(
            *(fetch_one(url) for url in urls), return_exceptions=True
        )

        documents: list[tuple[str, str]] = []
        errors: list[str] = []
        for url, page in zip(urls, pages):
            if isinstance(page, BaseException):
                errors.append(str(page))
                logger.warning("Fetch error for %s: %s", url, page)
            else:
                documents.append((page, url))

        result = self.ingest(documents)
        result.errors = errors + result.errors
        return result

    def import_json(self, path: Path, kind: str) -> IngestResult:
        """Resync one collection from a JSON dump of deals or sales.

        Deal entries use the stored shape; sale entries may use the
        marketplace source shape (``price.amount``, ``lego_id``,
        ``published_time``).
        """
        if kind not in ("deals", "sales"):
            raise ValueError(f"Unknown record kind: {kind}")
        entries = FileManager.load_records(path)
        result = IngestResult()

        if kind == "deals":
            deals: list[Deal] = []
            for entry in entries:
                deal = Deal.from_dict(entry)
                if not deal.id:
                    deal.id = (
                        extract_set_number(deal.title)
                        or extract_set_number(deal.link)
                        or ""
                    )
                deals.append(deal)
            self._persist_deals(deals, result)
        else:
            self._persist_sales(
                [Sale.from_source(entry) for entry in entries], result,
            )

        logger.info(
            "Imported %s from %s: %d deals, %d sales",
            kind,
            path,
            result.deals_inserted,
            result.sales_inserted,
        )
        return result
