# brickdeals/cli/runner.py

"""Headless CLI commands over the ingestion and query services."""

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from brickdeals.config.settings import Settings
from brickdeals.models.sale import Sale
from brickdeals.services.ingest_orchestrator import (
    IngestOrchestrator,
    IngestResult,
)
from brickdeals.services.query_engine import QueryEngine, SearchFilters
from brickdeals.storage.file_manager import FileManager
from brickdeals.storage.record_store import RecordStore, StoreUnavailableError
from brickdeals.storage.sqlite_store import SqliteRecordStore

logger = logging.getLogger("brickdeals.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _with_store(action: Callable[[RecordStore], int]) -> int:
    """Open the store, run *action*, and turn store failures into exit 1."""
    try:
        store = SqliteRecordStore()
    except StoreUnavailableError as exc:
        logger.error("Store unavailable: %s", exc)
        _err.print(f"[red]Store unavailable: {exc}[/red]")
        return 1
    try:
        return action(store)
    except StoreUnavailableError as exc:
        logger.error("Store failed mid-operation: %s", exc, exc_info=True)
        _err.print(f"[red]Store error: {exc}[/red]")
        return 1
    finally:
        store.close()


def _dump_json(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _report_ingest(result: IngestResult) -> int:
    """Print an ingestion summary to stderr."""
    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")
    parts: list[str] = []
    if result.dropped:
        parts.append(f"{result.dropped} invalid")
    if result.deduplicated:
        parts.append(f"{result.deduplicated} deduped")
    detail = f" ({', '.join(parts)})" if parts else ""
    _err.print(
        f"[green]✓ {result.deals_inserted} deals, "
        f"{result.sales_inserted} sales stored{detail}[/green]"
    )
    return 0


def _print_deals_table(deals: list[dict[str, Any]], title: str) -> None:
    """Render a Rich table of deal documents to stdout."""
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("Set", style="bold")
    table.add_column("Title", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Discount", justify="right")
    table.add_column("Comments", justify="right")
    table.add_column("Temp.", justify="right")
    table.add_column("Posted", style="dim")

    for d in deals:
        discount = d.get("discount")
        temperature = d.get("temperature")
        table.add_row(
            str(d.get("id", "")),
            str(d.get("title", ""))[:50],
            f"{d['price']:,.2f} €" if d.get("price") is not None else "N/A",
            f"{discount}%" if discount is not None else "—",
            str(d.get("commentsCount", 0)),
            f"{temperature}°" if temperature is not None else "—",
            str(d.get("postedAt", "")) or "—",
        )

    Console().print(table)


def _print_sales_table(sales: list[Sale], catalog_id: str | None) -> None:
    """Render a Rich table of sales to stdout."""
    table = Table(
        title=f"Sales for {catalog_id}" if catalog_id else "Sales",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Title", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Published", style="dim")
    table.add_column("URL", overflow="fold", style="dim")

    for s in sales:
        table.add_row(
            s.title[:50],
            f"{s.price:,.2f} {s.currency}" if s.price is not None else "N/A",
            s.published_at or "—",
            s.url,
        )

    Console().print(table)


# ── Commands ─────────────────────────────────────────────


async def run_ingest(urls: list[str]) -> int:
    """Fetch and ingest marketplace pages, resyncing the store."""
    _err.print(f"[bold]Ingesting {len(urls)} page(s)...[/bold]")

    try:
        store = SqliteRecordStore()
    except StoreUnavailableError as exc:
        logger.error("Store unavailable: %s", exc)
        _err.print(f"[red]Store unavailable: {exc}[/red]")
        return 1
    try:
        result = await IngestOrchestrator(store).ingest_urls(urls)
    except StoreUnavailableError as exc:
        logger.error("Ingestion aborted: %s", exc, exc_info=True)
        _err.print(f"[red]Store error: {exc}[/red]")
        return 1
    finally:
        store.close()
    return _report_ingest(result)


def run_import_json(path: str, kind: str) -> int:
    """Resync one collection from a JSON dump."""
    filepath = Path(path)
    if not filepath.exists():
        _err.print(f"[red]File not found: {filepath}[/red]")
        return 1
    _err.print(f"[bold]Importing {kind} from {filepath}...[/bold]")

    def action(store: RecordStore) -> int:
        result = IngestOrchestrator(store).import_json(filepath, kind)
        return _report_ingest(result)

    return _with_store(action)


def run_search_deals(
    filters: SearchFilters,
    sort_preset: str | None,
    page: Any,
    page_size: Any,
    output_format: str,
) -> int:
    """Search deals and print one page."""

    def action(store: RecordStore) -> int:
        result = QueryEngine(store).search_deals(
            filters, sort_preset, page, page_size
        )
        _err.print(
            f"[dim]Page {result.page}/{result.page_count}, "
            f"{result.total} matching deals[/dim]"
        )
        if output_format == "table":
            _print_deals_table(result.results, "Deals")
        else:
            _dump_json(result.to_dict())
        return 0

    return _with_store(action)


def run_get_deal(deal_id: str, output_format: str) -> int:
    """Print one deal by catalog id."""

    def action(store: RecordStore) -> int:
        deal = QueryEngine(store).get_deal(deal_id)
        if deal is None:
            _err.print(f"[yellow]Deal {deal_id} not found.[/yellow]")
            return 1
        if output_format == "table":
            _print_deals_table([deal.to_dict()], f"Deal {deal_id}")
        else:
            _dump_json(deal.to_dict())
        return 0

    return _with_store(action)


def run_search_sales(
    catalog_id: str | None,
    limit: Any,
    output_format: str,
) -> int:
    """Print the newest sales for a catalog item."""

    def action(store: RecordStore) -> int:
        sales = QueryEngine(store).search_sales(catalog_id, limit)
        if not sales:
            _err.print("[yellow]No sales found.[/yellow]")
        if output_format == "table":
            _print_sales_table(sales, catalog_id)
        else:
            _dump_json({
                "total": len(sales),
                "results": [s.to_dict() for s in sales],
            })
        return 0

    return _with_store(action)


def run_indicators(catalog_id: str, output_format: str) -> int:
    """Print price percentiles and lifetime for a catalog item."""

    def action(store: RecordStore) -> int:
        indicators = QueryEngine(store).sale_indicators(catalog_id)
        if output_format == "table":
            table = Table(
                title=f"Sale indicators for {catalog_id}",
                title_style="bold cyan",
            )
            table.add_column("Indicator", style="bold")
            table.add_column("Value", justify="right")
            table.add_row("Sales", str(indicators.count))
            table.add_row("Average", f"{indicators.average:.2f} €")
            table.add_row("p5", f"{indicators.p5:.2f} €")
            table.add_row("p25", f"{indicators.p25:.2f} €")
            table.add_row("p50", f"{indicators.p50:.2f} €")
            table.add_row("Lifetime", indicators.lifetime)
            Console().print(table)
        else:
            _dump_json(indicators.to_dict())
        return 0

    return _with_store(action)


def run_export(kind: str) -> int:
    """Dump a stored collection to a JSON file ``import-json`` accepts."""

    def action(store: RecordStore) -> int:
        collection = (
            Settings.DEALS_COLLECTION
            if kind == "deals"
            else Settings.SALES_COLLECTION
        )
        records = store.find(collection)
        filepath = FileManager().save_records(kind, records)
        _err.print(
            f"[green]✓ {len(records)} {kind} exported to {filepath}[/green]"
        )
        return 0

    return _with_store(action)
