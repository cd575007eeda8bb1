# main.py

"""Entry point for the brickdeals command-line interface."""

import argparse
import asyncio
import logging
import sys

from brickdeals.config.logging_config import setup_logging
from brickdeals.config.settings import Settings
from brickdeals.services.query_engine import SORT_PRESETS, SearchFilters

logger = logging.getLogger("brickdeals.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_SOURCES)

    parser = argparse.ArgumentParser(
        prog="brickdeals",
        description="LEGO deal and resale price tracker.",
        epilog=f"Available sources: {valid_ids}",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser(
        "ingest", help="Fetch listing pages and resync the store.",
    )
    ingest.add_argument("urls", nargs="+", help="Listing page URLs.")

    import_json = commands.add_parser(
        "import-json", help="Resync a collection from a JSON dump.",
    )
    import_json.add_argument("path", help="Path to a JSON array file.")
    import_json.add_argument(
        "--kind", choices=["deals", "sales"], required=True,
    )

    deals = commands.add_parser("deals", help="Search deals.")
    deals.add_argument("--max-price", default=None, dest="max_price")
    deals.add_argument("--catalog-id", default=None, dest="catalog_id")
    deals.add_argument(
        "--date",
        default=None,
        help="Posting day, DD/MM/YYYY or YYYY-MM-DD.",
    )
    deals.add_argument(
        "--sort",
        default=None,
        help=f"Sort preset: {', '.join(SORT_PRESETS)}.",
    )
    deals.add_argument("--page", default=1)
    deals.add_argument("--size", default=None, dest="page_size")

    deal = commands.add_parser("deal", help="Show one deal by set number.")
    deal.add_argument("deal_id")

    sales = commands.add_parser("sales", help="Newest sales for a set.")
    sales.add_argument("catalog_id", nargs="?", default=None)
    sales.add_argument("--limit", default=None)

    indicators = commands.add_parser(
        "indicators", help="Resale price percentiles and lifetime.",
    )
    indicators.add_argument("catalog_id")

    export = commands.add_parser(
        "export", help="Dump a stored collection to data/results/.",
    )
    export.add_argument(
        "--kind", choices=["deals", "sales"], required=True,
    )

    return parser


def main() -> None:
    """Route the parsed command to its runner and exit with its code."""
    log_file = setup_logging()
    logger.info("brickdeals starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    from brickdeals.cli import runner

    if args.command == "ingest":
        exit_code = asyncio.run(runner.run_ingest(args.urls))
    elif args.command == "import-json":
        exit_code = runner.run_import_json(args.path, args.kind)
    elif args.command == "deals":
        exit_code = runner.run_search_deals(
            SearchFilters(
                max_price=args.max_price,
                catalog_id=args.catalog_id,
                date=args.date,
            ),
            args.sort,
            args.page,
            args.page_size,
            args.output_format,
        )
    elif args.command == "deal":
        exit_code = runner.run_get_deal(args.deal_id, args.output_format)
    elif args.command == "sales":
        exit_code = runner.run_search_sales(
            args.catalog_id, args.limit, args.output_format
        )
    elif args.command == "export":
        exit_code = runner.run_export(args.kind)
    else:
        exit_code = runner.run_indicators(
            args.catalog_id, args.output_format
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
