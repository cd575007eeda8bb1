# brickdeals/scrapers/extractor.py

"""Route a marketplace document to the scraper that understands it."""

import importlib
import logging
from collections.abc import Iterator
from typing import Any
from urllib.parse import urlparse

from brickdeals.config.settings import Settings
from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale
from brickdeals.scrapers.base_scraper import BaseScraper

logger = logging.getLogger("brickdeals.extractor")


def load_scraper_class(dotted_path: str) -> type[Any]:
    """Dynamically import a scraper class from its dotted module path."""
    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls: type[Any] = getattr(module, class_name)
    return cls


def resolve_source(base_url: str) -> dict[str, str] | None:
    """Find the registered source whose host serves *base_url*."""
    host = (urlparse(base_url).hostname or "").lower()
    for source in Settings.AVAILABLE_SOURCES:
        if host == source["host"] or host.endswith("." + source["host"]):
            return source
    return None


def scraper_for_url(base_url: str) -> BaseScraper | None:
    """Instantiate the scraper registered for *base_url*'s host."""
    source = resolve_source(base_url)
    if source is None:
        return None
    scraper: BaseScraper = load_scraper_class(source["scraper"])()
    return scraper


def extract(html: str, base_url: str) -> Iterator[Deal | Sale]:
    """Lazily yield raw records from one document, in document order.

    Unknown hosts produce no records.
    """
    scraper = scraper_for_url(base_url)
    if scraper is None:
        logger.warning("No scraper registered for %s", base_url)
        return
    yield from scraper.parse(html, base_url)
