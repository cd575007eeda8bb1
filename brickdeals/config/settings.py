# brickdeals/config/settings.py

"""Central configuration for the brickdeals engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the brickdeals engine."""

    # --- Scraping ---
    REQUEST_DELAY: float = 2.0          # Seconds between requests
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Resilience ---
    CIRCUIT_BREAKER_THRESHOLD: int = 3  # Consecutive failures to trip
    CIRCUIT_BREAKER_COOLDOWN: float = 60.0
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "fr-FR,fr;q=0.9,en;q=0.8",
        "sec-ch-ua-mobile": "?0",
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Query defaults ---
    DEFAULT_PAGE_SIZE: int = 30
    DEFAULT_SALES_LIMIT: int = 12

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "brickdeals" / "config" / "selectors.json"
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Storage (injected, never hard-coded credentials) ---
    DB_PATH: Path = Path(
        os.getenv("BRICKDEALS_DB_PATH", str(DATA_DIR / "brickdeals.db"))
    )
    DEALS_COLLECTION: str = "deals"
    SALES_COLLECTION: str = "sales"

    # --- Sources (host -> parser registry) ---
    AVAILABLE_SOURCES: list[dict[str, str]] = [
        {
            "id": "avenuedelabrique",
            "label": "Avenue de la Brique",
            "kind": "deals",
            "host": "avenuedelabrique.com",
            "origin": "https://www.avenuedelabrique.com",
            "scraper": (
                "brickdeals.scrapers.avenue_de_la_brique_scraper"
                ".AvenueDeLaBriqueScraper"
            ),
        },
        {
            "id": "vinted",
            "label": "Vinted",
            "kind": "sales",
            "host": "vinted.fr",
            "origin": "https://www.vinted.fr",
            "scraper": "brickdeals.scrapers.vinted_scraper.VintedScraper",
        },
    ]
