# brickdeals/scrapers/base_scraper.py

"""Abstract base class for all marketplace scrapers."""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup, Tag
from curl_cffi import requests as curl_requests

from brickdeals.config.settings import Settings
from brickdeals.models.deal import Deal
from brickdeals.models.sale import Sale


class BaseScraper(ABC):
    """Fetches marketplace pages and parses them into records.

    ``fetch()`` never raises: network and HTTP failures are logged
    and reported as ``None`` so the ingestion run can continue with
    the remaining documents.
    """

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        self.logger = logging.getLogger(
            f"brickdeals.{source_name}"
        )
        self.settings = Settings()
        self.selectors: dict[str, str] = self._load_selectors()
        self.origin: str = self._load_origin()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self._current_delay: float = self.settings.REQUEST_DELAY
        self._consecutive_failures: int = 0
        self._circuit_open: bool = False
        self._circuit_opened_at: float = 0.0
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _load_selectors(self) -> dict[str, str]:
        """Load CSS selectors for this source from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, str] = all_selectors.get(self.source_name, {})
        return result

    def _load_origin(self) -> str:
        """Look up the site origin for this source in the registry."""
        for source in self.settings.AVAILABLE_SOURCES:
            if source["id"] == self.source_name:
                return source["origin"]
        return ""

    # ── Fetching ─────────────────────────────────────────

    def _check_circuit(self) -> bool:
        """Return True if the circuit breaker blocks this request.

        After CIRCUIT_BREAKER_COOLDOWN seconds the breaker enters
        a half-open state, allowing a single trial request through.
        """
        if not self._circuit_open:
            return False
        elapsed = time.time() - self._circuit_opened_at
        if elapsed >= self.settings.CIRCUIT_BREAKER_COOLDOWN:
            self.logger.info(
                "[%s] Circuit breaker half-open after %.0fs",
                self.source_name,
                elapsed,
            )
            self._circuit_open = False
            return False
        return True

    def _record_success(self) -> None:
        """Reset failure counters after a successful fetch."""
        self._consecutive_failures = 0
        self._circuit_open = False
        self._circuit_opened_at = 0.0
        self._current_delay = self.settings.REQUEST_DELAY

    def _record_failure(self) -> None:
        """Track failure and open circuit breaker if needed."""
        self._consecutive_failures += 1
        if self._consecutive_failures >= self.settings.CIRCUIT_BREAKER_THRESHOLD:
            self._circuit_open = True
            self._circuit_opened_at = time.time()
            self.logger.error(
                "[%s] Circuit breaker opened after %d "
                "consecutive failures",
                self.source_name,
                self._consecutive_failures,
            )

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY
            * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        self.logger.warning(
            "[%s] Rate-limited, delay escalated to %.1fs",
            self.source_name,
            self._current_delay,
        )

    def _fetch_get(
        self,
        url: str,
        headers: dict[str, str],
    ) -> curl_requests.Response | None:
        """GET with retries, adaptive delay, and circuit breaker."""
        if self._check_circuit():
            return None
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    url,
                    headers=headers,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    self._record_success()
                    return resp
                self.logger.warning(
                    "[%s] HTTP %d on attempt %d",
                    self.source_name,
                    resp.status_code,
                    attempt + 1,
                )
                if resp.status_code in (429, 403):
                    self._escalate_delay()
                    time.sleep(self._current_delay)
            except Exception as exc:
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.source_name,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self._current_delay * (attempt + 1))
        self._record_failure()
        return None

    def fetch(self, url: str) -> str | None:
        """Fetch a page's HTML, falling back to cloudscraper on failure."""
        if self._check_circuit():
            return None
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self.origin,
        }
        time.sleep(self._current_delay)

        # Primary: curl_cffi (browser-impersonating TLS)
        resp = self._fetch_get(url, headers)
        if resp:
            return str(resp.text)

        # Fallback: cloudscraper (JS challenge solver)
        self.logger.info(
            "[%s] curl_cffi exhausted, falling back to cloudscraper",
            self.source_name,
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback_resp: Any = scraper.get(
                url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if fallback_resp.status_code == 200:
                return str(fallback_resp.text)
            self.logger.warning(
                "[%s] cloudscraper fallback got HTTP %d for %s",
                self.source_name,
                fallback_resp.status_code,
                url,
            )
        except Exception as exc:
            self.logger.error(
                "[%s] cloudscraper fallback also failed: %s",
                self.source_name,
                exc,
                exc_info=True,
            )

        return None

    # ── Parsing helpers ──────────────────────────────────

    def _absolute_url(self, href: str) -> str:
        """Resolve a possibly-relative href against the site origin."""
        if href.startswith(("http://", "https://")):
            return href
        if not href.startswith("/"):
            href = f"/{href}"
        return f"{self.origin}{href}"

    @staticmethod
    def _node_text(node: Tag, selector: str | None) -> str | None:
        """Return the stripped text of the first match, or None."""
        if not selector:
            return None
        found = node.select_one(selector)
        if found is None:
            return None
        return found.get_text(strip=True)

    @staticmethod
    def _attr(node: Tag | None, name: str) -> str:
        """Return a string attribute value ('' when missing)."""
        if node is None:
            return ""
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return (value or "").strip()

    def _listing_nodes(self, html: str) -> list[Tag]:
        """Select all listing nodes in document order."""
        soup = BeautifulSoup(html, "lxml")
        return soup.select(self.selectors.get("listing", ""))

    @abstractmethod
    def parse(self, html: str, base_url: str) -> Iterator[Deal | Sale]:
        """Yield one record per listing node, in document order."""
        ...
