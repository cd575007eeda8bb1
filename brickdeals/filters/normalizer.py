# brickdeals/filters/normalizer.py

"""Locale-aware price, date and catalog-id normalisation.

Every function here is total: malformed input yields ``None``
(or the record unchanged) instead of raising.  Listing dates in
the sources are written ``DD/MM/YYYY[ HH:MM:SS]`` without a
timezone; :func:`parse_locale_date` is the single place that
understands that grammar.
"""

import dataclasses
import logging
import math
import re
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from brickdeals.models.sale import Sale

logger = logging.getLogger("brickdeals.normalizer")

# Set ranges trusted when backfilling noisy sale titles: 10xxx, 21xxx, 75xxx
CATALOG_ID_RE = re.compile(r"\b(10\d{3}|75\d{3}|21\d{3})\b")
# Any set number on a catalog card: 5 digits preferred, 4 to 6 accepted
_SET_NUMBER_RES = (
    re.compile(r"\b(\d{5})\b", re.ASCII),
    re.compile(r"\b(\d{4,6})\b", re.ASCII),
)

_CURRENCY_RE = re.compile(r"[€$£]|EUR|USD|GBP", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_INT_RE = re.compile(r"-?\d+", re.ASCII)

_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})", re.ASCII)
_TIME_RE = re.compile(r"\d{1,2}:\d{2}(:\d{2})?", re.ASCII)


def parse_price(value: Any) -> float | None:
    """Parse a price like ``'12,50 €'`` or ``'1 299,00'`` into a float.

    Returns ``None`` for non-numeric, negative or non-finite input.
    When both separators appear, the last one is the decimal mark.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = _WHITESPACE_RE.sub("", _CURRENCY_RE.sub("", value))
        if "," in cleaned and "." in cleaned:
            if cleaned.rfind(",") > cleaned.rfind("."):
                cleaned = cleaned.replace(".", "").replace(",", ".")
            else:
                cleaned = cleaned.replace(",", "")
        else:
            cleaned = cleaned.replace(",", ".")
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_discount(value: Any) -> int | None:
    """Parse a discount badge like ``'-20%'`` into ``20``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    cleaned = value.strip().lstrip("-").rstrip("%").strip()
    try:
        return int(cleaned)
    except ValueError:
        return None


def parse_count(value: Any) -> int | None:
    """Pull the first signed integer out of a badge like ``'152°'``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    match = _INT_RE.search(value)
    return int(match.group(0)) if match else None


def parse_locale_date(value: Any) -> datetime | None:
    """Parse ``DD/MM/YYYY[ HH:MM:SS]`` into a naive datetime.

    A missing time part defaults to midnight.  Returns ``None`` on
    empty, non-string, malformed or out-of-range input.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    date_part, _, time_part = text.partition(" ")
    time_part = time_part.strip() or "00:00:00"

    date_match = _DATE_RE.fullmatch(date_part)
    if not date_match or not _TIME_RE.fullmatch(time_part):
        return None
    day, month, year = date_match.groups()
    hour, _, minutes = time_part.partition(":")

    iso = (
        f"{year}-{month.zfill(2)}-{day.zfill(2)}"
        f"T{hour.zfill(2)}:{minutes}"
    )
    try:
        return datetime.fromisoformat(iso)
    except ValueError:
        return None


def to_date_prefix(value: Any) -> str | None:
    """Turn a date-ish value into the ``DD/MM/YYYY`` prefix form.

    Accepts ``date``/``datetime`` objects, ``DD/MM/YYYY`` strings
    and ISO ``YYYY-MM-DD`` strings.
    """
    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    parsed = parse_locale_date(text.split(" ")[0])
    if parsed is None:
        try:
            parsed = datetime.fromisoformat(text[:10])
        except ValueError:
            return None
    return parsed.strftime("%d/%m/%Y")


def extract_catalog_id(text: Any) -> str | None:
    """Return the first LEGO set number found in *text*."""
    if not isinstance(text, str):
        return None
    match = CATALOG_ID_RE.search(text)
    return match.group(1) if match else None


def extract_set_number(text: Any) -> str | None:
    """Return the set number printed in a catalog title or link slug.

    Unlike :func:`extract_catalog_id` this accepts every set range
    (Technic 42xxx, City 60xxx, ...).
    """
    if not isinstance(text, str):
        return None
    for pattern in _SET_NUMBER_RES:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def backfill_catalog_id(sale: "Sale") -> "Sale":
    """Fill a missing ``catalog_id`` from the sale title.

    Returns a new Sale when an id was found, the same one otherwise.
    """
    if sale.catalog_id:
        return sale
    found = extract_catalog_id(sale.title)
    if found is None:
        logger.debug("No catalog id in sale title: %s", sale.title)
        return sale
    return dataclasses.replace(sale, catalog_id=found)
