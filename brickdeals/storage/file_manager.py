# brickdeals/storage/file_manager.py

"""Reads and writes JSON record dumps on disk."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, cast

from brickdeals.config.settings import Settings

logger = logging.getLogger("brickdeals.storage")


class FileManager:
    """Handles record dumps in ``data/results``."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.DATA_DIR / "results"
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, results_dir=%s", self.results_dir)

    def save_records(
        self, kind: str, records: list[dict[str, Any]],
    ) -> Path:
        """Save serialised records to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"{kind}_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)

        logger.info("Saved %d %s to %s", len(records), kind, filepath)
        return filepath

    @staticmethod
    def load_records(filepath: Path) -> list[dict[str, Any]]:
        """Load a JSON array of record objects.

        Non-object entries are skipped.  Unreadable files or a
        top-level value that is not an array yield an empty list.
        """
        try:
            with open(filepath, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read %s: %s", filepath, exc)
            return []

        if not isinstance(data, list):
            logger.warning("Expected a JSON array in %s", filepath)
            return []

        items = cast(list[object], data)
        entries: list[dict[str, Any]] = [
            e for e in items if isinstance(e, dict)
        ]
        skipped = len(items) - len(entries)
        if skipped:
            logger.debug("Skipped %d non-object entries in %s", skipped, filepath)
        return entries
