# tests/test_runner.py

"""Tests for the CLI runner commands and argument routing."""

import asyncio
import io
import json
import sys
import tempfile
import unittest
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import main
from brickdeals.cli import runner
from brickdeals.services.query_engine import SearchFilters
from brickdeals.storage.file_manager import FileManager
from brickdeals.storage.record_store import StoreUnavailableError
from brickdeals.storage.sqlite_store import SqliteRecordStore


class _RunnerTestCase(unittest.TestCase):
    """Points the runner at a seeded temporary database."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.tmp_path = Path(self._tmp.name)
        self.db_path = self.tmp_path / "cli.db"

        seed = SqliteRecordStore(self.db_path)
        seed.replace_all("deals", [
            {"id": "75192", "title": "Faucon", "link": "https://x/1",
             "price": 649.99, "discount": 19, "commentsCount": 12,
             "temperature": 152, "postedAt": "16/01/2025 20:47:58"},
            {"id": "10305", "title": "Château", "link": "https://x/2",
             "price": 329.0, "discount": None, "commentsCount": 0,
             "temperature": None, "postedAt": ""},
        ])
        seed.replace_all("sales", [
            {"catalogId": "75192", "title": "Lego 75192", "url": "https://v/1",
             "price": 450.0, "currency": "EUR", "publishedAt": "14/01/2025"},
        ])
        seed.close()

        patcher = patch(
            "brickdeals.cli.runner.SqliteRecordStore",
            side_effect=lambda: SqliteRecordStore(self.db_path),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def _capture(
        self, func: Callable[..., int], *args: Any,
    ) -> tuple[int, str]:
        """Run a runner command and return (exit code, stdout)."""
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = func(*args)
        return code, out.getvalue()


class TestQueryCommands(_RunnerTestCase):
    """deals / deal / sales / indicators commands."""

    def test_search_deals_json(self) -> None:
        code, out = self._capture(
            runner.run_search_deals,
            SearchFilters(max_price="400"), "price-asc", 1, None, "json",
        )
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["total"], 1)
        self.assertEqual(payload["results"][0]["id"], "10305")

    def test_search_deals_table(self) -> None:
        code, out = self._capture(
            runner.run_search_deals, SearchFilters(), None, 1, 10, "table",
        )
        self.assertEqual(code, 0)
        self.assertIn("75192", out)

    def test_get_deal(self) -> None:
        code, out = self._capture(runner.run_get_deal, "75192", "json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["commentsCount"], 12)

    def test_get_missing_deal(self) -> None:
        code, _ = self._capture(runner.run_get_deal, "99999", "json")
        self.assertEqual(code, 1)

    def test_search_sales(self) -> None:
        code, out = self._capture(runner.run_search_sales, "75192", None, "json")
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["total"], 1)

    def test_indicators(self) -> None:
        code, out = self._capture(runner.run_indicators, "75192", "json")
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["p50"], 450.0)
        self.assertEqual(payload["lifetime"], "1 day")

    def test_indicators_table(self) -> None:
        code, out = self._capture(runner.run_indicators, "75192", "table")
        self.assertEqual(code, 0)
        self.assertIn("Lifetime", out)


class TestImportExport(_RunnerTestCase):
    """import-json and export commands."""

    def test_import_missing_file(self) -> None:
        code = runner.run_import_json(str(self.tmp_path / "nope.json"), "deals")
        self.assertEqual(code, 1)

    def test_export_then_import(self) -> None:
        """An exported collection imports back unchanged."""
        results_dir = self.tmp_path / "results"
        with patch(
            "brickdeals.cli.runner.FileManager",
            return_value=FileManager(results_dir),
        ):
            self.assertEqual(runner.run_export("deals"), 0)
        dumps = list(results_dir.glob("deals_*.json"))
        self.assertEqual(len(dumps), 1)

        self.assertEqual(runner.run_import_json(str(dumps[0]), "deals"), 0)
        store = SqliteRecordStore(self.db_path)
        self.addCleanup(store.close)
        self.assertEqual(
            [d["id"] for d in store.find("deals")], ["75192", "10305"]
        )


class TestStoreUnavailable(unittest.TestCase):
    """Store failures become exit status 1."""

    @patch(
        "brickdeals.cli.runner.SqliteRecordStore",
        side_effect=StoreUnavailableError("database is locked"),
    )
    def test_query_command(self, mock_store: MagicMock) -> None:
        self.assertEqual(runner.run_get_deal("75192", "json"), 1)

    @patch(
        "brickdeals.cli.runner.SqliteRecordStore",
        side_effect=StoreUnavailableError("database is locked"),
    )
    def test_ingest_command(self, mock_store: MagicMock) -> None:
        code = asyncio.run(
            runner.run_ingest(["https://www.avenuedelabrique.com/x"])
        )
        self.assertEqual(code, 1)


class TestMain(unittest.TestCase):
    """main() argument parsing and dispatch."""

    def test_parser_deals_options(self) -> None:
        args = main._build_parser().parse_args([
            "-f", "table", "deals", "--max-price", "50",
            "--sort", "price-asc", "--page", "2", "--size", "2",
        ])
        self.assertEqual(args.command, "deals")
        self.assertEqual(args.output_format, "table")
        self.assertEqual(args.max_price, "50")
        self.assertEqual(args.page_size, "2")

    def test_subcommand_required(self) -> None:
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit):
                main._build_parser().parse_args([])

    @patch("main.setup_logging", return_value=Path("run.log"))
    @patch("brickdeals.cli.runner.run_indicators", return_value=0)
    def test_dispatch_exit_code(
        self, mock_run: MagicMock, mock_logging: MagicMock,
    ) -> None:
        with patch.object(sys, "argv", ["brickdeals", "indicators", "75192"]):
            with self.assertRaises(SystemExit) as ctx:
                main.main()
        self.assertEqual(ctx.exception.code, 0)
        mock_run.assert_called_once_with("75192", "json")


if __name__ == "__main__":
    unittest.main()
