# tests/test_logging_config.py

"""Tests for the per-run logging configuration."""

import logging
import unittest

from brickdeals.config.logging_config import setup_logging


class TestLoggingConfig(unittest.TestCase):
    """Verify logging setup behaviour."""

    def setUp(self) -> None:
        """Clean up the brickdeals logger before each test."""
        self._reset()
        self.addCleanup(self._reset)

    @staticmethod
    def _reset() -> None:
        root_logger = logging.getLogger("brickdeals")
        for handler in list(root_logger.handlers):
            handler.close()
            root_logger.removeHandler(handler)

    def test_setup_creates_log_file(self) -> None:
        """setup_logging returns a path that exists on disk."""
        log_path = setup_logging()
        self.assertTrue(log_path.exists())

    def test_log_file_naming_convention(self) -> None:
        """Log file name matches run_YYYYMMDD_HHMMSS.log format."""
        log_path = setup_logging()
        self.assertRegex(log_path.name, r"^run_\d{8}_\d{6}\.log$")

    def test_handler_levels(self) -> None:
        """File handler logs DEBUG, console only WARNING and up."""
        setup_logging()
        root_logger = logging.getLogger("brickdeals")
        file_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.FileHandler)
        ]
        stream_handlers = [
            h for h in root_logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
        ]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].level, logging.DEBUG)
        self.assertEqual(len(stream_handlers), 1)
        self.assertEqual(stream_handlers[0].level, logging.WARNING)

    def test_repeated_calls_no_duplicate_handlers(self) -> None:
        setup_logging()
        root_logger = logging.getLogger("brickdeals")
        count_before = len(root_logger.handlers)
        setup_logging()
        self.assertEqual(len(root_logger.handlers), count_before)

    def test_root_logger_level_is_debug(self) -> None:
        setup_logging()
        self.assertEqual(logging.getLogger("brickdeals").level, logging.DEBUG)

    def test_child_loggers_reach_file(self) -> None:
        """Module loggers propagate into the per-run file."""
        log_path = setup_logging()
        logging.getLogger("brickdeals.query").info("child logger message")
        for handler in logging.getLogger("brickdeals").handlers:
            handler.flush()
        self.assertIn("child logger message", log_path.read_text(encoding="utf-8"))

    def test_log_file_inside_logs_dir(self) -> None:
        log_path = setup_logging()
        self.assertEqual(log_path.parent.name, "logs")


if __name__ == "__main__":
    unittest.main()
