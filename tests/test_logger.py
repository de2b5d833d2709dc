"""Tests for the logging setup module."""

import io
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from src.utils.logger import LOG_FORMAT, get_logger, setup_logging


@contextmanager
def _bare_root_logger() -> Iterator[logging.Logger]:
    """Strip the root logger's handlers for the block and put them back after."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    root.handlers.clear()
    try:
        yield root
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def test_setup_creates_handler(self) -> None:
        with _bare_root_logger() as root:
            setup_logging("DEBUG")
            assert len(root.handlers) == 1
            assert root.level == logging.DEBUG
            assert root.handlers[0].formatter._fmt == LOG_FORMAT

    def test_setup_idempotent(self) -> None:
        with _bare_root_logger() as root:
            setup_logging("INFO")
            count = len(root.handlers)
            setup_logging("DEBUG")
            assert len(root.handlers) == count
            assert root.level == logging.INFO

    def test_setup_invalid_level_defaults_to_info(self) -> None:
        with _bare_root_logger() as root:
            setup_logging("NONEXISTENT")
            assert root.level == logging.INFO

    def test_lowercase_level(self) -> None:
        with _bare_root_logger() as root:
            setup_logging("warning")
            assert root.level == logging.WARNING

    def test_defaults_to_stdout(self) -> None:
        with _bare_root_logger() as root:
            setup_logging("INFO")
            assert root.handlers[0].stream is sys.stdout

    def test_custom_stream(self) -> None:
        buffer = io.StringIO()
        with _bare_root_logger() as root:
            setup_logging("INFO", stream=buffer)
            assert root.handlers[0].stream is buffer
            get_logger("test.stream").info("scanned card.png")
        assert "scanned card.png" in buffer.getvalue()

    def test_log_file(self, tmp_path: Path) -> None:
        log_file = tmp_path / "leads.log"
        with _bare_root_logger() as root:
            setup_logging("INFO", log_file=str(log_file), stream=io.StringIO())

            assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
            get_logger("test.file").info("stored lead abc")
            for handler in root.handlers:
                handler.flush()
        assert "stored lead abc" in log_file.read_text()


class TestGetLogger:
    """Tests for the get_logger function."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("test.module")
        assert logger.name == "test.module"
        assert isinstance(logger, logging.Logger)

    def test_same_name_returns_same_logger(self) -> None:
        assert get_logger("test.same") is get_logger("test.same")
