"""Tests for shared/logging.py."""

import logging
import logging.handlers

import pytest

from shared.logging import mask_token, setup_logging


@pytest.fixture
def clean_root_logger():
    """Restore the root logger's handlers and level after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSetupLogging:
    def test_sets_level(self, clean_root_logger):
        setup_logging("DEBUG")
        assert clean_root_logger.level == logging.DEBUG

    def test_unknown_level_defaults_to_info(self, clean_root_logger):
        setup_logging("chatty")
        assert clean_root_logger.level == logging.INFO

    def test_idempotent(self, clean_root_logger):
        setup_logging("INFO")
        count = len(clean_root_logger.handlers)
        setup_logging("INFO")
        assert len(clean_root_logger.handlers) == count

    def test_file_handler(self, clean_root_logger, tmp_path):
        log_file = tmp_path / "ecolearn.log"

        setup_logging("INFO", str(log_file))
        setup_logging("INFO", str(log_file))

        file_handlers = [
            h for h in clean_root_logger.handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        logging.getLogger("ecolearn.test").info("hello")
        file_handlers[0].flush()
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_quiets_noisy_libraries(self, clean_root_logger):
        setup_logging("DEBUG")
        assert logging.getLogger("apscheduler").level == logging.WARNING


class TestMaskToken:
    def test_masks_long_token(self):
        assert mask_token("abcdef0123456789") == "abcdef0123..."

    def test_empty(self):
        assert mask_token(None) == ""
        assert mask_token("") == ""
