"""Tests for logging setup."""

import logging

from gitallica.logging_config import LOGGER_NAME, get_logger, setup_logging


class TestSetupLogging:
    def test_default_level_is_warning(self):
        assert setup_logging().level == logging.WARNING

    def test_verbose(self):
        assert setup_logging(verbose=True).level == logging.DEBUG

    def test_quiet_wins_over_verbose(self):
        assert setup_logging(verbose=True, quiet=True).level == logging.ERROR

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "gitallica.log"
        logger = setup_logging(verbose=True, log_file=str(log_file))
        logger.debug("walking history")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "walking history" in log_file.read_text()
        setup_logging()


class TestGetLogger:
    def test_root_logger(self):
        assert get_logger().name == LOGGER_NAME

    def test_prefixes_module_names(self):
        assert get_logger("metrics.churn").name == "gitallica.metrics.churn"

    def test_keeps_qualified_names(self):
        assert get_logger("gitallica.temporal.walker").name == "gitallica.temporal.walker"
