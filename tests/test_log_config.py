"""Tests for logger setup."""

import logging

import pytest

from sqlite_spike.util.log_config import LEVEL_ENV_VAR, configure_package_logging, setup_logger


class TestSetupLogger:

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv(LEVEL_ENV_VAR, "debug")

        assert setup_logger("sqlite_spike.tests.env_level").level == logging.DEBUG

    def test_unknown_environment_level_falls_back_to_info(self, monkeypatch):
        """Should warn and keep INFO instead of failing while modules are imported."""
        monkeypatch.setenv(LEVEL_ENV_VAR, "verbose")

        with pytest.warns(RuntimeWarning, match="verbose"):
            logger = setup_logger("sqlite_spike.tests.bad_level")

        assert logger.level == logging.INFO

    def test_explicit_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            setup_logger("sqlite_spike.tests.explicit", level="loud")

    def test_rerunning_setup_does_not_stack_handlers(self):
        setup_logger("sqlite_spike.tests.handlers")
        logger = setup_logger("sqlite_spike.tests.handlers")

        assert len(logger.handlers) == 1

    def test_log_file_receives_debug(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logger("sqlite_spike.tests.file", level="WARNING", log_file=log_file)

        logger.debug("written to file only")
        for handler in logger.handlers:
            handler.flush()

        assert "written to file only" in log_file.read_text()
        for handler in logger.handlers:
            handler.close()

    def test_configure_package_logging_updates_existing_loggers(self):
        logger = setup_logger("sqlite_spike.tests.package", level="INFO")

        configure_package_logging("ERROR")

        assert logger.handlers[0].level == logging.ERROR
        configure_package_logging("INFO")
