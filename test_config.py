"""
Tests for settings loading and validation
"""

import logging

import pytest
from pydantic import ValidationError

from vitalscore.core.config import Settings
from vitalscore.core.logging_config import configure_logging


def test_defaults():
    config = Settings(_env_file=None)
    assert config.BASELINE_WINDOW_DAYS == 14
    assert config.BASELINE_MIN_SAMPLES == 5
    assert config.SLEEP_STAGE_BASELINE_MIN_SESSIONS == 7
    assert config.ALLOW_STALE_METRIC_FALLBACK is False
    assert config.DEFAULT_TIMEZONE == "UTC"


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("VITALSCORE_ALLOW_STALE_METRIC_FALLBACK", "true")
    monkeypatch.setenv("VITALSCORE_LOG_LEVEL", "debug")
    monkeypatch.setenv("VITALSCORE_DEFAULT_TIMEZONE", "Europe/Berlin")
    config = Settings(_env_file=None)
    assert config.ALLOW_STALE_METRIC_FALLBACK is True
    assert config.LOG_LEVEL == "DEBUG"
    assert config.DEFAULT_TIMEZONE == "Europe/Berlin"


def test_blank_log_level_defaults_to_info():
    assert Settings(_env_file=None, LOG_LEVEL="").LOG_LEVEL == "INFO"


def test_invalid_log_level():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, LOG_LEVEL="LOUD")


def test_window_shorter_than_min_samples():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, BASELINE_WINDOW_DAYS=3, BASELINE_MIN_SAMPLES=5)


def test_configure_logging(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "vitalscore.log"
    try:
        configure_logging(level="WARNING", log_file=str(log_file))
        logging.getLogger("vitalscore.test").warning("baseline missing")
        for handler in root.handlers:
            handler.flush()

        assert root.level == logging.WARNING
        assert " - vitalscore.test - WARNING - baseline missing" in log_file.read_text()
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
