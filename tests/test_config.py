import logging

import pytest
import structlog

from rulebook.config import Settings
from rulebook.logging import LoggerRegistry, configure_from_settings, configure_logging, get_logger
from rulebook.validation import Key, Required, validate_map


def test_defaults():
    s = Settings()
    assert s.LANGUAGE == "en"
    assert s.TRANSLATIONS_PATH is None
    assert s.ERROR_TAG == "json"
    assert s.MAX_DEPTH == 100
    assert s.LOG_JSON is False


def test_environment_overrides(monkeypatch, fresh_settings):
    monkeypatch.setenv("RULEBOOK_LANGUAGE", "de")
    monkeypatch.setenv("RULEBOOK_MAX_DEPTH", "12")
    monkeypatch.setenv("RULEBOOK_LOG_JSON", "true")
    fresh_settings.cache_clear()

    s = fresh_settings()
    assert s.LANGUAGE == "de"
    assert s.MAX_DEPTH == 12
    assert s.LOG_JSON is True


def test_settings_are_cached(fresh_settings):
    assert fresh_settings() is fresh_settings()


def test_logger_names_are_namespaced():
    assert LoggerRegistry.get("engine") is not None
    logger = get_logger("rulebook.test")
    assert hasattr(logger, "warning")


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()


def test_configure_logging_sets_library_logger_level(reset_structlog):
    configure_logging(level="DEBUG", json_logs=True)
    lib = logging.getLogger("rulebook")
    assert lib.level == logging.DEBUG
    assert lib.propagate is False

    configure_from_settings()
    assert lib.level == logging.INFO


def test_internal_errors_are_logged():
    with structlog.testing.capture_logs() as logs:
        validate_map({"a": 1}, Key("b"))
        validate_map({"a": ""}, Key("a", Required))

    events = [entry for entry in logs if entry["event"] == "internal_validation_error"]
    assert len(events) == 1
    assert events[0]["kind"] == "KeyNotFoundError"
    assert events[0]["log_level"] == "warning"
