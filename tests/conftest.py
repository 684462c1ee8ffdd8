"""
Pytest configuration and shared fixtures for rulebook tests.
"""

import pytest

from rulebook.config import get_settings
from rulebook.errors import Error
from rulebook.validation import By
import rulebook.validation.messages as messages


@pytest.fixture(autouse=True)
def restore_messages():
    """Snapshot the process-wide translation table and language."""
    table = {lang: dict(entries) for lang, entries in messages._table.items()}
    language = messages._language
    file_loaded = messages._file_loaded
    yield
    messages._table.clear()
    messages._table.update(table)
    messages._language = language
    messages._file_loaded = file_loaded


@pytest.fixture
def fresh_settings():
    """Drop cached settings so environment changes are picked up."""
    get_settings.cache_clear()
    yield get_settings
    get_settings.cache_clear()


def _reject(bad: str, message: str):
    return By(lambda value: Error("", message) if value == bad else None)


@pytest.fixture
def reject():
    """Factory: rule failing with ``message`` when the value equals ``bad``."""
    return _reject


@pytest.fixture
def abc_rule():
    """Fails on anything but "abc" (empty values pass)."""
    return By(lambda value: None if value in ("abc", "", None) else Error("", "error abc"))


@pytest.fixture
def xyz_rule():
    """Fails on anything but "xyz" (empty values pass)."""
    return By(lambda value: None if value in ("xyz", "", None) else Error("", "error xyz"))
