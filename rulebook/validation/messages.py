"""Rule message translations.

A process-wide table maps language -> rule key -> message text. It starts
with the English defaults below, grows only through the registration
functions, and is guarded by a lock so validation on several threads can
read it while an application registers languages.

Resolution order for a rule message:
    explicit override -> requested language -> English -> supplied default -> ""
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Mapping

import yaml

from rulebook.config import get_settings
from rulebook.logging import messages_logger

log = messages_logger()

EN_LANG = "en"

DEFAULT_MESSAGES: dict[str, str] = {
    # presence
    "required": "cannot be blank",
    "nil_or_not_empty": "cannot be blank",
    "not_nil": "is required",
    "nil": "must be blank",
    "empty": "must be blank",
    # length
    "length_between": "the length must be between {min} and {max}",
    "length_no_less_than": "the length must be no less than {min}",
    "length_no_more_than": "the length must be no more than {max}",
    "length_exactly": "the length must be exactly {min}",
    "length_empty": "the value must be empty",
    "length_unsupported": "cannot get the length of {type}",
    # membership and format
    "in": "must be a valid value",
    "not_in": "must not be in list",
    "match": "must be in a valid format",
    # numbers
    "range": "must be between {min} and {max}",
    "range_unsupported": "cannot apply range rule on type {type}",
    "multiple_of": "must be multiple of {base}",
    "multiple_of_unsupported": "type not supported: {type}",
    "multiple_of_zero_base": "the base cannot be zero",
    "int_conversion": "cannot convert {type} to int",
    # dates
    "date": "must be a valid date",
    "date_range": "the date is out of range",
    # typed predicates
    "string_type": "must be either a string or byte slice",
    "int_type": "must be an integer",
    # collections and maps
    "each_iterable": "must be an iterable (map, slice or array)",
    "key_unexpected": "key not expected",
}

_lock = threading.RLock()
_table: dict[str, dict[str, str]] = {EN_LANG: dict(DEFAULT_MESSAGES)}
_language: str | None = None
_file_loaded = False


# =============================================================================
# Current language
# =============================================================================

def get_language() -> str:
    with _lock:
        if _language is None:
            return get_settings().LANGUAGE
        return _language


def set_language(lang: str) -> None:
    global _language
    with _lock:
        _language = lang
    log.debug("language_set", lang=lang)


# =============================================================================
# Registration
# =============================================================================

def add_rule_translation(lang: str, key: str, text: str) -> None:
    """Add or replace the translation of one rule key."""
    with _lock:
        _table.setdefault(lang, {})[key] = text
    log.debug("translation_added", lang=lang, key=key)


register_translation = add_rule_translation


def add_lang(lang: str, messages: Mapping[str, str]) -> None:
    """Register a language, merging into it if it already exists."""
    with _lock:
        _table.setdefault(lang, {}).update(messages)
    log.debug("language_added", lang=lang, keys=len(messages))


def remove_lang(lang: str) -> None:
    """Drop a language. English falls back to the built-in defaults."""
    with _lock:
        if lang == EN_LANG:
            _table[EN_LANG] = dict(DEFAULT_MESSAGES)
        else:
            _table.pop(lang, None)


def translations(lang: str) -> dict[str, str]:
    """Copy of the table for one language (empty if unknown)."""
    with _lock:
        return dict(_table.get(lang, {}))


def load_translations(path: str | Path) -> list[str]:
    """Merge a YAML file of ``{lang: {rule_key: text}}`` into the table.

    Returns the languages loaded.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"translation file {path} must contain a mapping of languages")
    for lang, messages in data.items():
        if not isinstance(messages, dict):
            raise ValueError(f"translations for {lang!r} in {path} must be a mapping")
        add_lang(str(lang), {str(k): str(v) for k, v in messages.items()})
    log.info("translations_loaded", path=str(path), languages=list(data))
    return [str(lang) for lang in data]


def _ensure_file_loaded() -> None:
    global _file_loaded
    if _file_loaded:
        return
    with _lock:
        if _file_loaded:
            return
        _file_loaded = True
        path = get_settings().TRANSLATIONS_PATH
    if path:
        try:
            load_translations(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            log.warning("translations_load_failed", path=path, error=str(e))


# =============================================================================
# Resolution
# =============================================================================

def _lookup(lang: str, key: str) -> str:
    with _lock:
        return _table.get(lang, {}).get(key, "")


def resolve_message(lang: str, key: str, default: str = "", override: str = "") -> str:
    """Resolve a rule message: override, lang, English, default, then ""."""
    if override:
        return override
    _ensure_file_loaded()
    return _lookup(lang, key) or _lookup(EN_LANG, key) or default


def msg(key: str, custom: str = "") -> str:
    """Message for a rule key in the current language."""
    return resolve_message(get_language(), key, "", custom)


def msg_with_default(key: str, default: str, custom: str = "") -> str:
    """Like msg(), falling back to ``default`` when no language has the key."""
    return resolve_message(get_language(), key, default, custom)
