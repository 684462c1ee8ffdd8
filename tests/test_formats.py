import pytest

from rulebook.validation import add_rule_translation, set_language
from rulebook.validation.formats import (
    ASCII,
    IP,
    URL,
    UUIDAny,
    UUIDv4,
    Alpha,
    Base64,
    Domain,
    E164,
    Email,
    Float,
    HexColor,
    Int,
    IPv4,
    IPv6,
    JSON,
    Latitude,
    MAC,
    Port,
    Semver,
    is_email,
    is_url,
)


@pytest.mark.parametrize("rule, good, bad", [
    (Email, "jane@example.com", "jane@example"),
    (URL, "https://example.com/path?q=1", "not a url"),
    (IP, "10.0.0.1", "10.0.0.256"),
    (IPv4, "192.168.1.1", "::1"),
    (IPv6, "::1", "192.168.1.1"),
    (UUIDAny, "123e4567-e89b-12d3-a456-426614174000", "123e4567"),
    (UUIDv4, "9b2c1b9e-7f0e-4b8e-9a1e-2b5b4d6f3c11", "123e4567-e89b-12d3-a456-426614174000"),
    (JSON, '{"a": [1, 2]}', "{a: 1}"),
    (Alpha, "abcXYZ", "abc1"),
    (ASCII, "plain text", "naïve"),
    (HexColor, "#a0f", "#ggg"),
    (Int, "-42", "4.2"),
    (Float, "-4.2e3", "4.2.1"),
    (Base64, "aGVsbG8=", "aGVsbG8"),
    (E164, "+14155552671", "+0123"),
    (Domain, "sub.example.org", "example"),
    (Port, "8080", "70000"),
    (MAC, "00:1a:2b:3c:4d:5e", "00:1a:2b"),
    (Latitude, "-45.5", "91"),
    (Semver, "1.2.3-beta.1+build.5", "1.2"),
])
def test_format_rules(rule, good, bad):
    assert rule.validate(good) is None
    assert rule.validate(bad) is not None
    assert rule.validate("") is None


def test_email_message_and_code():
    err = Email.validate("nope")
    assert str(err) == "must be a valid email address"
    assert err.code == "validation_is_email"


def test_email_rejects_display_names():
    assert not is_email("Jane <jane@example.com>")


def test_url_accepts_hosts_without_scheme():
    assert is_url("example.com")
    assert is_url("http://127.0.0.1:8000")


def test_format_messages_are_translatable():
    add_rule_translation("fr", "email", "doit être une adresse e-mail valide")
    set_language("fr")
    assert str(Email.validate("nope")) == "doit être une adresse e-mail valide"
