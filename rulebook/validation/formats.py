"""String format predicates and ready-made rules.

Each ``is_*`` predicate takes a non-empty string and returns a bool. The
matching rule constant (``Email``, ``URL``, ...) wraps it in a StringRule
whose translation key is the lower-case rule name, so messages can be
localised with ``add_rule_translation(lang, "email", ...)``.
"""
from __future__ import annotations

import base64
import binascii
import json
import re
from email.utils import parseaddr
from ipaddress import IPv4Address, IPv6Address
from urllib.parse import urlparse
from uuid import UUID

from .validators import StringRule

_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_ALPHA = re.compile(r"^[a-zA-Z]+$")
_DIGIT = re.compile(r"^[0-9]+$")
_ALPHANUMERIC = re.compile(r"^[a-zA-Z0-9]+$")
_HEXADECIMAL = re.compile(r"^[0-9a-fA-F]+$")
_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_INT = re.compile(r"^[-+]?(0|[1-9][0-9]*)$")
_FLOAT = re.compile(r"^[-+]?([0-9]+)?(\.[0-9]+)?([eE][-+]?[0-9]+)?$")
_E164 = re.compile(r"^\+?[1-9]\d{1,14}$")
_DOMAIN_LABEL = re.compile(r"^[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?$")
_MAC = re.compile(r"^([0-9a-fA-F]{2}[:-]){5}[0-9a-fA-F]{2}$")
_SEMVER = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(-(0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(\.(0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*)?"
    r"(\+[0-9a-zA-Z-]+(\.[0-9a-zA-Z-]+)*)?$"
)


# ============================================================================
# Predicates
# ============================================================================

def is_email(value: str) -> bool:
    _, addr = parseaddr(value)
    return addr == value and bool(_EMAIL.match(value))


def is_url(value: str) -> bool:
    try:
        parsed = urlparse(value if "://" in value else f"http://{value}")
    except ValueError:
        return False
    host = parsed.hostname or ""
    return parsed.scheme in ("http", "https", "ftp") and (is_domain(host) or is_ip(host) or host == "localhost")


def is_ip(value: str) -> bool:
    return is_ipv4(value) or is_ipv6(value)


def is_ipv4(value: str) -> bool:
    try:
        IPv4Address(value)
    except ValueError:
        return False
    return True


def is_ipv6(value: str) -> bool:
    try:
        IPv6Address(value)
    except ValueError:
        return False
    return True


def is_uuid(value: str, version: int | None = None) -> bool:
    try:
        parsed = UUID(value)
    except ValueError:
        return False
    return version is None or parsed.version == version


def is_json(value: str) -> bool:
    try:
        json.loads(value)
    except ValueError:
        return False
    return True


def is_base64(value: str) -> bool:
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return len(value) % 4 == 0


def is_domain(value: str) -> bool:
    if len(value) > 253 or "." not in value:
        return False
    labels = value.rstrip(".").split(".")
    return all(_DOMAIN_LABEL.match(label) for label in labels) and not labels[-1].isdigit()


def is_port(value: str) -> bool:
    return bool(_DIGIT.match(value)) and 0 < int(value) < 65536


def is_float(value: str) -> bool:
    return value not in ("", "+", "-", ".") and bool(_FLOAT.match(value))


def _is_coordinate(value: str, limit: float) -> bool:
    if not is_float(value):
        return False
    return -limit <= float(value) <= limit


def is_latitude(value: str) -> bool:
    return _is_coordinate(value, 90)


def is_longitude(value: str) -> bool:
    return _is_coordinate(value, 180)


# ============================================================================
# Rules
# ============================================================================

Email = StringRule(is_email, "email", "must be a valid email address")
URL = StringRule(is_url, "url", "must be a valid URL")
IP = StringRule(is_ip, "ip", "must be a valid IP address")
IPv4 = StringRule(is_ipv4, "ipv4", "must be a valid IPv4 address")
IPv6 = StringRule(is_ipv6, "ipv6", "must be a valid IPv6 address")
UUIDAny = StringRule(is_uuid, "uuid", "must be a valid UUID")
UUIDv3 = StringRule(lambda s: is_uuid(s, 3), "uuid_v3", "must be a valid UUID v3")
UUIDv4 = StringRule(lambda s: is_uuid(s, 4), "uuid_v4", "must be a valid UUID v4")
UUIDv5 = StringRule(lambda s: is_uuid(s, 5), "uuid_v5", "must be a valid UUID v5")
JSON = StringRule(is_json, "json", "must be in valid JSON format")
Alpha = StringRule(lambda s: bool(_ALPHA.match(s)), "alpha", "must contain English letters only")
Digit = StringRule(lambda s: bool(_DIGIT.match(s)), "digit", "must contain digits only")
Alphanumeric = StringRule(lambda s: bool(_ALPHANUMERIC.match(s)), "alphanumeric", "must contain letters and digits only")
LowerCase = StringRule(lambda s: s == s.lower(), "lower_case", "must be in lower case")
UpperCase = StringRule(lambda s: s == s.upper(), "upper_case", "must be in upper case")
ASCII = StringRule(str.isascii, "ascii", "must contain ASCII characters only")
Hexadecimal = StringRule(lambda s: bool(_HEXADECIMAL.match(s)), "hexadecimal", "must be a valid hexadecimal number")
HexColor = StringRule(lambda s: bool(_HEX_COLOR.match(s)), "hex_color", "must be a valid hexadecimal color code")
Int = StringRule(lambda s: bool(_INT.match(s)), "int", "must be an integer number")
Float = StringRule(is_float, "float", "must be a floating point number")
Base64 = StringRule(is_base64, "base64", "must be encoded in Base64")
E164 = StringRule(lambda s: bool(_E164.match(s)), "e164", "must be a valid E164 number")
Domain = StringRule(is_domain, "domain", "must be a valid domain")
Port = StringRule(is_port, "port", "must be a valid port number")
MAC = StringRule(lambda s: bool(_MAC.match(s)), "mac", "must be a valid MAC address")
Latitude = StringRule(is_latitude, "latitude", "must be a valid latitude")
Longitude = StringRule(is_longitude, "longitude", "must be a valid longitude")
Semver = StringRule(lambda s: bool(_SEMVER.match(s)), "semver", "must be a valid semantic version")
