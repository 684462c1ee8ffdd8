"""Concrete Rules

Predicate wrappers around the rule protocol. All of them accept empty
values; pair them with Required when presence matters.

Features:
- Frozen dataclass rules; .error()/.error_object() return copies
- Compiled regex caching for Match
- Translatable messages with {placeholder} params
- Each / EachUntilFirstError apply rule lists to every element
"""
from __future__ import annotations

import numbers
import re
from collections.abc import Mapping, Set
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, ClassVar, Iterable, Iterator

from rulebook.errors import Error, Errors, InternalError

from .context import Context
from .rules import MessageRule, Rule, RuleWithContext, indirect, is_empty, translated

_STRING_TYPE = Error("validation_string_type", "must be either a string or byte slice")
_INT_TYPE = Error("validation_int_type", "must be an integer")


def _is_int(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _as_text(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return None


# ============================================================================
# Length
# ============================================================================

@dataclass(frozen=True, slots=True)
class Length(MessageRule):
    """Length of a string or container within [min, max].

    A zero bound is open: Length(2, 0) only sets a minimum, Length(0, 5)
    only a maximum. Length(0, 0) requires the value to be empty. With
    ``rune`` set, bytes are decoded as UTF-8 and characters are counted.
    """
    min: int = 0
    max: int = 0
    rune: bool = False

    _BETWEEN: ClassVar[Error] = Error("validation_length_out_of_range", "the length must be between {min} and {max}")
    _TOO_SHORT: ClassVar[Error] = Error("validation_length_too_short", "the length must be no less than {min}")
    _TOO_LONG: ClassVar[Error] = Error("validation_length_too_long", "the length must be no more than {max}")
    _EXACT: ClassVar[Error] = Error("validation_length_invalid", "the length must be exactly {min}")
    _EMPTY: ClassVar[Error] = Error("validation_length_empty_required", "the value must be empty")
    _UNSIZED: ClassVar[Error] = Error("validation_length_unsupported", "cannot get the length of {type}")

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        try:
            length = len(_as_text(value)) if self.rune and isinstance(value, (bytes, bytearray)) else len(value)
        except TypeError:
            return translated(self._UNSIZED, "length_unsupported", type=type(value).__name__)
        if length < self.min or (self.max > 0 and length > self.max) or (self.min == 0 and self.max == 0):
            return self._violation()
        return None

    def _violation(self) -> Error:
        if self.min == 0 and self.max == 0:
            return self.fail(self._EMPTY, "length_empty")
        if self.min == 0:
            return self.fail(self._TOO_LONG, "length_no_more_than", max=self.max)
        if self.max == 0:
            return self.fail(self._TOO_SHORT, "length_no_less_than", min=self.min)
        if self.min == self.max:
            return self.fail(self._EXACT, "length_exactly", min=self.min)
        return self.fail(self._BETWEEN, "length_between", min=self.min, max=self.max)


def ExactLength(n: int) -> Length:
    """Length rule requiring exactly ``n`` elements or characters."""
    return Length(n, n)


def RuneLength(min: int, max: int) -> Length:
    """Length rule counting UTF-8 characters of bytes rather than bytes."""
    return Length(min, max, rune=True)


# ============================================================================
# Membership
# ============================================================================

@dataclass(frozen=True, slots=True, init=False)
class In(MessageRule):
    """Value must equal one of the given values."""
    key: ClassVar[str] = "in"
    default_error: ClassVar[Error] = Error("validation_in_invalid", "must be a valid value")

    values: tuple[Any, ...] = ()

    def __init__(self, *values: Any, err: Error | None = None) -> None:
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "err", err)

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        if any(_same(value, candidate) for candidate in self.values):
            return None
        return self.fail()


@dataclass(frozen=True, slots=True, init=False)
class NotIn(MessageRule):
    """Value must not equal any of the given values."""
    key: ClassVar[str] = "not_in"
    default_error: ClassVar[Error] = Error("validation_not_in_invalid", "must not be in list")

    values: tuple[Any, ...] = ()

    def __init__(self, *values: Any, err: Error | None = None) -> None:
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "err", err)

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        if any(_same(value, candidate) for candidate in self.values):
            return self.fail()
        return None


def _same(value: Any, candidate: Any) -> bool:
    # 1 == "1" is already False; keep True == 1 from matching too
    if isinstance(value, bool) != isinstance(candidate, bool):
        return False
    return value == candidate


# ============================================================================
# Format
# ============================================================================

@dataclass(frozen=True, slots=True)
class Match(MessageRule):
    """String (or bytes) value must match the regular expression."""
    key: ClassVar[str] = "match"
    default_error: ClassVar[Error] = Error("validation_match_invalid", "must be in a valid format")

    pattern: str | re.Pattern = ""
    flags: int = 0

    @property
    def regex(self) -> re.Pattern:
        return _compile(self.pattern, self.flags)

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        text = _as_text(value)
        if text is not None and self.regex.search(text):
            return None
        return self.fail()


_compiled: dict[tuple[Any, int], re.Pattern] = {}


def _compile(pattern: str | re.Pattern, flags: int) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    key = (pattern, flags)
    if key not in _compiled:
        _compiled[key] = re.compile(pattern, flags)
    return _compiled[key]


# ============================================================================
# Numbers
# ============================================================================

@dataclass(frozen=True, slots=True)
class Range(MessageRule):
    """Value must satisfy min <= value <= max (inclusive).

    Works with any mutually comparable values: numbers, dates, Decimals.
    """
    key: ClassVar[str] = "range"
    default_error: ClassVar[Error] = Error("validation_range_out_of_range", "must be between {min} and {max}")
    _UNSUPPORTED: ClassVar[Error] = Error("validation_range_unsupported", "cannot apply range rule on type {type}")

    min: Any = None
    max: Any = None

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        if isinstance(value, (str, bytes, bytearray, Mapping, list, tuple, Set)):
            return translated(self._UNSUPPORTED, "range_unsupported", type=type(value).__name__)
        try:
            inside = self.min <= value <= self.max
        except TypeError:
            return translated(self._UNSUPPORTED, "range_unsupported", type=type(value).__name__)
        return None if inside else self.fail(min=self.min, max=self.max)


@dataclass(frozen=True, slots=True)
class MultipleOf(MessageRule):
    """Integer value must be a multiple of ``base``."""
    key: ClassVar[str] = "multiple_of"
    default_error: ClassVar[Error] = Error("validation_multiple_of_invalid", "must be multiple of {base}")
    _UNSUPPORTED: ClassVar[Error] = Error("validation_multiple_of_unsupported", "type not supported: {type}")
    _CONVERSION: ClassVar[Error] = Error("validation_int_conversion", "cannot convert {type} to int")
    _ZERO_BASE: ClassVar[Error] = Error("validation_multiple_of_zero_base", "the base cannot be zero")

    base: Any = 1

    def validate(self, value: Any) -> Exception | None:
        if not _is_int(self.base):
            return translated(self._UNSUPPORTED, "multiple_of_unsupported", type=type(self.base).__name__)
        if self.base == 0:
            return translated(self._ZERO_BASE, "multiple_of_zero_base")
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        if not _is_int(value):
            return translated(self._CONVERSION, "int_conversion", type=type(value).__name__)
        return None if value % self.base == 0 else self.fail(base=self.base)


# ============================================================================
# Dates
# ============================================================================

@dataclass(frozen=True, slots=True)
class Date(MessageRule):
    """String value must parse with ``layout`` (a strptime format).

    Optional bounds are inclusive; a parsed date outside them fails with the
    range message, which .range_error() customises separately.
    """
    key: ClassVar[str] = "date"
    default_error: ClassVar[Error] = Error("validation_date_invalid", "must be a valid date")
    _OUT_OF_RANGE: ClassVar[Error] = Error("validation_date_out_of_range", "the date is out of range")

    layout: str = "%Y-%m-%d"
    min_date: datetime | None = None
    max_date: datetime | None = None
    range_err: Error | None = None

    def min(self, when: datetime) -> Date: return self._evolve(min_date=when)

    def max(self, when: datetime) -> Date: return self._evolve(max_date=when)

    def range_error(self, message: str) -> Date:
        base = self.range_err if self.range_err is not None else self._OUT_OF_RANGE
        return self._evolve(range_err=base.with_message(message))

    def range_error_object(self, err: Error) -> Date: return self._evolve(range_err=err)

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        text = _as_text(value)
        if text is None:
            return translated(_STRING_TYPE, "string_type")
        try:
            parsed = datetime.strptime(text, self.layout)
        except ValueError:
            return self.fail()
        if (self.min_date is not None and _before(parsed, self.min_date)) or (
            self.max_date is not None and _before(self.max_date, parsed)
        ):
            if self.range_err is not None:
                return self.range_err
            return translated(self._OUT_OF_RANGE, "date_range")
        return None


def _before(a: datetime, b: datetime) -> bool:
    # a naive side is read as UTC when the other side carries a zone
    if (a.tzinfo is None) != (b.tzinfo is None):
        a, b = (d if d.tzinfo is not None else d.replace(tzinfo=timezone.utc) for d in (a, b))
    return a < b


# ============================================================================
# Typed predicates
# ============================================================================

@dataclass(frozen=True, slots=True)
class StringRule(MessageRule):
    """Rule from a ``str -> bool`` predicate.

    ``name`` is the translation key; ``message`` the English fallback.
    Bytes are decoded as UTF-8 before the predicate runs.
    """
    predicate: Callable[[str], bool] = field(default=lambda s: True)
    name: str = ""
    message: str = ""

    @property
    def template(self) -> Error:
        if self.err is not None:
            return self.err
        return Error(f"validation_is_{self.name}" if self.name else "", self.message)

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        text = _as_text(value)
        if text is None:
            return translated(_STRING_TYPE, "string_type")
        if self.predicate(text):
            return None
        return self.fail(self.template, self.name)


def string_rule(predicate: Callable[[str], bool], message: str, *, name: str = "") -> StringRule:
    """Build a StringRule with a fixed message."""
    return StringRule(predicate, name, message)


def string_rule_with_error(predicate: Callable[[str], bool], err: Error) -> StringRule:
    return StringRule(predicate, err=err)


@dataclass(frozen=True, slots=True)
class IntRule(MessageRule):
    """Rule from an ``int -> bool`` predicate."""
    predicate: Callable[[int], bool] = field(default=lambda n: True)
    name: str = ""
    message: str = ""

    @property
    def template(self) -> Error:
        if self.err is not None:
            return self.err
        return Error(f"validation_is_{self.name}" if self.name else "", self.message)

    def validate(self, value: Any) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        if not _is_int(value):
            return translated(_INT_TYPE, "int_type")
        if self.predicate(int(value)):
            return None
        return self.fail(self.template, self.name)


# ============================================================================
# Collections
# ============================================================================

_NOT_ITERABLE = Error("validation_each_not_iterable", "must be an iterable (map, slice or array)")


def _elements(value: Any) -> Iterator[tuple[str, Any]] | None:
    if isinstance(value, Mapping):
        return ((str(k), v) for k, v in value.items())
    if isinstance(value, (list, tuple, Set, range)):
        return ((str(i), v) for i, v in enumerate(value))
    return None


class _EachBase(RuleWithContext):
    __slots__ = ("rules",)
    stop_at_first: ClassVar[bool] = False

    def __init__(self, *rules: Rule) -> None:
        self.rules = rules

    def validate(self, value: Any) -> Exception | None:
        from .engine import validate
        return self._each(value, lambda element: validate(element, *self.rules))

    def validate_with_context(self, ctx: Context, value: Any) -> Exception | None:
        from .engine import validate_with_context
        return self._each(value, lambda element: validate_with_context(ctx, element, *self.rules))

    def _each(self, value: Any, check: Callable[[Any], Exception | None]) -> Exception | None:
        value, is_nil = indirect(value)
        if is_nil or is_empty(value):
            return None
        elements: Iterable[tuple[str, Any]] | None = _elements(value)
        if elements is None:
            return translated(_NOT_ITERABLE, "each_iterable")
        errs = Errors()
        for key, element in elements:
            error = check(element)
            if error is None:
                continue
            if isinstance(error, InternalError):
                return error
            errs[key] = error
            if self.stop_at_first:
                break
        return errs if errs else None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(r) for r in self.rules)})"


class Each(_EachBase):
    """Validate every element (or mapping value) against the rules."""


class EachUntilFirstError(_EachBase):
    """Like Each, but stops at the first element that fails."""
    stop_at_first = True
