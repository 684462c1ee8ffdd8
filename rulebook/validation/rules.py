"""Rule Protocol

Every rule is an immutable value with a single operation:

    rule.validate(value) -> Exception | None

Context-aware rules additionally implement
``validate_with_context(ctx, value)``; used outside a context they run
against ``Context.background()``.

Conventions shared by all rules:
- Empty values (None, "", 0, False, empty containers, dead weak refs) are
  valid. Presence is opt-in through Required / NotNil / Nil / Empty.
- Configuration methods (.error(), .error_object(), .when(), .else_())
  return new rule instances. Shared defaults such as ``Required`` are never
  modified.
- Messages are looked up in the translation table at failure time, unless
  a custom message or error object was configured.
"""
from __future__ import annotations

import copy
import numbers
import weakref
from abc import ABC, abstractmethod
from collections.abc import Sized
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar

from rulebook.errors import Error

from .context import Context
from .messages import get_language, resolve_message

Condition = bool | Callable[[], bool]


# ============================================================================
# Value helpers
# ============================================================================

def indirect(value: Any) -> tuple[Any, bool]:
    """Unwrap weak references. Returns (value, is_nil)."""
    while isinstance(value, weakref.ReferenceType):
        value = value()
        if value is None:
            return None, True
    return value, value is None


def is_empty(value: Any) -> bool:
    """Zero value check shared by all rules.

    None, dead weak refs, False, numeric zero and zero-length values are
    empty. Live weak refs are empty when their referent is.
    """
    value, is_nil = indirect(value)
    if is_nil:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, numbers.Number):
        return value == 0
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def holds(condition: Condition) -> bool:
    """Evaluate a rule condition at validate time."""
    return bool(condition()) if callable(condition) else bool(condition)


def translated(default: Error, key: str, **params: Any) -> Error:
    """Error with its message looked up under ``key`` in the current language."""
    return Error(default.code, resolve_message(get_language(), key, default.message), params)


# ============================================================================
# Base classes
# ============================================================================

class Rule(ABC):
    """Base class for all rules."""

    @abstractmethod
    def validate(self, value: Any) -> Exception | None:
        """Return None when the value passes, the failure otherwise."""

    def __call__(self, value: Any) -> Exception | None: return self.validate(value)

    def _evolve(self, **changes: Any):
        """Shallow copy with some attributes changed; the original is untouched."""
        clone = copy.copy(self)
        for name, value in changes.items():
            object.__setattr__(clone, name, value)
        return clone


class RuleWithContext(Rule):
    """Rule that receives the ambient validation context."""

    @abstractmethod
    def validate_with_context(self, ctx: Context, value: Any) -> Exception | None:
        """Context-aware counterpart of validate()."""

    def validate(self, value: Any) -> Exception | None:
        return self.validate_with_context(Context.background(), value)


@dataclass(frozen=True, slots=True)
class MessageRule(Rule):
    """Rule producing a coded Error with a translatable message.

    ``key`` names the translation table entry; ``default_error`` carries the
    code and the English fallback. A configured ``err`` replaces both and is
    used verbatim.
    """
    key: ClassVar[str] = ""
    default_error: ClassVar[Error] = Error()

    err: Error | None = field(default=None, kw_only=True)

    def error(self, message: str) -> MessageRule:
        """Copy of this rule with a custom message (code is preserved)."""
        return self._evolve(err=self.template.with_message(message))

    def error_object(self, err: Error) -> MessageRule:
        """Copy of this rule failing with the given Error."""
        return self._evolve(err=err)

    @property
    def template(self) -> Error:
        return self.err if self.err is not None else self.default_error

    def fail(self, default: Error | None = None, key: str | None = None, **params: Any) -> Error:
        """Build the failure for this rule, translated unless customised."""
        if self.err is not None:
            return self.err.with_params(params) if params else self.err
        return translated(default if default is not None else self.default_error, key or self.key, **params)


# ============================================================================
# Presence rules
# ============================================================================

@dataclass(frozen=True, slots=True)
class RequiredRule(MessageRule):
    """Value must not be empty. With skip_nil, None is accepted."""
    default_error: ClassVar[Error] = Error("validation_required", "cannot be blank")

    skip_nil: bool = False
    condition: Condition = True

    def when(self, condition: Condition) -> RequiredRule: return self._evolve(condition=condition)

    def validate(self, value: Any) -> Exception | None:
        if not holds(self.condition):
            return None
        value, is_nil = indirect(value)
        if self.skip_nil and is_nil:
            return None
        if is_nil or is_empty(value):
            if self.skip_nil:
                return self.fail(Error("validation_nil_or_not_empty_required", "cannot be blank"),
                                 key="nil_or_not_empty")
            return self.fail(key="required")
        return None


@dataclass(frozen=True, slots=True)
class NotNilRule(MessageRule):
    """Value must not be None (or a dead weak reference)."""
    key: ClassVar[str] = "not_nil"
    default_error: ClassVar[Error] = Error("validation_not_nil_required", "is required")

    condition: Condition = True

    def when(self, condition: Condition) -> NotNilRule: return self._evolve(condition=condition)

    def validate(self, value: Any) -> Exception | None:
        if not holds(self.condition):
            return None
        _, is_nil = indirect(value)
        return self.fail() if is_nil else None


@dataclass(frozen=True, slots=True)
class AbsentRule(MessageRule):
    """Value must be None; with skip_nil, any empty value is accepted."""
    default_error: ClassVar[Error] = Error("validation_nil", "must be blank")

    skip_nil: bool = False
    condition: Condition = True

    def when(self, condition: Condition) -> AbsentRule: return self._evolve(condition=condition)

    def validate(self, value: Any) -> Exception | None:
        if not holds(self.condition):
            return None
        value, is_nil = indirect(value)
        if is_nil or (self.skip_nil and is_empty(value)):
            return None
        if self.skip_nil:
            return self.fail(Error("validation_empty", "must be blank"), key="empty")
        return self.fail(key="nil")


Required = RequiredRule()
NilOrNotEmpty = RequiredRule(skip_nil=True)
NotNil = NotNilRule()
Nil = AbsentRule()
Empty = AbsentRule(skip_nil=True)


# ============================================================================
# Control flow rules
# ============================================================================

@dataclass(frozen=True, slots=True)
class SkipRule(Rule):
    """Stops a rule list and suppresses nested validation when active."""
    skip: Condition = True

    def when(self, condition: Condition) -> SkipRule: return self._evolve(skip=condition)

    def is_active(self) -> bool: return holds(self.skip)

    def validate(self, value: Any) -> Exception | None:
        return None


Skip = SkipRule()


class When(RuleWithContext):
    """Run ``rules`` when the condition holds, ``else_rules`` otherwise.

    The condition may be a bool or a zero-argument callable; callables are
    evaluated on every validation, not at construction.
    """
    __slots__ = ("condition", "rules", "else_rules")

    def __init__(self, condition: Condition, *rules: Rule, else_rules: tuple[Rule, ...] = ()) -> None:
        self.condition = condition
        self.rules = rules
        self.else_rules = tuple(else_rules)

    def else_(self, *rules: Rule) -> When:
        return When(self.condition, *self.rules, else_rules=rules)

    def branch(self) -> tuple[Rule, ...]:
        return self.rules if holds(self.condition) else self.else_rules

    def validate(self, value: Any) -> Exception | None:
        from .engine import validate
        return validate(value, *self.branch())

    def validate_with_context(self, ctx: Context, value: Any) -> Exception | None:
        from .engine import validate_with_context
        return validate_with_context(ctx, value, *self.branch())

    def __repr__(self) -> str:
        return f"When({self.condition!r}, rules={len(self.rules)}, else_rules={len(self.else_rules)})"


# ============================================================================
# Function-backed rules
# ============================================================================

def _as_failure(result: Exception | str | None) -> Exception | None:
    if result is None or result == "":
        return None
    if isinstance(result, str):
        return Error("", result)
    return result


@dataclass(frozen=True, slots=True)
class By(Rule):
    """Rule from a function returning an error (or message) or None."""
    func: Callable[[Any], Exception | str | None]

    def validate(self, value: Any) -> Exception | None:
        return _as_failure(self.func(value))


@dataclass(frozen=True, slots=True)
class ByWithContext(RuleWithContext):
    """Context-aware rule from a function ``(ctx, value)``."""
    func: Callable[[Context, Any], Exception | str | None]

    def validate(self, value: Any) -> Exception | None:
        return self.validate_with_context(Context.background(), value)

    def validate_with_context(self, ctx: Context, value: Any) -> Exception | None:
        return _as_failure(self.func(ctx, value))
