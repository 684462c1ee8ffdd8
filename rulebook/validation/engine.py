"""Dispatch Engine

Decides, for any runtime value, which rules run, whether to recurse into
nested values, and how nested failures are keyed:

    validate(value, *rules)
      1. rules run in order; an active Skip stops the list (no recursion),
         the first failure is returned and the remaining rules never run
      2. None / dead weak reference          -> valid
      3. value has its own validate()        -> its result
      4. mapping                             -> per-entry, keyed by str(key)
      5. list / tuple                        -> per-index, keyed by "0", "1", ...
      6. live weak reference                 -> unwrap, validate the referent
      7. anything else                       -> valid

Only elements that are themselves self-validating take part in step 4/5.
Self-validation (3) and generic collection recursion (4/5) are exclusive.

validate_with_context() mirrors this, prefers the context-aware variant of
both rules and values, and checks for cancellation before each rule and
before each recursive descent.
"""
from __future__ import annotations

import inspect
import weakref
from collections.abc import Iterable, Mapping, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Iterator

from rulebook.config import get_settings
from rulebook.errors import Err, Errors, InternalError, Ok, Result
from rulebook.errors import builders

from .context import Context
from .rules import Rule, RuleWithContext, SkipRule

_depth: ContextVar[int] = ContextVar("rulebook_validation_depth", default=0)

_NOT_ITERATED = (str, bytes, bytearray, memoryview)


# ============================================================================
# Public API
# ============================================================================

def validate(value: Any, *rules: Rule) -> Exception | None:
    """Validate a value against rules, then against its own validation.

    Returns None when valid, otherwise the failure (Error, Errors, any
    exception returned by a rule, or an InternalError).
    """
    with _nested() as exceeded:
        if exceeded is not None:
            return exceeded
        return _run(None, value, rules)


def validate_with_context(ctx: Context, value: Any, *rules: Rule) -> Exception | None:
    """Context-aware validate()."""
    with _nested() as exceeded:
        if exceeded is not None:
            return exceeded
        return _run(ctx, value, rules)


def as_result(error: Exception | None) -> Result[None, Exception]:
    """Wrap an engine outcome as Ok(None) or Err(error)."""
    return Ok(None) if error is None else Err(error)


def raise_if_invalid(error: Exception | None) -> None:
    """Raise the engine outcome for callers that prefer exceptions."""
    if error is not None:
        raise error


# ============================================================================
# Capability detection
# ============================================================================

def _required_positionals(method: Callable[..., Any]) -> int | None:
    try:
        params = inspect.signature(method).parameters.values()
    except (TypeError, ValueError):
        return None
    return sum(
        1 for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty
    )


def capability(value: Any, name: str, arity: int) -> Callable[..., Any] | None:
    """Return value's own bound ``name`` method if it takes ``arity`` args.

    Rules, classes and methods bound to something other than the value
    (classmethods such as pydantic's legacy ``validate``) do not count.
    """
    if value is None or isinstance(value, (Rule, type)):
        return None
    method = getattr(value, name, None)
    if not inspect.ismethod(method) or method.__self__ is not value:
        return None
    return method if _required_positionals(method) == arity else None


def is_validatable(value: Any) -> bool:
    return capability(value, "validate", 0) is not None


def is_validatable_with_context(value: Any) -> bool:
    return capability(value, "validate_with_context", 1) is not None


# ============================================================================
# Dispatch
# ============================================================================

@contextmanager
def _nested() -> Iterator[InternalError | None]:
    depth = _depth.get() + 1
    token = _depth.set(depth)
    try:
        limit = get_settings().MAX_DEPTH
        yield builders.max_depth_exceeded(limit) if depth > limit else None
    finally:
        _depth.reset(token)


def _settle(error: Exception | None) -> Exception | None:
    if isinstance(error, Errors) and not error:
        return None
    return error


def _cancelled(ctx: Context | None) -> InternalError | None:
    if ctx is None:
        return None
    cause = ctx.err()
    return builders.context_cancelled(cause) if cause is not None else None


def _run(ctx: Context | None, value: Any, rules: Iterable[Rule]) -> Exception | None:
    for rule in rules:
        if (stop := _cancelled(ctx)) is not None:
            return stop
        if isinstance(rule, SkipRule) and rule.is_active():
            return None
        if ctx is not None and isinstance(rule, RuleWithContext):
            error = rule.validate_with_context(ctx, value)
        else:
            error = rule.validate(value)
        if (error := _settle(error)) is not None:
            return error
    return _recurse(ctx, value)


def _recurse(ctx: Context | None, value: Any) -> Exception | None:
    if value is None:
        return None

    if (stop := _cancelled(ctx)) is not None:
        return stop

    if isinstance(value, weakref.ReferenceType):
        target = value()
        if target is None:
            return None
        return validate(target) if ctx is None else validate_with_context(ctx, target)

    if (own := _own_validation(ctx, value)) is not None:
        return _settle(own())

    if isinstance(value, Mapping):
        return _validate_entries(ctx, ((str(k), v) for k, v in value.items()))
    if isinstance(value, Sequence) and not isinstance(value, _NOT_ITERATED):
        return _validate_entries(ctx, ((str(i), v) for i, v in enumerate(value)))
    return None


def _own_validation(ctx: Context | None, value: Any) -> Callable[[], Exception | None] | None:
    """The value's own validation, context-aware variant first."""
    if ctx is not None:
        method = capability(value, "validate_with_context", 1)
        if method is not None:
            return lambda: method(ctx)
    method = capability(value, "validate", 0)
    return method


def _validate_entries(ctx: Context | None, entries: Iterable[tuple[str, Any]]) -> Exception | None:
    errs = Errors()
    for key, element in entries:
        if (stop := _cancelled(ctx)) is not None:
            return stop
        while isinstance(element, weakref.ReferenceType):
            element = element()
        if element is None:
            continue
        own = _own_validation(ctx, element)
        if own is None:
            continue
        with _nested() as exceeded:
            error = exceeded if exceeded is not None else _settle(own())
        if error is None:
            continue
        if isinstance(error, InternalError):
            return error
        errs[key] = error
    return errs if errs else None
