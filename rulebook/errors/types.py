"""Validation Error Types

Data-level failures and configuration defects are kept strictly apart:

- ValidationFailure: expected, user-facing outcome of a rule (Error) or of an
  aggregate (Errors). Always returned, never logged.
- InternalError: the validation call itself was set up wrong (bad field
  reference, wrong key type, non-struct target...). Returned immediately,
  never merged into an Errors set.

Translation passes return Result values (Ok/Err) so that a failing
translator surfaces as a value, not a traceback.
"""
from __future__ import annotations

import json
import re
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Generic, NoReturn, Protocol, TypeVar, Union, final, runtime_checkable

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")

_PLACEHOLDER = re.compile(r"\{(\w+)\}")
_ERROR_FIELDS = frozenset({"code", "message", "params"})


class ValidationFailure(Exception):
    """Base class for data-level validation failures."""

    def render(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.render()


# ============================================================================
# Leaf error
# ============================================================================

@dataclass(eq=True, unsafe_hash=True)
class Error(ValidationFailure):
    """A single validation error: machine code, message template, params.

    The message may contain ``{name}`` placeholders filled from params at
    render time. Every setter returns a new Error, so the template stored on
    a rule is never changed by callers holding a returned error.

    Only the three fields are read-only. The exception machinery still sets
    ``__traceback__`` and friends when an Error is raised.
    """
    code: str = ""
    message: str = ""
    params: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _ERROR_FIELDS and name in self.__dict__:
            raise AttributeError(f"Error.{name} is read-only, use with_{name}()")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if name in _ERROR_FIELDS:
            raise AttributeError(f"Error.{name} is read-only")
        super().__delattr__(name)

    def with_code(self, code: str) -> Error: return replace(self, code=code)

    def with_message(self, message: str) -> Error: return replace(self, message=message)

    def with_params(self, params: Mapping[str, Any] | None = None, **kwargs: Any) -> Error:
        return replace(self, params={**(params or {}), **kwargs})

    def render(self) -> str:
        """Substitute params into the message.

        Placeholders without a matching param are left as literal text, so
        rendering never raises.
        """
        if not self.params:
            return self.message
        return _PLACEHOLDER.sub(
            lambda m: str(self.params[m.group(1)]) if m.group(1) in self.params else m.group(0),
            self.message,
        )

    def translate(self, translator: Translator) -> Result[str, TranslationError]:
        """Translate this error with a single-field translator call."""
        try:
            return Ok(translator.translate_single(self))
        except Exception as e:
            return Err(TranslationError("", self, e))

    def __str__(self) -> str:
        return self.render()


def new_error(code: str, message: str) -> Error:
    """Create an Error with the given code and message template."""
    return Error(code=code, message=message)


# ============================================================================
# Keyed error set
# ============================================================================

class Errors(ValidationFailure, MutableMapping):
    """Validation errors indexed by field name, map key or list index.

    Values are leaf errors, nested Errors, or None (placeholders removed by
    filter()). Rendering is sorted by key regardless of insertion order:

        >>> str(Errors({"B": new_error("", "b"), "A": new_error("", "a")}))
        'A: a; B: b.'
    """

    def __init__(self, entries: Mapping[str, Exception | None] | None = None, **kwargs: Exception | None) -> None:
        super().__init__()
        self._entries: dict[str, Exception | None] = {**(entries or {}), **kwargs}

    def __getitem__(self, key: str) -> Exception | None: return self._entries[key]

    def __setitem__(self, key: str, value: Exception | None) -> None: self._entries[key] = value

    def __delitem__(self, key: str) -> None: del self._entries[key]

    def __iter__(self) -> Iterator[str]: return iter(self._entries)

    def __len__(self) -> int: return len(self._entries)

    def __repr__(self) -> str: return f"Errors({self._entries!r})"

    def __bool__(self) -> bool: return bool(self._entries)

    def render(self) -> str:
        if not self._entries:
            return ""
        parts = []
        for key in sorted(self._entries):
            value = self._entries[key]
            if isinstance(value, Errors):
                parts.append(f"{key}: ({value.render()})")
            else:
                parts.append(f"{key}: {value}")
        return "; ".join(parts) + "."

    def filter(self) -> Errors | None:
        """Drop None entries in place; return None when nothing is left."""
        for key in [k for k, v in self._entries.items() if v is None]:
            del self._entries[key]
        return self if self._entries else None

    def to_dict(self) -> dict[str, Any]:
        """Nested document form: leaf errors become rendered strings."""
        doc: dict[str, Any] = {}
        for key, value in self._entries.items():
            if value is None:
                continue
            doc[key] = value.to_dict() if isinstance(value, Errors) else str(value)
        return doc

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def translate(self, translator: Translator) -> Result[dict[str, Any], TranslationError]:
        """Translate every leaf error, failing fast on the first failure."""
        doc: dict[str, Any] = {}
        for key, value in self._entries.items():
            if isinstance(value, Errors):
                match value.translate(translator):
                    case Ok(nested):
                        doc[key] = nested
                    case Err(e):
                        return Err(e)
            elif isinstance(value, Error):
                try:
                    doc[key] = translator.translate_field(key, value)
                except Exception as e:
                    return Err(TranslationError(key, value, e))
            elif value is not None:
                doc[key] = str(value)
        return Ok(doc)


def translate_error(translator: Translator, error: Exception) -> Result[Any, TranslationError]:
    """Translate an engine result: Errors, a single Error, or anything else as-is."""
    if isinstance(error, (Errors, Error)):
        return error.translate(translator)
    return Ok(str(error))


@runtime_checkable
class Translator(Protocol):
    """Capability used by the translation pass.

    Either method may raise; the failure is returned as a TranslationError.
    """

    def translate_field(self, key: str, error: Error) -> str: ...

    def translate_single(self, error: Error) -> str: ...


class TranslationError(Exception):
    """A translator failed on one entry; no partial document is produced."""

    def __init__(self, key: str, error: Error, cause: Exception) -> None:
        super().__init__(f"cannot translate {key or 'error'} ({error.code or error.message}): {cause}")
        self.key = key
        self.error = error
        self.cause = cause


# ============================================================================
# Internal (configuration) errors
# ============================================================================

class InternalError(Exception):
    """Error signalling misuse of the validation call, not invalid data."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def internal_error(self) -> Exception:
        """The underlying cause (self when there is none)."""
        return self.cause or self


class StructTargetError(InternalError):
    """validate_struct was given something that is not a struct-like object."""


class FieldReferenceError(InternalError):
    """A field spec holds neither a field reference nor a field name."""


class FieldNotFoundError(InternalError):
    """A field reference does not name a direct field of the target."""


class FieldOwnerError(InternalError):
    """A field reference was taken from a different object than the target."""


class PrivateFieldError(InternalError):
    """A field reference names a private (underscore) attribute."""


class NotAMapError(InternalError):
    """validate_map was given something that is not a mapping."""


class KeyWrongTypeError(InternalError):
    """A key spec's key cannot be a key of the validated mapping."""


class KeyNotFoundError(InternalError):
    """A key spec names a key absent from the validated mapping."""


class ContextCancelledError(InternalError):
    """The context was cancelled or its deadline passed mid-validation."""


class MaxDepthExceededError(InternalError):
    """Recursion went deeper than the configured maximum."""


# ============================================================================
# Result monad
# ============================================================================

@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def map_err(self, f: Callable[[Any], F]) -> Ok[T]:
        return self

    def and_then(self, f: Callable[[T], Result[U, Any]]) -> Result[U, Any]:
        return f(self.value)

    def match(self, ok: Callable[[T], U], err: Callable[[Any], U]) -> U:
        """Pattern match on Result. Forces exhaustive handling."""
        return ok(self.value)


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[Any], U]) -> Err[E]:
        return self

    def map_err(self, f: Callable[[E], F]) -> Err[F]:
        return Err(f(self.error))

    def and_then(self, f: Callable[[Any], Result[U, E]]) -> Err[E]:
        return self

    def match(self, ok: Callable[[Any], U], err: Callable[[E], U]) -> U:
        """Pattern match on Result. Forces exhaustive handling."""
        return err(self.error)


Result = Union[Ok[T], Err[E]]
