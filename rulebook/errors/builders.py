"""Error Builders

Ergonomic constructors for the internal error kinds and for coded
validation errors. Internal errors are logged here, once, at the point
where the defect is detected.
"""
from typing import Any

from rulebook.logging import engine_logger

from .types import (
    ContextCancelledError,
    Error,
    FieldNotFoundError,
    FieldOwnerError,
    FieldReferenceError,
    InternalError,
    KeyNotFoundError,
    KeyWrongTypeError,
    MaxDepthExceededError,
    NotAMapError,
    PrivateFieldError,
    StructTargetError,
)

log = engine_logger()


def _report(error: InternalError, **context: Any) -> InternalError:
    log.warning("internal_validation_error", kind=type(error).__name__, message=error.message, **context)
    return error


# =============================================================================
# Validation errors
# =============================================================================

def coded_error(code: str, message: str, **params: Any) -> Error:
    """Create an Error with params in one call."""
    return Error(code=code, message=message, params=params)


KEY_UNEXPECTED = Error("validation_key_unexpected", "key not expected")


# =============================================================================
# Struct facade
# =============================================================================

def struct_target(value: Any) -> InternalError:
    return _report(StructTargetError(
        "only a struct-like object can be validated"
    ), target=type(value).__name__)


def field_reference(spec: Any) -> InternalError:
    return _report(FieldReferenceError(
        f"field spec must reference a field, got {type(spec).__name__}"
    ))


def field_not_found(index: int, name: str) -> InternalError:
    return _report(FieldNotFoundError(
        f"field #{index} ({name}) cannot be found in the struct"
    ), field=name, index=index)


def field_owner(index: int, name: str) -> InternalError:
    return _report(FieldOwnerError(
        f"field #{index} ({name}) does not belong to the validated object"
    ), field=name, index=index)


def private_field(index: int, name: str) -> InternalError:
    return _report(PrivateFieldError(
        f"field #{index} ({name}) is private and cannot be validated"
    ), field=name, index=index)


# =============================================================================
# Map facade
# =============================================================================

def not_a_map(value: Any) -> InternalError:
    return _report(NotAMapError(
        "only a map can be validated"
    ), target=type(value).__name__)


def key_wrong_type(key: Any) -> InternalError:
    return _report(KeyWrongTypeError(f"{key}: key not the correct type"), key=str(key))


def key_not_found(key: Any) -> InternalError:
    return _report(KeyNotFoundError(f"{key}: required key is missing"), key=str(key))


# =============================================================================
# Engine guards
# =============================================================================

def context_cancelled(cause: Exception) -> InternalError:
    return _report(ContextCancelledError(f"validation aborted: {cause}", cause))


def max_depth_exceeded(limit: int) -> InternalError:
    return _report(MaxDepthExceededError(
        f"validation recursion exceeded the maximum depth of {limit}"
    ), max_depth=limit)
