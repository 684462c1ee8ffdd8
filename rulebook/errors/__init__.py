"""Validation Error Model

Key components:
- Error: coded, templated leaf error with immutable setters
- Errors: keyed set of errors, sorted on render, nestable
- InternalError: configuration defects, never aggregated
- Translator: injectable capability for the translation pass
- Result[T, E]: Ok/Err container returned by translation

Usage:
    from rulebook.errors import Errors, Ok, Err

    match errors.translate(my_translator):
        case Ok(document):
            return document
        case Err(error):
            log.error("translation_failed", key=error.key)
"""
from .types import (
    # Failures
    ValidationFailure,
    Error,
    Errors,
    new_error,
    # Translation
    Translator,
    TranslationError,
    translate_error,
    # Internal errors
    InternalError,
    StructTargetError,
    FieldReferenceError,
    FieldNotFoundError,
    FieldOwnerError,
    PrivateFieldError,
    NotAMapError,
    KeyWrongTypeError,
    KeyNotFoundError,
    ContextCancelledError,
    MaxDepthExceededError,
    # Result
    Result,
    Ok,
    Err,
)

from .builders import coded_error

__all__ = [
    "ValidationFailure",
    "Error",
    "Errors",
    "new_error",
    "coded_error",
    "Translator",
    "TranslationError",
    "translate_error",
    "InternalError",
    "StructTargetError",
    "FieldReferenceError",
    "FieldNotFoundError",
    "FieldOwnerError",
    "PrivateFieldError",
    "NotAMapError",
    "KeyWrongTypeError",
    "KeyNotFoundError",
    "ContextCancelledError",
    "MaxDepthExceededError",
    "Result",
    "Ok",
    "Err",
]
