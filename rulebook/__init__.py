"""rulebook: composable, rule-based validation for Python values.

    from rulebook import Field, Required, Length, fields_of, validate_struct

See ``rulebook.validation`` for the rule catalogue and ``rulebook.errors``
for the error model.
"""
__version__ = "0.1.0"

from rulebook.errors import (  # noqa: E402
    Error,
    Errors,
    InternalError,
    TranslationError,
    Translator,
    ValidationFailure,
    new_error,
)
from rulebook.validation import *  # noqa: E402,F401,F403
from rulebook.validation import __all__ as _validation_all  # noqa: E402

__all__ = [
    "__version__",
    "Error",
    "Errors",
    "InternalError",
    "TranslationError",
    "Translator",
    "ValidationFailure",
    "new_error",
    *_validation_all,
]
