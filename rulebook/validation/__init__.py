"""Validation Engine

Rule-list validation for arbitrary values with nested, keyed error reports.

Architecture:
- rules.py: Rule protocol, presence rules, Skip, When, By
- validators.py: Length, In, Match, Range, Date, Each, ... predicate rules
- formats.py: ready-made string format rules (Email, URL, IP, UUID, ...)
- engine.py: validate / validate_with_context dispatch and recursion
- fields.py, structs.py: typed field references and the struct facade
- maps.py: key specs and the map facade
- messages.py: process-wide translation table
- context.py: cancellable context for context-aware rules

Usage:
    from rulebook.validation import Field, Length, Required, fields_of, validate, validate_struct
    from rulebook.validation.formats import Email

    @dataclass
    class Customer:
        name: str
        email: str

        def validate(self):
            f = fields_of(self)
            return validate_struct(self,
                Field(f.name, Required, Length(1, 80)),
                Field(f.email, Required, Email),
            )

    err = validate([Customer("", "x")])
    # str(err) == "0: (email: must be a valid email address; name: cannot be blank.)."
"""
from .context import Cancelled, Context, DeadlineExceeded
from .rules import (
    # Protocol
    Rule,
    RuleWithContext,
    MessageRule,
    # Helpers
    indirect,
    is_empty,
    # Presence
    RequiredRule,
    NotNilRule,
    AbsentRule,
    Required,
    NilOrNotEmpty,
    NotNil,
    Nil,
    Empty,
    # Control flow
    SkipRule,
    Skip,
    When,
    By,
    ByWithContext,
)
from .validators import (
    Length,
    ExactLength,
    RuneLength,
    In,
    NotIn,
    Match,
    Range,
    MultipleOf,
    Date,
    StringRule,
    IntRule,
    string_rule,
    string_rule_with_error,
    Each,
    EachUntilFirstError,
)
from .engine import (
    validate,
    validate_with_context,
    as_result,
    raise_if_invalid,
    is_validatable,
    is_validatable_with_context,
)
from .fields import FieldRef, fields_of
from .structs import Field, StructRules, validate_struct, validate_struct_with_context
from .maps import Key, Map, validate_map, validate_map_with_context
from .messages import (
    EN_LANG,
    get_language,
    set_language,
    add_rule_translation,
    register_translation,
    add_lang,
    remove_lang,
    translations,
    load_translations,
    resolve_message,
    msg,
    msg_with_default,
)

__all__ = [
    # Context
    "Context",
    "Cancelled",
    "DeadlineExceeded",
    # Protocol
    "Rule",
    "RuleWithContext",
    "MessageRule",
    "indirect",
    "is_empty",
    # Presence
    "RequiredRule",
    "NotNilRule",
    "AbsentRule",
    "Required",
    "NilOrNotEmpty",
    "NotNil",
    "Nil",
    "Empty",
    # Control flow
    "SkipRule",
    "Skip",
    "When",
    "By",
    "ByWithContext",
    # Predicate rules
    "Length",
    "ExactLength",
    "RuneLength",
    "In",
    "NotIn",
    "Match",
    "Range",
    "MultipleOf",
    "Date",
    "StringRule",
    "IntRule",
    "string_rule",
    "string_rule_with_error",
    "Each",
    "EachUntilFirstError",
    # Engine
    "validate",
    "validate_with_context",
    "as_result",
    "raise_if_invalid",
    "is_validatable",
    "is_validatable_with_context",
    # Facades
    "FieldRef",
    "fields_of",
    "Field",
    "StructRules",
    "validate_struct",
    "validate_struct_with_context",
    "Key",
    "Map",
    "validate_map",
    "validate_map_with_context",
    # Messages
    "EN_LANG",
    "get_language",
    "set_language",
    "add_rule_translation",
    "register_translation",
    "add_lang",
    "remove_lang",
    "translations",
    "load_translations",
    "resolve_message",
    "msg",
    "msg_with_default",
]
