"""Struct validation facade.

    f = fields_of(order)
    err = validate_struct(order,
        Field(f.id, Required),
        Field(f.email, Required, Email),
        Field(f.address),            # nested: runs Address.validate()
    )

Per field, in the order given: resolve the field and run its rules through
the engine. Once the rules pass, the engine descends into the value (unless
the rules contained Skip or the value is nil), so nested self-validating
objects are reached. Errors are keyed by display name. A resolution failure
is a configuration defect and aborts the whole call with an InternalError.
"""
from __future__ import annotations

from typing import Any, Iterable

from rulebook.errors import Errors, InternalError
from rulebook.errors import builders

from .context import Context
from .engine import validate, validate_with_context
from .fields import field_name, is_struct, resolve_field
from .rules import Rule, indirect


class Field:
    """Association of one field reference with an ordered rule list."""
    __slots__ = ("ref", "rules")

    def __init__(self, ref: Any, *rules: Rule) -> None:
        self.ref = ref
        self.rules = rules

    def __repr__(self) -> str:
        return f"Field({self.ref!r}, {len(self.rules)} rules)"


def validate_struct(obj: Any, *fields: Field) -> Exception | None:
    """Validate fields of a dataclass, pydantic model or attribute object."""
    return _validate_struct(None, obj, fields)


def validate_struct_with_context(ctx: Context, obj: Any, *fields: Field) -> Exception | None:
    """Context-aware validate_struct()."""
    return _validate_struct(ctx, obj, fields)


def _validate_struct(ctx: Context | None, obj: Any, fields: Iterable[Field]) -> Exception | None:
    obj, is_nil = indirect(obj)
    if is_nil:
        return None
    if not is_struct(obj):
        return builders.struct_target(obj)

    errs = Errors()
    for index, spec in enumerate(fields):
        resolved = resolve_field(obj, spec.ref, index)
        if isinstance(resolved, InternalError):
            return resolved

        # the engine itself descends into the value unless Skip fired or it is nil
        error = _run(ctx, resolved.value, spec.rules)
        if error is None:
            continue
        if isinstance(error, InternalError):
            return error
        errs[resolved.display_name] = error
    return errs if errs else None


def _run(ctx: Context | None, value: Any, rules: tuple[Rule, ...]) -> Exception | None:
    if ctx is None:
        return validate(value, *rules)
    return validate_with_context(ctx, value, *rules)


# ============================================================================
# Selective (allow-list) mode
# ============================================================================

class StructRules:
    """Reusable field -> rules table with optional per-call allow-listing.

        rules = StructRules().add("name", Required).add("email", Email)
        rules.validate(user, "email")     # only email is checked

    Field references bound with fields_of() are accepted as well as names,
    but a reference only resolves against the object it was taken from.
    """

    def __init__(self) -> None:
        self._fields: list[Field] = []

    def add(self, ref: Any, *rules: Rule) -> StructRules:
        self._fields.append(Field(ref, *rules))
        return self

    def fields(self, *attrs: str) -> list[Field]:
        if not attrs:
            return list(self._fields)
        allowed = set(attrs)
        return [f for f in self._fields if field_name(f.ref) in allowed]

    def validate(self, obj: Any, *attrs: str) -> Exception | None:
        """Validate only ``attrs`` (all registered fields when none given)."""
        return validate_struct(obj, *self.fields(*attrs))

    def validate_with_context(self, ctx: Context, obj: Any, *attrs: str) -> Exception | None:
        return validate_struct_with_context(ctx, obj, *self.fields(*attrs))
