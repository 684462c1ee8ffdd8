"""Map validation facade.

    err = validate_map(payload,
        Key("name", Required, Length(5, 20)),
        Key("email", Required, Email),
        exhaustive=True,                 # flag keys not listed above
    )

Keys are looked up by equality. A key of the wrong type or one missing
from the mapping is a configuration defect (InternalError), not a data
error. Extra keys are tolerated unless exhaustive checking is requested,
in which case each one yields "key not expected" under its own name.
"""
from __future__ import annotations

from collections.abc import Hashable, Mapping
from typing import Any, Iterable

from rulebook.errors import Errors, InternalError
from rulebook.errors import builders

from .context import Context
from .engine import validate, validate_with_context
from .rules import Rule, RuleWithContext, indirect, translated


class Key:
    """Association of one map key with an ordered rule list."""
    __slots__ = ("key", "rules")

    def __init__(self, key: Any, *rules: Rule) -> None:
        self.key = key
        self.rules = rules

    @property
    def display_name(self) -> str:
        return str(self.key)

    def __repr__(self) -> str:
        return f"Key({self.key!r}, {len(self.rules)} rules)"


def validate_map(mapping: Any, *keys: Key, exhaustive: bool = False) -> Exception | None:
    """Validate the values stored under ``keys``."""
    return _validate_map(None, mapping, keys, exhaustive)


def validate_map_with_context(ctx: Context, mapping: Any, *keys: Key, exhaustive: bool = False) -> Exception | None:
    """Context-aware validate_map()."""
    return _validate_map(ctx, mapping, keys, exhaustive)


def _key_type(mapping: Mapping) -> type | None:
    types = {type(k) for k in mapping}
    return types.pop() if len(types) == 1 else None


def _validate_map(ctx: Context | None, mapping: Any, keys: Iterable[Key], exhaustive: bool) -> Exception | None:
    mapping, is_nil = indirect(mapping)
    if is_nil:
        return None
    if not isinstance(mapping, Mapping):
        return builders.not_a_map(mapping)

    key_type = _key_type(mapping)
    errs = Errors()
    seen: list[Any] = []
    for spec in keys:
        if not isinstance(spec.key, Hashable) or (key_type is not None and not isinstance(spec.key, key_type)):
            return builders.key_wrong_type(spec.key)
        if spec.key not in mapping:
            return builders.key_not_found(spec.key)
        seen.append(spec.key)

        value = mapping[spec.key]
        error = validate(value, *spec.rules) if ctx is None else validate_with_context(ctx, value, *spec.rules)
        if error is None:
            continue
        if isinstance(error, InternalError):
            return error
        errs[spec.display_name] = error

    if exhaustive:
        for extra in mapping:
            if extra not in seen:
                errs[str(extra)] = translated(builders.KEY_UNEXPECTED, "key_unexpected")
    return errs if errs else None


class Map(RuleWithContext):
    """Rule validating a mapping value with key specs.

    Lets maps nest inside rule lists: ``Key("address", Map(Key("city", Required)))``.
    """
    __slots__ = ("keys", "exhaustive_keys")

    def __init__(self, *keys: Key, exhaustive: bool = False) -> None:
        self.keys = keys
        self.exhaustive_keys = exhaustive

    def exhaustive(self) -> Map:
        """Copy that reports keys not covered by the specs."""
        return Map(*self.keys, exhaustive=True)

    def allow_extra_keys(self) -> Map:
        """Copy that tolerates keys not covered by the specs."""
        return Map(*self.keys, exhaustive=False)

    def validate(self, value: Any) -> Exception | None:
        return validate_map(value, *self.keys, exhaustive=self.exhaustive_keys)

    def validate_with_context(self, ctx: Context, value: Any) -> Exception | None:
        return validate_map_with_context(ctx, value, *self.keys, exhaustive=self.exhaustive_keys)

    def __repr__(self) -> str:
        return f"Map({', '.join(repr(k) for k in self.keys)}, exhaustive={self.exhaustive_keys})"
