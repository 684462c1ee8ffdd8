"""Field references and struct field resolution.

Fields are identified by *where they were taken from*, not just by name:

    f = fields_of(user)
    validate_struct(user, Field(f.email, Required), Field(f.address))

``f.email`` is a FieldRef bound to ``user`` itself. A reference taken
from another object (an embedded value that happens to share field names
with its container, say) is rejected instead of silently resolving to the
container's same-named field. Plain string names are accepted too.
"""
from __future__ import annotations

import dataclasses
import numbers
from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple

from pydantic import BaseModel

from rulebook.config import get_settings
from rulebook.errors import InternalError
from rulebook.errors import builders


class FieldRef:
    """Typed reference to a field path on a specific owner object."""
    __slots__ = ("_owner", "_path")

    def __init__(self, owner: Any, path: tuple[str, ...]) -> None:
        object.__setattr__(self, "_owner", owner)
        object.__setattr__(self, "_path", path)

    def __getattr__(self, name: str) -> FieldRef:
        if name.startswith("__"):
            raise AttributeError(name)
        return FieldRef(self._owner, self._path + (name,))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("field references are read-only")

    def __repr__(self) -> str:
        return f"<field {type(self._owner).__name__}.{'.'.join(self._path)}>"


class _FieldSource:
    __slots__ = ("_owner",)

    def __init__(self, owner: Any) -> None:
        object.__setattr__(self, "_owner", owner)

    def __getattr__(self, name: str) -> FieldRef:
        if name.startswith("__"):
            raise AttributeError(name)
        return FieldRef(self._owner, (name,))

    def __repr__(self) -> str:
        return f"fields_of({type(self._owner).__name__})"


def fields_of(owner: Any) -> Any:
    """Proxy whose attributes are FieldRefs bound to ``owner``."""
    return _FieldSource(owner)


class ResolvedField(NamedTuple):
    name: str
    display_name: str
    value: Any


# ============================================================================
# Struct introspection
# ============================================================================

def is_struct(value: Any) -> bool:
    """Dataclass instances, pydantic models and plain attribute objects."""
    if isinstance(value, type):
        return False
    if dataclasses.is_dataclass(value) or isinstance(value, BaseModel):
        return True
    if isinstance(value, (str, bytes, bytearray, numbers.Number, Mapping, Iterable)):
        return False
    return hasattr(value, "__dict__") or bool(_slot_names(type(value)))


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        names.extend([slots] if isinstance(slots, str) else slots)
    return [n for n in names if n not in ("__dict__", "__weakref__")]


def _tag_name(tag: Any, default: str) -> str:
    # "name,omitempty" style tags keep only the name; "" means no override
    name = str(tag).split(",", 1)[0] if tag is not None else ""
    return name or default


def declared_fields(obj: Any) -> dict[str, str]:
    """Map of field name -> display name for a struct-like object."""
    if dataclasses.is_dataclass(obj):
        tag = get_settings().ERROR_TAG
        return {f.name: _tag_name(f.metadata.get(tag), f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, BaseModel):
        return {name: _tag_name(info.alias, name) for name, info in type(obj).model_fields.items()}
    names = list(vars(obj)) if hasattr(obj, "__dict__") else []
    names.extend(n for n in _slot_names(type(obj)) if n not in names and hasattr(obj, n))
    return {name: name for name in names}


def resolve_field(obj: Any, spec: Any, index: int) -> ResolvedField | InternalError:
    """Resolve a field spec (FieldRef or name) against ``obj``."""
    if isinstance(spec, FieldRef):
        owner, path = object.__getattribute__(spec, "_owner"), object.__getattribute__(spec, "_path")
        dotted = ".".join(path)
        if owner is not obj:
            return builders.field_owner(index, dotted)
        if len(path) != 1:
            return builders.field_not_found(index, dotted)
        name = path[0]
    elif isinstance(spec, str):
        name = spec
    else:
        return builders.field_reference(spec)

    if name.startswith("_"):
        return builders.private_field(index, name)
    declared = declared_fields(obj)
    if name not in declared:
        return builders.field_not_found(index, name)
    return ResolvedField(name, declared[name], getattr(obj, name))


def field_name(spec: Any) -> str | None:
    """Bare field name of a spec, for allow-list matching."""
    if isinstance(spec, FieldRef):
        return ".".join(object.__getattribute__(spec, "_path"))
    if isinstance(spec, str):
        return spec
    return None
