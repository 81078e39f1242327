#!/usr/bin/env python3
"""
TAML BINDINGS - Typed Object Mapping
------------------------------------
Maps value trees onto dataclasses and back through explicit binding
tables. A type is registered once (decorator or call); registration builds
the key -> field table up front, so loading never searches attributes by
name at runtime.

    @bind
    @dataclass
    class Server:
        host: str = "localhost"
        port: int = 80

    server = loads("host\\texample.org\\nport\\t8080", Server)

Keys match case-insensitively. Unknown keys are ignored; missing keys keep
the dataclass defaults.

Author: TAML Core Team
Date: 2026-10-18
"""

import dataclasses
import types
import typing
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from taml.core.errors import TamlMappingError
from taml.parsing.coercion import render_scalar
from taml.parsing.pipeline import parse, serialize


@dataclass(frozen=True)
class FieldBinding:
    """One row of a binding table."""
    name: str                     # Dataclass field name
    key: str                      # TAML key written on output
    type: Any                     # Resolved annotation
    getter: Callable[[Any], Any]  # Precomputed attribute accessor


@dataclass(frozen=True)
class TypeBinding:
    cls: type
    fields: Tuple[FieldBinding, ...]
    lookup: Dict[str, FieldBinding]  # Lowercased key -> row


class BindingRegistry:
    """
    Holds the binding tables of every registered type.
    Registries are plain objects: callers needing isolation create their own.
    """

    def __init__(self):
        self._bindings: Dict[type, TypeBinding] = {}

    def register(self, cls: type, keys: Optional[Dict[str, str]] = None) -> TypeBinding:
        """
        Builds and stores the binding table for a dataclass.
        `keys` optionally renames fields: {"field_name": "TamlKey"}.
        """
        if not dataclasses.is_dataclass(cls):
            raise TamlMappingError(f"{cls.__name__} is not a dataclass and cannot be bound")

        keys = keys or {}
        hints = typing.get_type_hints(cls)
        rows = []
        lookup: Dict[str, FieldBinding] = {}

        for f in dataclasses.fields(cls):
            if not f.init:
                continue
            row = FieldBinding(
                name=f.name,
                key=keys.get(f.name, f.name),
                type=hints.get(f.name, Any),
                getter=attrgetter(f.name),
            )
            folded = row.key.lower()
            if folded in lookup:
                raise TamlMappingError(
                    f"{cls.__name__}: fields '{lookup[folded].name}' and '{f.name}' "
                    f"both bind to key '{row.key}'")
            lookup[folded] = row
            rows.append(row)

        unknown = set(keys) - {row.name for row in rows}
        if unknown:
            raise TamlMappingError(f"{cls.__name__}: no such field(s) {', '.join(sorted(unknown))}")

        binding = TypeBinding(cls=cls, fields=tuple(rows), lookup=lookup)
        self._bindings[cls] = binding
        return binding

    def is_bound(self, cls: Any) -> bool:
        return isinstance(cls, type) and cls in self._bindings

    def binding_for(self, cls: type) -> TypeBinding:
        try:
            return self._bindings[cls]
        except KeyError:
            raise TamlMappingError(
                f"{getattr(cls, '__name__', cls)} has no binding; register it with bind()") from None

    # ---------------------------------------------------------------
    # Tree -> objects
    # ---------------------------------------------------------------

    def load(self, tree: Any, cls: type, path: str = "$") -> Any:
        binding = self.binding_for(cls)
        if not isinstance(tree, dict):
            raise TamlMappingError(f"{path}: expected an object for {cls.__name__}")

        kwargs = {}
        for key, value in tree.items():
            row = binding.lookup.get(str(key).lower())
            if row is None:
                continue
            kwargs[row.name] = self._convert(value, row.type, f"{path}.{key}")

        try:
            return cls(**kwargs)
        except TypeError as e:
            raise TamlMappingError(f"{path}: cannot build {cls.__name__}: {e}") from e

    def _convert(self, value: Any, target: Any, path: str) -> Any:
        if target is Any:
            return value

        origin = typing.get_origin(target)
        args = typing.get_args(target)

        if origin is Union or origin is getattr(types, "UnionType", None):
            if value is None:
                return None
            options = [a for a in args if a is not type(None)]
            if len(options) == 1:
                return self._convert(value, options[0], path)
            for option in options:
                if isinstance(option, type) and isinstance(value, option):
                    return value
            raise TamlMappingError(f"{path}: cannot choose a type for {value!r} among {target}")

        if value is None:
            return None

        if origin in (list, tuple, set) or target in (list, tuple, set):
            container = origin or target
            if value == {}:
                # An empty parent key reads back as an empty object
                return [] if container is list else container()
            if not isinstance(value, list):
                raise TamlMappingError(f"{path}: expected a list, got {type(value).__name__}")
            item_type = args[0] if args else Any
            items = [self._convert(v, item_type, f"{path}[{i}]") for i, v in enumerate(value)]
            return items if container is list else container(items)

        if origin is dict or target is dict:
            if not isinstance(value, dict):
                raise TamlMappingError(f"{path}: expected an object, got {type(value).__name__}")
            value_type = args[1] if len(args) == 2 else Any
            return {k: self._convert(v, value_type, f"{path}.{k}") for k, v in value.items()}

        if self.is_bound(target):
            return self.load(value, target, path)

        return self._convert_scalar(value, target, path)

    def _convert_scalar(self, value: Any, target: Any, path: str) -> Any:
        if isinstance(value, (dict, list)):
            raise TamlMappingError(f"{path}: expected a scalar for {getattr(target, '__name__', target)}")

        try:
            if target is str:
                return value if isinstance(value, str) else render_scalar(value)
            if target is bool:
                if isinstance(value, bool):
                    return value
                text = str(value).lower()
                if text not in ("true", "false"):
                    raise ValueError(f"not a boolean: {value!r}")
                return text == "true"
            if target is int:
                if isinstance(value, float) and not value.is_integer():
                    raise ValueError(f"not an integer: {value!r}")
                if isinstance(value, bool):
                    raise ValueError(f"not an integer: {value!r}")
                return int(value)
            if target is float:
                return float(value)
            if target is Decimal:
                return Decimal(render_scalar(value) if not isinstance(value, str) else value)
            if isinstance(target, type) and issubclass(target, Enum):
                return self._convert_enum(value, target)
            if target is datetime:
                return value if isinstance(value, datetime) else datetime.fromisoformat(str(value))
            if target is date:
                return value if isinstance(value, date) else date.fromisoformat(str(value))
        except (ValueError, TypeError, InvalidOperation) as e:
            raise TamlMappingError(f"{path}: cannot convert {value!r} to {target.__name__}: {e}") from e

        if isinstance(target, type) and isinstance(value, target):
            return value
        raise TamlMappingError(f"{path}: unsupported field type {target!r}")

    def _convert_enum(self, value: Any, target: Type[Enum]) -> Enum:
        for member in target:
            if member.value == value:
                return member
        text = str(value).lower()
        for member in target:
            if member.name.lower() == text or str(member.value).lower() == text:
                return member
        raise ValueError(f"{value!r} is not a member of {target.__name__}")

    # ---------------------------------------------------------------
    # Objects -> tree
    # ---------------------------------------------------------------

    def dump(self, obj: Any) -> Dict[str, Any]:
        binding = self.binding_for(type(obj))
        return {row.key: self._dump_value(row.getter(obj)) for row in binding.fields}

    def _dump_value(self, value: Any) -> Any:
        if self.is_bound(type(value)):
            return self.dump(value)
        if isinstance(value, (list, tuple, set)):
            return [self._dump_value(v) for v in value]
        if isinstance(value, dict):
            return {str(k): self._dump_value(v) for k, v in value.items()}
        if isinstance(value, Enum):
            return value.value
        return value


default_registry = BindingRegistry()


def bind(cls: Optional[type] = None, *, keys: Optional[Dict[str, str]] = None,
         registry: Optional[BindingRegistry] = None):
    """
    Registers a dataclass. Works bare (`@bind`), with options
    (`@bind(keys={"host": "Host"})`) or as a plain call (`bind(Server)`).
    """
    target = registry or default_registry

    def decorator(klass: type) -> type:
        target.register(klass, keys)
        return klass

    if cls is None:
        return decorator
    return decorator(cls)


def load(tree: Dict[str, Any], cls: type, registry: Optional[BindingRegistry] = None) -> Any:
    return (registry or default_registry).load(tree, cls)


def dump(obj: Any, registry: Optional[BindingRegistry] = None) -> Dict[str, Any]:
    return (registry or default_registry).dump(obj)


def loads(text: str, cls: type, registry: Optional[BindingRegistry] = None,
          strict: bool = True) -> Any:
    """Parses TAML text and maps it onto `cls`."""
    return load(parse(text, strict=strict), cls, registry)


def dumps(obj: Any, registry: Optional[BindingRegistry] = None, **serialize_kwargs) -> str:
    """Serializes a bound object to TAML text."""
    return serialize(dump(obj, registry), **serialize_kwargs)
