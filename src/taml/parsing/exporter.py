#!/usr/bin/env python3
"""
TAML EXPORTER - Canonical Serializer
------------------------------------
Converts a generic value tree back into TAML text: one tab per nesting
level, one tab between key and value, nothing else.

Author: TAML Core Team
Date: 2026-10-18
"""

from collections.abc import Mapping
from typing import Any, List, Optional

from taml.core.config import SerializeOptions
from taml.core.errors import TamlSerializationError
from taml.parsing.coercion import is_scalar, render_scalar
from taml.parsing.lexer import TAB, COMMENT_MARKER

_LINE_BREAKS = ('\n', '\r')


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_empty_container(value: Any) -> bool:
    return (isinstance(value, Mapping) or _is_sequence(value)) and not value


class TamlExporter:
    """
    The Reconstructor: walks a tree depth-first and emits canonical lines.
    Refuses anything the parser could not read back.
    """

    def __init__(self, options: Optional[SerializeOptions] = None):
        self.options = options or SerializeOptions()

    def _check_key(self, key: Any, path: str, bare: bool = False) -> str:
        """
        Bare keys (parents of Objects and Lists) are right-trimmed by the
        reader, so only keys followed by a value may end in whitespace.
        """
        if not isinstance(key, str):
            key = str(key)
        if not key:
            raise TamlSerializationError("Keys must not be empty", path)
        if TAB in key or any(br in key for br in _LINE_BREAKS):
            raise TamlSerializationError(f"Key {key!r} contains a tab or line break", path)
        if key != key.lstrip():
            raise TamlSerializationError(f"Key {key!r} has leading whitespace", path)
        if bare and key != key.rstrip():
            raise TamlSerializationError(f"Parent key {key!r} has trailing whitespace", path)
        if key.startswith(COMMENT_MARKER):
            raise TamlSerializationError(f"Key {key!r} would be read as a comment", path)
        return key

    def _render(self, value: Any, path: str) -> str:
        if not is_scalar(value):
            raise TamlSerializationError(f"Unsupported value type {type(value).__name__}", path)
        text = render_scalar(value)
        if TAB in text or any(br in text for br in _LINE_BREAKS):
            raise TamlSerializationError("Values must not contain tabs or line breaks", path)
        if '"' in text and value != "":
            raise TamlSerializationError("Values must not contain double quotes", path)
        return text

    def _write_object(self, obj: Mapping, depth: int, lines: List[str], path: str):
        indent = TAB * depth
        for raw_key, value in obj.items():
            container = isinstance(value, Mapping) or _is_sequence(value)
            key = self._check_key(raw_key, path, bare=container)
            child_path = f"{path}.{key}"

            if isinstance(value, Mapping):
                # Only bare children would make the reader classify this scope as a List
                if value and all(_is_empty_container(v) for v in value.values()):
                    raise TamlSerializationError(
                        "An object whose entries are all empty objects or lists reads back as a list",
                        child_path)
                lines.append(indent + key)
                self._write_object(value, depth + 1, lines, child_path)
            elif _is_sequence(value):
                lines.append(indent + key)
                self._write_list(value, depth + 1, lines, child_path)
            else:
                lines.append(indent + key + TAB + self._render(value, child_path))

    def _write_list(self, items, depth: int, lines: List[str], path: str):
        indent = TAB * depth
        for i, item in enumerate(items):
            item_path = f"{path}[{i}]"

            if isinstance(item, Mapping) or _is_sequence(item):
                if not self.options.flatten_nested:
                    raise TamlSerializationError(
                        "A list inside a list, or an object inside a list, has no TAML form "
                        "(use flatten_nested to inline it)", item_path)
                if isinstance(item, Mapping):
                    self._write_object(item, depth, lines, item_path)
                else:
                    self._write_list(item, depth, lines, item_path)
                continue

            text = self._render(item, item_path)
            if text != text.lstrip() or text.startswith(COMMENT_MARKER):
                raise TamlSerializationError(
                    f"List item {text!r} starts with whitespace or '#'", item_path)
            lines.append(indent + text)

    def export(self, tree: Any) -> str:
        """
        Serializes a tree whose root is an Object.
        Example: {"server": {"port": 8080}} -> "server\\n\\tport\\t8080".
        """
        if not isinstance(tree, Mapping):
            raise TamlSerializationError(
                f"The document root must be an object, got {type(tree).__name__}", "$")

        lines: List[str] = []
        self._write_object(tree, 0, lines, "$")
        text = "\n".join(lines)
        if self.options.trailing_newline and lines:
            text += "\n"
        return text
