#!/usr/bin/env python3
"""
TAML FORMAT CONVERTER
---------------------
Adapters between TAML and other formats. Every adapter only produces or
consumes the generic value tree; TAML text itself always goes through the
pipeline.

    JSON  <-> tree   (json)
    YAML  <-> tree   (ruamel.yaml)
    XML   ->  tree   (xml.etree.ElementTree)

Author: TAML Core Team
Date: 2026-10-18
"""

import io
import json
import logging
import xml.etree.ElementTree as ET
from datetime import date, datetime
from typing import Any, Dict, Optional

from ruamel.yaml import YAML, YAMLError

from taml.core.config import ParseOptions, SerializeOptions
from taml.core.errors import TamlConversionError
from taml.parsing.pipeline import TamlPipeline

logger = logging.getLogger("taml.converter")

SUPPORTED_INPUT = ("json", "yaml", "xml")
SUPPORTED_OUTPUT = ("json", "yaml")

# Key used when a foreign document's root is not an object
ROOT_VALUE_KEY = "value"


def _normalize(value: Any) -> Any:
    """
    Recursively maps foreign loader output onto the generic tree:
    mappings -> dict with str keys, sequences -> list, dates -> ISO text.
    """
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _wrap_root(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    return {ROOT_VALUE_KEY: value}


class FormatConverter:
    """
    Translates JSON/YAML/XML documents to and from the TAML value tree.
    """

    def __init__(self, options: Optional[ParseOptions] = None,
                 serialize_options: Optional[SerializeOptions] = None):
        self.pipeline = TamlPipeline(options, serialize_options)

        self.yaml_loader = YAML(typ='safe')
        self.yaml_dumper = YAML(typ='rt')
        # Same block layout as our other YAML outputs: 2-space maps, offset dashes
        self.yaml_dumper.indent(mapping=2, sequence=4, offset=2)
        self.yaml_dumper.width = 4096

    # ---------------------------------------------------------------
    # Foreign format -> tree
    # ---------------------------------------------------------------

    def from_json(self, text: str) -> Dict[str, Any]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise TamlConversionError(f"Invalid JSON at line {e.lineno}, column {e.colno}: {e.msg}") from e
        return _wrap_root(_normalize(data))

    def from_yaml(self, text: str) -> Dict[str, Any]:
        try:
            data = self.yaml_loader.load(text)
        except YAMLError as e:
            mark = getattr(e, 'problem_mark', None)
            where = f" at line {mark.line + 1}, column {mark.column + 1}" if mark else ""
            raise TamlConversionError(f"Invalid YAML{where}: {e}") from e
        if data is None:
            return {}
        return _wrap_root(_normalize(data))

    def _convert_element(self, element: ET.Element) -> Any:
        children = list(element)
        text = (element.text or "").strip()

        if not children and not element.attrib:
            return text

        node: Dict[str, Any] = {}
        if text:
            node["_value"] = text
        for name, attr_value in element.attrib.items():
            node[f"@{name}"] = attr_value

        # Repeated sibling names collapse into one list
        groups: Dict[str, list] = {}
        for child in children:
            groups.setdefault(child.tag, []).append(self._convert_element(child))
        for tag, converted in groups.items():
            node[tag] = converted[0] if len(converted) == 1 else converted
        return node

    def from_xml(self, text: str) -> Dict[str, Any]:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise TamlConversionError(f"Invalid XML: {e}") from e
        return {root.tag: self._convert_element(root)}

    # ---------------------------------------------------------------
    # Tree -> foreign format
    # ---------------------------------------------------------------

    def to_json(self, tree: Dict[str, Any], indent: int = 2) -> str:
        return json.dumps(tree, indent=indent, ensure_ascii=False)

    def to_yaml(self, tree: Dict[str, Any]) -> str:
        stream = io.StringIO()
        self.yaml_dumper.dump(tree, stream)
        return stream.getvalue()

    # ---------------------------------------------------------------
    # Text-level conveniences used by the CLI
    # ---------------------------------------------------------------

    def to_taml(self, text: str, fmt: str) -> str:
        """Reads a JSON/YAML/XML document and serializes it as TAML."""
        fmt = fmt.lower()
        readers = {"json": self.from_json, "yaml": self.from_yaml, "xml": self.from_xml}
        if fmt not in readers:
            raise TamlConversionError(
                f"Unsupported input format: {fmt}. Use one of {', '.join(SUPPORTED_INPUT)}.")
        tree = readers[fmt](text)
        logger.debug(f"Converted {fmt} document with {len(tree)} root key(s)")
        return self.pipeline.serialize(tree)

    def taml_to(self, text: str, fmt: str) -> str:
        """Parses a TAML document and writes it as JSON or YAML."""
        fmt = fmt.lower()
        if fmt not in SUPPORTED_OUTPUT:
            raise TamlConversionError(
                f"Unsupported output format: {fmt}. Use one of {', '.join(SUPPORTED_OUTPUT)}.")
        tree = self.pipeline.parse(text)
        return self.to_json(tree) if fmt == "json" else self.to_yaml(tree)
