#!/usr/bin/env python3
"""
TAML PIPELINE - The Coordinator
-------------------------------
Public entry point of the round-trip engine. Each call runs one of three
one-way flows:

    text -> lexer -> structurer -> tree        (parse)
    text -> lexer -> validator  -> diagnostics (validate)
    tree -> exporter            -> text        (serialize)

Nothing is shared between calls apart from the immutable options.

Author: TAML Core Team
Date: 2026-10-18
"""

import logging
from typing import Any, Dict, Optional

from taml.core.config import ParseOptions, SerializeOptions
from taml.core.models import ValidationResult
from taml.parsing.context import ParseContext
from taml.parsing.exporter import TamlExporter
from taml.parsing.lexer import TamlLexer
from taml.parsing.structurer import TamlStructurer
from taml.validator.validator import TamlValidator

logger = logging.getLogger("taml.pipeline")


class TamlPipeline:
    """
    Ensures that classification, structuring and export happen in a
    strictly defined order with the caller's options.
    """

    def __init__(self, options: Optional[ParseOptions] = None,
                 serialize_options: Optional[SerializeOptions] = None):
        self.options = options or ParseOptions()
        self.serialize_options = serialize_options or SerializeOptions()
        self.lexer = TamlLexer()
        self.structurer = TamlStructurer(self.options)
        self.validator = TamlValidator(self.lexer)
        self.exporter = TamlExporter(self.serialize_options)

    def run(self, text: str) -> ParseContext:
        """Parses `text` and returns the full record of the run."""
        context = ParseContext(raw_text=text, options=self.options)

        # --- PHASE 1: CLASSIFICATION ---
        context.lines = self.lexer.classify(text)
        context.comment_lines = self.lexer.count_comments(text)

        # --- PHASE 2: STRUCTURE ---
        self.structurer.build(context.lines, context)

        if context.skipped:
            logger.info(f"Lenient parse skipped {len(context.skipped)} line(s)")
        return context

    def parse(self, text: str) -> Dict[str, Any]:
        return self.run(text).tree

    def validate(self, text: str) -> ValidationResult:
        return self.validator.validate(text)

    def serialize(self, tree: Any) -> str:
        return self.exporter.export(tree)


def parse(text: str, strict: bool = True, coerce_types: bool = True) -> Dict[str, Any]:
    """
    Parses TAML text into a tree of dicts, lists and scalars.
    Strict parsing raises TamlParseError on the first violation; lenient
    parsing drops offending lines instead.
    """
    options = ParseOptions(strict=strict, coerce_types=coerce_types)
    return TamlPipeline(options).parse(text)


def validate(text: str) -> ValidationResult:
    """Reports every diagnostic in `text`. Never raises for bad input."""
    return TamlPipeline().validate(text)


def serialize(tree: Any, flatten_nested: bool = False, trailing_newline: bool = False) -> str:
    """Serializes a tree whose root is a dict into canonical TAML."""
    options = SerializeOptions(flatten_nested=flatten_nested, trailing_newline=trailing_newline)
    return TamlExporter(options).export(tree)
