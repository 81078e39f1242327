#!/usr/bin/env python3
"""
TAML ERRORS
-----------
Exception hierarchy raised by the parser, serializer, converters and the
typed mapping layer. Validation never raises; it reports Diagnostics.

Author: TAML Core Team
Date: 2026-10-18
"""

from typing import Optional

from taml.core.models import Diagnostic, DiagnosticKind


class TamlError(Exception):
    """Base class for every error raised by the TAML toolkit."""


class TamlParseError(TamlError):
    """
    Raised by strict parsing on the first structural or lexical violation.
    Always positional: carries the line, column and diagnostic kind.
    """

    def __init__(self, message: str, line: int, column: int = 1,
                 kind: Optional[DiagnosticKind] = None):
        super().__init__(f"Line {line}, Column {column}: {message}")
        self.line = line
        self.column = column
        self.kind = kind
        self.reason = message

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> "TamlParseError":
        return cls(diagnostic.message, diagnostic.line, diagnostic.column, diagnostic.kind)


class TamlSerializationError(TamlError):
    """Raised when a value tree has no TAML representation."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path
        self.reason = message


class TamlConversionError(TamlError):
    """Raised when JSON, YAML or XML input cannot be read."""


class TamlMappingError(TamlError):
    """Raised when a tree cannot be mapped onto (or from) a bound type."""
