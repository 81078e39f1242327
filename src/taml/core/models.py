#!/usr/bin/env python3
"""
TAML CORE MODELS
----------------
Defines the fundamental data structures used across the TAML engine.
These records live only for the duration of a single parse, validate
or serialize call.

Author: TAML Core Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Any, List, Dict, Set


class Severity(str, Enum):
    """How bad a diagnostic is. Only ERROR makes a document invalid."""
    WARNING = "Warning"
    ERROR = "Error"


class DiagnosticKind(str, Enum):
    SPACE_INDENTATION = "SpaceIndentation"
    MIXED_INDENTATION = "MixedIndentation"
    INCONSISTENT_INDENTATION = "InconsistentIndentation"
    ORPHANED_INDENTATION = "OrphanedIndentation"
    TAB_IN_VALUE = "TabInValue"
    EMPTY_KEY = "EmptyKey"
    INVALID_QUOTE_USAGE = "InvalidQuoteUsage"
    INVALID_KEY_FORMAT = "InvalidKeyFormat"
    DUPLICATE_KEY = "DuplicateKey"


class ScopeKind(str, Enum):
    """What a bare parent key turned out to own."""
    LIST = "list"
    OBJECT = "object"


@dataclass
class Diagnostic:
    """
    One rule violation with its position in the source text.
    Line and column are both 1-based; a tab counts as one column.
    """
    line: int
    column: int
    kind: DiagnosticKind
    message: str
    severity: Severity = Severity.ERROR

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line,
            "column": self.column,
            "kind": self.kind.value,
            "severity": self.severity.value,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"Line {self.line}, Column {self.column}: {self.severity.value}: {self.message}"


@dataclass
class Line:
    """
    The atomic unit of a TAML document.

    A Line is produced by the lexer for every physical line that is not
    blank and not a comment, and is discarded once the structurer or the
    validator has consumed it.
    """
    line_no: int                  # 1-based physical line number
    depth: int                    # Number of leading tabs
    content: str                  # Text after the leading tabs, right-trimmed
    key: str = ""                 # Key, or the whole bare token
    raw_value: Optional[str] = None  # Text after the separator run
    has_value: bool = False       # True when a tab separator was found
    value_column: int = 0         # 1-based column where raw_value starts
    raw_line: str = ""            # The original line, for reporting
    indent_issue: Optional[Diagnostic] = None  # Space/Mixed indentation
    issues: List[Diagnostic] = field(default_factory=list)

    @property
    def is_bare(self) -> bool:
        return not self.has_value

    @property
    def content_column(self) -> int:
        return self.depth + 1

    @property
    def has_errors(self) -> bool:
        return self.indent_issue is not None or any(d.is_error for d in self.issues)

    def first_error(self) -> Optional[Diagnostic]:
        if self.indent_issue is not None:
            return self.indent_issue
        for diagnostic in self.issues:
            if diagnostic.is_error:
                return diagnostic
        return None


@dataclass
class Frame:
    """
    A stack entry tracking one open scope during a walk.
    The validator walks with node=None and only keeps the key set.
    """
    depth: int
    kind: ScopeKind = ScopeKind.OBJECT
    node: Any = None
    keys: Set[str] = field(default_factory=set)


@dataclass
class ValidationResult:
    """The complete, ordered outcome of validating one document."""
    is_valid: bool
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }

    def __str__(self) -> str:
        if self.is_valid and not self.diagnostics:
            return "Valid TAML"
        if self.is_valid:
            header = f"Valid TAML with {len(self.warnings)} warning(s)"
        else:
            header = f"Invalid TAML: {len(self.errors)} error(s) found"
        return "\n".join([header] + [str(d) for d in self.diagnostics])
