#!/usr/bin/env python3
"""
TAML VALIDATOR - The Judge
--------------------------
Replays the structurer's walk in collect mode. Every violation becomes a
Diagnostic and the walk carries on, so a single call reports the whole
document. Malformed input is reported, never raised.

Author: TAML Core Team
Date: 2026-10-18
"""

import logging
from typing import List, Optional

from taml.core.models import (
    Diagnostic,
    DiagnosticKind,
    Frame,
    Line,
    ScopeKind,
    Severity,
    ValidationResult,
)
from taml.parsing.lexer import TamlLexer, check_quotes
from taml.parsing.structurer import IndentReference, check_indentation, classify_scope

logger = logging.getLogger("taml.validator")


class TamlValidator:
    """
    Enforces structural TAML rules and produces positional diagnostics.
    Shares the indentation algorithm with the TamlStructurer.
    """

    def __init__(self, lexer: Optional[TamlLexer] = None):
        self.lexer = lexer or TamlLexer()

    def validate(self, taml: str) -> ValidationResult:
        """Validates a TAML string and returns every diagnostic found."""
        lines = self.lexer.classify(taml)
        diagnostics = self.validate_lines(lines)
        result = ValidationResult(
            is_valid=not any(d.is_error for d in diagnostics),
            diagnostics=diagnostics,
        )
        logger.debug(
            f"Validated {len(lines)} content lines: "
            f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
        return result

    def validate_lines(self, lines: List[Line]) -> List[Diagnostic]:
        diagnostics: List[Diagnostic] = []
        stack = [Frame(depth=-1, kind=ScopeKind.OBJECT)]
        ref = IndentReference()

        for index, line in enumerate(lines):
            # --- TEST 1: Indentation characters ---
            if line.indent_issue is not None:
                diagnostics.append(line.indent_issue)
                continue

            # --- TEST 2: Depth against the previous line ---
            structural = check_indentation(line, ref)
            if structural is not None:
                diagnostics.append(structural)

            # --- TEST 3: Lexical rules found by the splitter ---
            diagnostics.extend(line.issues)

            while stack[-1].depth >= line.depth:
                stack.pop()
            frame = stack[-1]

            if frame.kind is ScopeKind.LIST:
                quote_issue = check_quotes(line.content, line.line_no, line.content_column)
                if quote_issue is not None:
                    diagnostics.append(quote_issue)
                ref = IndentReference(line.depth, opens_scope=False)
                continue

            # --- TEST 4: Key uniqueness within one Object ---
            if line.key:
                if line.key in frame.keys:
                    diagnostics.append(Diagnostic(
                        line=line.line_no,
                        column=line.content_column,
                        kind=DiagnosticKind.DUPLICATE_KEY,
                        message=f"Duplicate key '{line.key}' (the later value wins)",
                        severity=Severity.WARNING,
                    ))
                frame.keys.add(line.key)

            if line.has_value:
                ref = IndentReference(line.depth, opens_scope=False)
            else:
                stack.append(Frame(depth=line.depth, kind=classify_scope(lines, index)))
                ref = IndentReference(line.depth, opens_scope=True)

        return diagnostics


def validate(taml: str) -> ValidationResult:
    """Module-level shortcut using a fresh validator."""
    return TamlValidator().validate(taml)
