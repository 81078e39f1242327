#!/usr/bin/env python3
"""
TAML STRUCTURER - The Indentation State Machine
-----------------------------------------------
Turns classified Lines into the generic value tree.

A bare line (no separator tab) is ambiguous until its children are seen:
it may own a List of bare items or an Object of keys. The structurer runs
two passes per scope: `classify_scope` looks ahead without touching any
state, then the main walk builds the container it decided on.

The same indentation rules are shared with the validator; only the
failure policy differs (abort or skip here, collect there).

Author: TAML Core Team
Date: 2026-10-18
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from taml.core.config import ParseOptions
from taml.core.errors import TamlParseError
from taml.core.models import Diagnostic, DiagnosticKind, Frame, Line, ScopeKind
from taml.parsing.coercion import coerce_value
from taml.parsing.context import ParseContext
from taml.parsing.lexer import check_quotes

logger = logging.getLogger("taml.structurer")


@dataclass
class IndentReference:
    """The last accepted line: what the next line's depth is checked against."""
    depth: int = -1
    opens_scope: bool = True


def check_indentation(line: Line, ref: IndentReference) -> Optional[Diagnostic]:
    """
    Depth rules between consecutive content lines.
    A jump of two or more levels is inconsistent; a single level deeper is
    only legal right after a bare parent key.
    """
    if line.depth > ref.depth + 1:
        return Diagnostic(
            line=line.line_no,
            column=1,
            kind=DiagnosticKind.INCONSISTENT_INDENTATION,
            message=f"Invalid indentation level (expected max {ref.depth + 1} tabs, found {line.depth})",
        )
    if line.depth > ref.depth and not ref.opens_scope:
        return Diagnostic(
            line=line.line_no,
            column=1,
            kind=DiagnosticKind.ORPHANED_INDENTATION,
            message="Indented line has no parent (previous line was not a parent key)",
        )
    return None


def _next_structural(lines: List[Line], pos: int, skip_errors: bool = False) -> int:
    """
    Index of the next line whose indentation could be measured.
    With skip_errors, lines carrying any ERROR diagnostic are passed over too.
    """
    while pos < len(lines):
        line = lines[pos]
        if line.indent_issue is None and not (skip_errors and line.has_errors):
            break
        pos += 1
    return pos


def classify_scope(lines: List[Line], index: int, skip_errors: bool = False) -> ScopeKind:
    """
    Decides whether the bare line at `index` owns a List or an Object.

    Only direct children (depth + 1) are examined. Any key/value child makes
    an Object; so does a bare child with children of its own. Bare leaves
    alone make a List. No children at all is an empty Object.
    Lenient parsing passes skip_errors so lines it will drop do not vote.
    Never mutates anything.
    """
    parent_depth = lines[index].depth
    child_depth = parent_depth + 1
    saw_leaf = False

    pos = _next_structural(lines, index + 1, skip_errors)
    while pos < len(lines):
        line = lines[pos]
        if line.depth <= parent_depth:
            break
        nxt = _next_structural(lines, pos + 1, skip_errors)
        if line.depth == child_depth:
            if line.has_value:
                return ScopeKind.OBJECT
            if nxt < len(lines) and lines[nxt].depth > child_depth:
                return ScopeKind.OBJECT
            saw_leaf = True
        pos = nxt

    return ScopeKind.LIST if saw_leaf else ScopeKind.OBJECT


class TamlStructurer:
    """
    The Architect: walks classified Lines with a frame stack and assembles
    dicts and lists bottom-up.
    """

    def __init__(self, options: Optional[ParseOptions] = None):
        self.options = options or ParseOptions()

    def _reject(self, diagnostic: Diagnostic, context: Optional[ParseContext]):
        """Strict mode aborts; lenient mode drops the line and remembers why."""
        if self.options.strict:
            raise TamlParseError.from_diagnostic(diagnostic)
        logger.debug(f"Skipping line {diagnostic.line}: {diagnostic.kind.value}")
        if context is not None:
            context.skipped.append(diagnostic)

    def _coerce(self, raw: str) -> Any:
        return coerce_value(raw, self.options.coerce_types)

    def _insert(self, frame: Frame, key: str, value: Any, line: Line):
        if key in frame.keys:
            logger.debug(f"Line {line.line_no}: duplicate key '{key}' overrides earlier value")
        frame.keys.add(key)
        frame.node[key] = value

    def build(self, lines: List[Line], context: Optional[ParseContext] = None) -> Dict[str, Any]:
        """
        Assembles the root Object from classified Lines.
        Raises TamlParseError on the first violation when strict.
        """
        root: Dict[str, Any] = {}
        stack = [Frame(depth=-1, kind=ScopeKind.OBJECT, node=root)]
        ref = IndentReference()

        for index, line in enumerate(lines):
            problem = line.indent_issue or check_indentation(line, ref) or line.first_error()
            if problem is not None:
                self._reject(problem, context)
                continue

            # Close every scope this line is not inside of
            while stack[-1].depth >= line.depth:
                stack.pop()
            frame = stack[-1]

            if frame.kind is ScopeKind.LIST:
                quote_issue = check_quotes(line.content, line.line_no, line.content_column)
                if quote_issue is not None:
                    self._reject(quote_issue, context)
                    continue
                frame.node.append(self._coerce(line.content))
                ref = IndentReference(line.depth, opens_scope=False)
                continue

            if line.has_value:
                self._insert(frame, line.key, self._coerce(line.raw_value), line)
                ref = IndentReference(line.depth, opens_scope=False)
                continue

            kind = classify_scope(lines, index, skip_errors=not self.options.strict)
            container = [] if kind is ScopeKind.LIST else {}
            self._insert(frame, line.key, container, line)
            stack.append(Frame(depth=line.depth, kind=kind, node=container))
            ref = IndentReference(line.depth, opens_scope=True)

        if context is not None:
            context.tree = root
        return root
