#!/usr/bin/env python3
"""
TAML LEXER - Line Classifier & Key/Value Splitter
-------------------------------------------------
Decomposes raw TAML text into Line records. Comment and blank lines never
leave this module; every other line comes out with its tab depth, its
key / raw value split and the lexical diagnostics found on it.

The lexer only reports. Deciding whether a diagnostic aborts a parse or is
collected for a validation report is left to the caller.

Author: TAML Core Team
Date: 2026-10-18
"""

from typing import List, Optional

from taml.core.models import Diagnostic, DiagnosticKind, Line, Severity

TAB = "\t"
NULL_TOKEN = "~"
EMPTY_STRING_TOKEN = '""'
COMMENT_MARKER = "#"


def check_quotes(raw: str, line_no: int, column: int) -> Optional[Diagnostic]:
    """
    Quotes are only legal as the exact two-character empty-string marker.
    `column` is the 1-based column where `raw` starts.
    """
    if '"' not in raw or raw == EMPTY_STRING_TOKEN:
        return None
    return Diagnostic(
        line=line_no,
        column=column + raw.index('"'),
        kind=DiagnosticKind.INVALID_QUOTE_USAGE,
        message='Quotes are only allowed as "" to represent empty strings. '
                'Regular values should not be quoted.',
    )


class TamlLexer:
    """
    Orchestrates the transition from raw text to Line records.
    Holds no per-document state, so one instance can serve any number of
    documents, concurrently or not.
    """

    def _clean_artifacts(self, text: str) -> str:
        """
        Removes the UTF-8 BOM marker and standardizes line endings.
        """
        text = text.lstrip('\ufeff')
        return text.replace('\r\n', '\n')

    def is_skippable(self, raw_line: str) -> bool:
        """Blank, whitespace-only and comment lines carry no structure."""
        stripped = raw_line.strip()
        return not stripped or stripped.startswith(COMMENT_MARKER)

    def _measure_indent(self, raw_line: str, line_no: int):
        """
        Returns (depth, issue). The issue is set when the indentation is not
        made of tabs only; depth is then the number of tabs seen before it.
        """
        if raw_line.startswith(' '):
            return 0, Diagnostic(
                line=line_no,
                column=1,
                kind=DiagnosticKind.SPACE_INDENTATION,
                message="Indentation must use tabs, not spaces",
            )

        depth = 0
        for i, char in enumerate(raw_line):
            if char == TAB:
                depth += 1
            elif char == ' ':
                return depth, Diagnostic(
                    line=line_no,
                    column=i + 1,
                    kind=DiagnosticKind.MIXED_INDENTATION,
                    message="Mixed spaces and tabs in indentation",
                )
            else:
                break
        return depth, None

    def split(self, line: Line) -> Line:
        """
        Splits line.content into key and raw value in place.
        Example: "port\\t\\t8080" -> key "port", raw value "8080".
        """
        content = line.content
        tab_idx = content.find(TAB)

        if tab_idx == -1:
            # Bare token: a parent key awaiting children, or a list item
            line.key = content
            line.has_value = False
            self._check_key_spacing(line)
            return line

        if tab_idx == 0:
            line.issues.append(Diagnostic(
                line=line.line_no,
                column=line.content_column,
                kind=DiagnosticKind.EMPTY_KEY,
                message="Key is empty (line starts with tab)",
            ))
            return line

        line.key = content[:tab_idx]
        line.has_value = True
        self._check_key_spacing(line)

        # Any run of separator tabs is equivalent to a single tab
        value_start = tab_idx
        while value_start < len(content) and content[value_start] == TAB:
            value_start += 1

        line.raw_value = content[value_start:]
        line.value_column = line.depth + value_start + 1

        if TAB in line.raw_value:
            line.issues.append(Diagnostic(
                line=line.line_no,
                column=line.value_column + line.raw_value.index(TAB),
                kind=DiagnosticKind.TAB_IN_VALUE,
                message="Value contains invalid tab character",
            ))

        quote_issue = check_quotes(line.raw_value, line.line_no, line.value_column)
        if quote_issue:
            line.issues.append(quote_issue)

        return line

    def _check_key_spacing(self, line: Line):
        # A double space usually means the author meant a tab
        idx = line.key.find('  ')
        if idx != -1:
            line.issues.append(Diagnostic(
                line=line.line_no,
                column=line.content_column + idx,
                kind=DiagnosticKind.INVALID_KEY_FORMAT,
                message="Key contains multiple spaces (did you mean to use tabs?)",
                severity=Severity.WARNING,
            ))

    def classify_line(self, raw_line: str, line_no: int) -> Line:
        """Builds the Line record for one non-skippable physical line."""
        raw_line = raw_line.rstrip('\r')
        depth, indent_issue = self._measure_indent(raw_line, line_no)

        line = Line(
            line_no=line_no,
            depth=depth,
            content=raw_line[depth:].rstrip(),
            raw_line=raw_line,
            indent_issue=indent_issue,
        )
        if indent_issue is not None:
            # No reliable structure past a broken indent
            line.key = line.content.strip()
            return line
        return self.split(line)

    def count_comments(self, raw_text: str) -> int:
        return sum(
            1 for raw_line in self._clean_artifacts(raw_text).split('\n')
            if raw_line.strip().startswith(COMMENT_MARKER)
        )

    def classify(self, raw_text: str) -> List[Line]:
        """
        Decomposes a TAML document into Line records.
        This is the primary interface for the structurer and the validator.
        """
        lines = []
        for i, raw_line in enumerate(self._clean_artifacts(raw_text).split('\n'), 1):
            if self.is_skippable(raw_line):
                continue
            lines.append(self.classify_line(raw_line, i))
        return lines
