#!/usr/bin/env python3
"""
TAML PARSE CONTEXT
------------------
The record of a single parse run. Created by the TamlPipeline and enriched
by the lexer and the structurer in turn.

Author: TAML Core Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from taml.core.config import ParseOptions
from taml.core.models import Diagnostic, Line


@dataclass
class ParseContext:
    """
    Holds everything one parse produced. In lenient mode `skipped` lists
    the diagnostics of every line that was dropped from the tree.
    """
    raw_text: str                                       # Input as given by the caller
    options: ParseOptions = field(default_factory=ParseOptions)
    lines: List[Line] = field(default_factory=list)     # Classified content lines
    tree: Optional[Dict[str, Any]] = None               # Root Object once built
    skipped: List[Diagnostic] = field(default_factory=list)
    comment_lines: int = 0                              # Comments the tree cannot keep

    @property
    def is_complete(self) -> bool:
        """True when no line had to be skipped."""
        return self.tree is not None and not self.skipped
