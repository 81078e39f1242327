#!/usr/bin/env python3
"""
TAML CONFIGURATION
------------------
Explicit option records threaded into every call. Nothing here is global:
callers build the options they need and hand them to the pipeline, the
exporter or the engine.

Author: TAML Core Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ParseOptions:
    """
    strict: abort on the first violation (True) or skip offending lines.
    coerce_types: map true/false and numbers onto bool/int/float.
    """
    strict: bool = True
    coerce_types: bool = True


@dataclass(frozen=True)
class SerializeOptions:
    """
    flatten_nested: emit list elements that are lists/dicts inline at the
        list's depth instead of rejecting them. Lossy, opt-in only.
    trailing_newline: terminate the document with a final newline.
    """
    flatten_nested: bool = False
    trailing_newline: bool = False


@dataclass(frozen=True)
class EngineConfig:
    """File-level settings for the TamlEngine."""
    extension: str = ".taml"
    max_depth: int = 10
    backup: bool = True
    parse: ParseOptions = field(default_factory=ParseOptions)
    serialize: SerializeOptions = field(default_factory=lambda: SerializeOptions(trailing_newline=True))
