#!/usr/bin/env python3
"""
TAML VALUE COERCION
-------------------
Maps raw textual values onto the four TAML categories (null, empty string,
boolean/number literals, else string) and back.

Author: TAML Core Team
Date: 2026-10-18
"""

import re
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from taml.parsing.lexer import NULL_TOKEN, EMPTY_STRING_TOKEN

# Leading zeros are not numbers: "007" stays a string
_INTEGER_RE = re.compile(r'^-?(0|[1-9][0-9]*)$')
_DECIMAL_RE = re.compile(r'^-?(0|[1-9][0-9]*)\.[0-9]+$')

SCALAR_TYPES = (str, bool, int, float, Decimal, date, time, Enum)


def coerce_value(raw: str, coerce_types: bool = True) -> Any:
    """
    Convert a raw token to its tree value.
    Example: "~" -> None, '""' -> "", "8080" -> 8080, "TRUE" -> True.
    """
    if raw == NULL_TOKEN:
        return None
    if raw == EMPTY_STRING_TOKEN:
        return ""
    if not coerce_types:
        return raw

    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INTEGER_RE.match(raw):
        return int(raw)
    if _DECIMAL_RE.match(raw):
        return float(raw)
    return raw


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, SCALAR_TYPES)


def _positional(value: Any) -> str:
    """Decimal text without exponent and without added precision."""
    return format(Decimal(repr(value)) if isinstance(value, float) else value, "f")


def render_scalar(value: Any) -> str:
    """The inverse of coerce_value for any scalar tree value."""
    if value is None:
        return NULL_TOKEN
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return render_scalar(value.value)
    if isinstance(value, str):
        return value if value else EMPTY_STRING_TOKEN
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            # No TAML literal for these; they come back as strings
            return repr(value)
        return _positional(value)
    if isinstance(value, Decimal):
        return _positional(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)
