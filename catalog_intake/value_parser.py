"""
Shared cell coercion utilities for raw spreadsheet values.

Prices keep only digits and dots (e.g., "$1,299.00" -> 1299.0, "USD 19.99" -> 19.99).
Quantities take the leading integer (e.g., "12 pcs" -> 12). Unparseable cells fall
back to a default instead of raising; data quality is reported by the gates.
"""

from __future__ import annotations

import math
import re
from typing import Any

import pandas as pd

_NON_PRICE_CHARS = re.compile(r"[^0-9.]")
_LEADING_DECIMAL = re.compile(r"^\d*\.?\d*")
_LEADING_INT = re.compile(r"^[+-]?\d+")
_QUOTE_CHARS = "\"'"


def cell_text(value: Any) -> str:
    """Coerce a raw cell (text, number, None/NaN) to a trimmed string."""
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # 12.0 read from a numeric spreadsheet cell
        return str(int(value))
    return str(value).strip()


def strip_quotes(text: str) -> str:
    """Remove one leading and one trailing quote character."""
    if text[:1] in _QUOTE_CHARS:
        text = text[1:]
    if text[-1:] in _QUOTE_CHARS:
        text = text[:-1]
    return text


def parse_price(value: Any) -> float:
    """
    Parse a money cell by dropping everything except digits and dots.

    The longest leading decimal of what remains is used, so "1.2.3" reads as 1.2.
    Returns 0.0 when nothing numeric is left.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return 0.0
        # Same result as the text rule, which drops the sign
        return abs(float(value))

    cleaned = _NON_PRICE_CHARS.sub("", cell_text(value))
    match = _LEADING_DECIMAL.match(cleaned)
    token = match.group(0) if match else ""
    if token in ("", "."):
        return 0.0
    try:
        return float(token)
    except ValueError:
        return 0.0


def parse_quantity(value: Any, default: int = 999) -> int:
    """Parse the leading integer of a quantity cell, or return the default."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return default
        return int(value)

    match = _LEADING_INT.match(cell_text(value))
    if not match:
        return default
    return int(match.group(0))


def parse_flag(value: Any, truthy: tuple[str, ...] = ("true", "1", "yes")) -> bool:
    """Return True when the cell case-insensitively equals one of the truthy tokens."""
    return cell_text(value).lower() in truthy
