"""
Marketplace identifier (ASIN) extraction.

An identifier is one letter followed by nine uppercase alphanumerics
(e.g. "B07XYZ1234"). Values may arrive quoted, lowercase, or embedded in a
product URL such as "https://www.amazon.com/Some-Item/dp/B07XYZ1234?th=1".
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from catalog_intake.value_parser import cell_text

if TYPE_CHECKING:
    from collections.abc import Iterable

IDENTIFIER_RX = re.compile(r"^[A-Z][0-9A-Z]{9}$")

# /dp/<code> path segment of a product URL
PRODUCT_URL_RX = re.compile(r"/dp/([A-Za-z][0-9A-Za-z]{9})(?![0-9A-Za-z])", re.IGNORECASE)

# Bare uppercase code inside free text; must contain a digit so plain
# ten-letter words ("WATERPROOF") are not taken for identifiers
EMBEDDED_IDENTIFIER_RX = re.compile(r"(?<![0-9A-Za-z])([A-Z](?=[0-9A-Z]{0,8}[0-9])[0-9A-Z]{9})(?![0-9A-Za-z])")

_QUOTES_RX = re.compile(r"['\"]")


def _normalize(value: Any) -> str:
    return _QUOTES_RX.sub("", cell_text(value)).upper()


def is_identifier(value: Any) -> bool:
    """Return True if the value is exactly a canonical identifier (no normalization)."""
    if not isinstance(value, str):
        return False
    return bool(IDENTIFIER_RX.fullmatch(value))


def looks_like_identifier(value: Any) -> bool:
    """Return True if the trimmed, unquoted, uppercased cell is identifier-shaped."""
    return bool(IDENTIFIER_RX.fullmatch(_normalize(value)))


def has_product_url(value: Any) -> bool:
    """Return True if the cell contains a /dp/<identifier> product URL segment."""
    return PRODUCT_URL_RX.search(cell_text(value)) is not None


def extract_identifier(value: Any) -> str:
    """
    Extract a canonical identifier from arbitrary text.

    Order:
      1. The whole trimmed value, quotes removed, uppercased.
      2. A /dp/<code> product URL segment.
      3. An identifier-shaped uppercase code elsewhere in the text.

    Returns:
        The uppercase identifier, or "" when none is found.
    """
    raw = cell_text(value)
    if not raw:
        return ""

    normalized = _normalize(raw)
    if IDENTIFIER_RX.fullmatch(normalized):
        return normalized

    match = PRODUCT_URL_RX.search(raw) or EMBEDDED_IDENTIFIER_RX.search(raw)
    if match:
        return match.group(1).upper()

    return ""


def find_identifiers(value: Any) -> list[str]:
    """
    Return every identifier in a cell: the cell itself when identifier-shaped,
    plus all /dp/<code> URL segments, in order of appearance.
    """
    raw = cell_text(value)
    if not raw:
        return []

    found: list[str] = []
    normalized = _normalize(raw)
    if IDENTIFIER_RX.fullmatch(normalized):
        found.append(normalized)
    for match in PRODUCT_URL_RX.finditer(raw):
        code = match.group(1).upper()
        if code not in found:
            found.append(code)
    return found


def collect_identifiers(cells: Iterable[Any]) -> list[str]:
    """Collect distinct identifiers from many cells, keeping first-seen order."""
    seen: dict[str, None] = {}
    for cell in cells:
        for code in find_identifiers(cell):
            seen.setdefault(code, None)
    return list(seen)
