"""
Schema Detection Module - Source Format Identification

Detects which tool produced an uploaded product file using:
1. Header analysis (first matching rule wins)
2. Cell sampling for bare identifier lists (ASINs / product URLs), which takes
   precedence over the header rules
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from catalog_intake.config import DEFAULT_CONFIG, PipelineConfig
from catalog_intake.identifiers import has_product_url, looks_like_identifier

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class SourceFormat(str, Enum):
    SHOPIFY_MATRIXIFY = "shopify-matrixify"
    SHOPIFY_CSV = "shopify-csv"
    AUTODS = "autods"
    EBAY_FILE_EXCHANGE = "ebay-file-exchange"
    GENERIC_CSV = "generic-csv"
    ASIN_LIST = "asin-list"
    UNKNOWN = "unknown"


# Dropship tools whose name shows up in their export headers
DROPSHIP_TOOL_NAMES = ("autods", "dsers", "zendrop", "spocket")

_GENERIC_NAME_HEADERS = ("title", "name", "product")
_GENERIC_VALUE_HEADERS = ("price", "cost", "sku")


def normalize_header(header: Any) -> str:
    """Lowercase, trim and collapse inner whitespace."""
    return " ".join(str(header if header is not None else "").lower().split())


def detect_source_format(headers: Sequence[str]) -> SourceFormat:
    """
    Classify a structured file by its headers.

    Examples:
        ["Top Row", "Handle", "Title", "Image Src"] -> SHOPIFY_MATRIXIFY
        ["Handle", "Title", "Image Src"]            -> SHOPIFY_CSV
        ["Source URL", "Source Price", "Title"]     -> AUTODS
        ["Action", "ItemID", "Title"]               -> EBAY_FILE_EXCHANGE
        ["Name", "Price"]                           -> GENERIC_CSV

    Args:
        headers: Raw header strings.

    Returns:
        The detected SourceFormat (UNKNOWN when no rule matches).
    """
    h = [normalize_header(x) for x in headers]
    header_set = set(h)
    # Underscore/space-insensitive view of all headers
    joined = "|".join(x.replace("_", " ") for x in h)

    if "top row" in header_set and "handle" in header_set and "image src" in joined:
        return SourceFormat.SHOPIFY_MATRIXIFY

    if "handle" in header_set and "title" in header_set and "image" in joined:
        return SourceFormat.SHOPIFY_CSV

    if any(name in joined for name in DROPSHIP_TOOL_NAMES) or (
        "source url" in header_set and "source price" in header_set
    ):
        return SourceFormat.AUTODS

    if "action" in header_set and ("itemid" in header_set or "category" in header_set):
        return SourceFormat.EBAY_FILE_EXCHANGE

    if any(x in header_set for x in _GENERIC_NAME_HEADERS) and any(x in header_set for x in _GENERIC_VALUE_HEADERS):
        return SourceFormat.GENERIC_CSV

    return SourceFormat.UNKNOWN


def count_identifier_cells(rows: Sequence[Mapping[str, Any]], sample_size: int = 30) -> int:
    """Count cells in the first `sample_size` rows that hold an identifier or product URL."""
    count = 0
    for row in rows[:sample_size]:
        for cell in row.values():
            if looks_like_identifier(cell) or has_product_url(cell):
                count += 1
    return count


def detect_identifier_list(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    config: PipelineConfig | None = None,
) -> bool:
    """
    Decide whether a narrow file is a bare list of identifiers rather than a table.

    Only files with at most `identifier_list_max_columns` columns are sampled;
    more than `identifier_list_min_matches` identifier-like cells in the first
    `identifier_sample_rows` rows make it a list.
    """
    config = config or DEFAULT_CONFIG
    if not headers or len(headers) > config.identifier_list_max_columns:
        return False
    matches = count_identifier_cells(rows, config.identifier_sample_rows)
    return matches > config.identifier_list_min_matches


def classify(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]] | None = None,
    config: PipelineConfig | None = None,
) -> SourceFormat:
    """Identifier-list check first, then the header rules."""
    if rows and detect_identifier_list(headers, rows, config):
        return SourceFormat.ASIN_LIST
    return detect_source_format(headers)
