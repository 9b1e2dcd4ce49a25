"""
Column Mapper Module - Heuristic Header-to-Field Mapping

Maps the headers of an arbitrary product export onto the canonical product
fields. Each field has a prioritized list of candidate names and a list of
excluded substrings:

- "Variant Price"             -> price         (not "Variant Compare At Price")
- "Image Src"                 -> image         (not "Image Position", "Image Alt Text")
- "Body (HTML)"               -> description
- "Top Row"                   -> top_row_flag

Matching is case- and whitespace-insensitive. An exact header match on any
candidate wins first; otherwise candidates are tried in priority order as
substrings, skipping headers that contain an excluded substring. Unmatched
fields map to None.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalog_intake.schema_detector import normalize_header

if TYPE_CHECKING:
    from collections.abc import Sequence

ColumnMap = dict[str, str | None]


@dataclass(frozen=True)
class ColumnRule:
    """Candidate header names for one canonical field, most specific first."""

    field_name: str
    candidates: tuple[str, ...]
    exclude: tuple[str, ...] = field(default_factory=tuple)

    def accepts(self, header: str, candidate: str) -> bool:
        """Substring match on a normalized header, honoring exclusions."""
        return candidate in header and not any(bad in header for bad in self.exclude)


# Strict ordering matters: more specific candidates first
COLUMN_RULES: tuple[ColumnRule, ...] = (
    ColumnRule(
        "title",
        ("title", "product title", "product name", "name", "item name", "item title"),
        exclude=("option", "meta", "alt", "seo"),
    ),
    ColumnRule(
        "identifier",
        ("variant sku", "sku", "asin", "amazon asin", "source_product_id", "source product id", "item number"),
        exclude=("compare", "position", "parent"),
    ),
    ColumnRule(
        "price",
        ("variant price", "price", "sale price", "selling price", "retail price", "current price"),
        exclude=("compare", "cost", "type", "command"),
    ),
    ColumnRule(
        "compare_price",
        (
            "variant compare at price",
            "compare at price",
            "compare_at_price",
            "compare price",
            "msrp",
            "list price",
            "original price",
        ),
        exclude=("command",),
    ),
    ColumnRule(
        "image",
        ("image src", "image_src", "image url", "image_url", "main image", "image link", "image"),
        exclude=("position", "width", "height", "alt", "type", "command"),
    ),
    ColumnRule(
        "description",
        ("body (html)", "body html", "body_html", "description", "product description", "html description"),
        exclude=("meta", "seo"),
    ),
    ColumnRule(
        "vendor",
        ("vendor", "brand", "manufacturer", "supplier"),
        exclude=("command", "sku"),
    ),
    ColumnRule(
        "category",
        ("product type", "product_type", "type", "category", "department"),
        exclude=("image", "variant", "command", "option", "inventory", "weight"),
    ),
    ColumnRule(
        "tags",
        ("tags", "keywords", "labels"),
        exclude=("command",),
    ),
    ColumnRule(
        "status",
        ("status", "published", "state"),
        exclude=("command", "inventory"),
    ),
    ColumnRule(
        "quantity",
        ("variant inventory qty", "inventory quantity", "inventory", "quantity", "stock", "qty"),
        exclude=("policy", "tracker", "command", "cost"),
    ),
    ColumnRule(
        "dedup_handle",
        ("handle", "slug", "url handle"),
        exclude=("command",),
    ),
    ColumnRule(
        "top_row_flag",
        ("top row",),
    ),
)

CANONICAL_FIELDS = tuple(rule.field_name for rule in COLUMN_RULES)


class ColumnMapper:
    """
    Builds a ColumnMap from raw headers using a prioritized rule table.

    The rule table can be replaced (e.g. in tests or for a new export format)
    without changing the matching logic.
    """

    def __init__(self, rules: Sequence[ColumnRule] | None = None):
        self.rules = tuple(rules) if rules is not None else COLUMN_RULES

    def find_column(self, rule: ColumnRule, headers: Sequence[str]) -> str | None:
        """
        Return the original header that supplies `rule.field_name`, or None.

        Exact matches on any candidate win; then candidates are tried in order
        as substrings. The first successful candidate stops the search.
        """
        normalized = [normalize_header(h) for h in headers]

        for candidate in rule.candidates:
            if candidate in normalized:
                return headers[normalized.index(candidate)]

        for candidate in rule.candidates:
            for idx, header in enumerate(normalized):
                if rule.accepts(header, candidate):
                    return headers[idx]

        return None

    def map_columns(self, headers: Sequence[str]) -> ColumnMap:
        """
        Map every canonical field to a header.

        Args:
            headers: Raw header strings as they appear in the file.

        Returns:
            Dict of canonical field name -> original header (or None).
        """
        headers = list(headers)
        return {rule.field_name: self.find_column(rule, headers) for rule in self.rules}

    def get_mapping_statistics(self, column_map: ColumnMap, headers: Sequence[str]) -> dict:
        """
        Summarize how much of the file the mapping covers.

        Returns:
            Dictionary with mapped/unmapped fields and unused headers.
        """
        mapped = {name: header for name, header in column_map.items() if header is not None}
        used = set(mapped.values())
        total = len(column_map)
        return {
            "total_fields": total,
            "mapped_fields": len(mapped),
            "coverage": (len(mapped) / total) * 100 if total else 0.0,
            "unmapped_fields": [name for name, header in column_map.items() if header is None],
            "unused_headers": [h for h in headers if h not in used],
        }


def map_columns(headers: Sequence[str]) -> ColumnMap:
    """Map headers with the default rule table."""
    return ColumnMapper().map_columns(headers)
