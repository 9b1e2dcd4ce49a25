"""
Unit tests for the ColumnMapper module.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.column_mapper import CANONICAL_FIELDS, ColumnMapper, ColumnRule, map_columns

SHOPIFY_HEADERS = [
    "Handle",
    "Title",
    "Body (HTML)",
    "Vendor",
    "Type",
    "Tags",
    "Published",
    "Variant SKU",
    "Variant Inventory Qty",
    "Variant Price",
    "Variant Compare At Price",
    "Image Src",
    "Image Position",
    "Image Alt Text",
    "Status",
]


class TestColumnMapper:
    """Tests for ColumnMapper class."""

    def setup_method(self):
        self.mapper = ColumnMapper()

    def test_shopify_export(self):
        column_map = self.mapper.map_columns(SHOPIFY_HEADERS)
        assert column_map == {
            "title": "Title",
            "identifier": "Variant SKU",
            "price": "Variant Price",
            "compare_price": "Variant Compare At Price",
            "image": "Image Src",
            "description": "Body (HTML)",
            "vendor": "Vendor",
            "category": "Type",
            "tags": "Tags",
            "status": "Status",
            "quantity": "Variant Inventory Qty",
            "dedup_handle": "Handle",
            "top_row_flag": None,
        }

    def test_every_field_present(self):
        column_map = self.mapper.map_columns(["foo"])
        assert tuple(column_map) == CANONICAL_FIELDS
        assert all(header is None for header in column_map.values())

    def test_values_are_original_headers(self):
        headers = ["  TITLE  ", "Top Row"]
        column_map = self.mapper.map_columns(headers)
        assert column_map["title"] == "  TITLE  "
        assert column_map["top_row_flag"] == "Top Row"
        for header in column_map.values():
            assert header is None or header in headers

    def test_price_skips_compare_column(self):
        column_map = self.mapper.map_columns(["Variant Compare At Price", "Cost per item", "Our Price"])
        assert column_map["price"] == "Our Price"
        assert column_map["compare_price"] == "Variant Compare At Price"

    def test_image_exclusions(self):
        assert self.mapper.map_columns(["Image Position", "Image Alt Text"])["image"] is None
        column_map = self.mapper.map_columns(["Image Position", "Image Alt Text", "Main Image URL"])
        assert column_map["image"] == "Main Image URL"

    def test_exact_match_beats_substring(self):
        # "sku" is a substring of "Vendor SKU Code" but the exact ASIN column wins
        column_map = self.mapper.map_columns(["Vendor SKU Code", "ASIN"])
        assert column_map["identifier"] == "ASIN"

    def test_candidate_priority_for_substrings(self):
        # "sku" outranks "asin" in the candidate list
        column_map = self.mapper.map_columns(["Amazon ASIN Value", "Seller SKU Code"])
        assert column_map["identifier"] == "Seller SKU Code"

    def test_parent_asin_excluded(self):
        assert self.mapper.map_columns(["Parent ASIN"])["identifier"] is None

    def test_custom_rules(self):
        mapper = ColumnMapper(rules=[ColumnRule("title", ("headline",))])
        assert mapper.map_columns(["Headline"]) == {"title": "Headline"}

    def test_mapping_statistics(self):
        headers = ["Title", "Price", "Foo"]
        column_map = self.mapper.map_columns(headers)
        stats = self.mapper.get_mapping_statistics(column_map, headers)
        assert stats["total_fields"] == len(CANONICAL_FIELDS)
        assert stats["mapped_fields"] == 2
        assert stats["unused_headers"] == ["Foo"]
        assert "identifier" in stats["unmapped_fields"]


def test_map_columns_wrapper():
    assert map_columns(["Name", "Price"])["title"] == "Name"
