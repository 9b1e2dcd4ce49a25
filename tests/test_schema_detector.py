"""
Unit tests for source format detection.
"""

import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.config import PipelineConfig
from catalog_intake.schema_detector import (
    SourceFormat,
    classify,
    count_identifier_cells,
    detect_identifier_list,
    detect_source_format,
    normalize_header,
)


def _asin_rows(count, header="asin"):
    return [{header: f"B0000000{i:02d}"} for i in range(count)]


class TestDetectSourceFormat:
    def test_matrixify(self):
        headers = ["Top Row", "Handle", "Title", "Image Src", "Variant Price"]
        assert detect_source_format(headers) == SourceFormat.SHOPIFY_MATRIXIFY

    def test_shopify_csv(self):
        assert detect_source_format(["Handle", "Title", "Image Src"]) == SourceFormat.SHOPIFY_CSV

    def test_top_row_without_image_src_is_shopify_csv(self):
        headers = ["Top Row", "Handle", "Title", "Image URL"]
        assert detect_source_format(headers) == SourceFormat.SHOPIFY_CSV

    def test_dropship_source_columns(self):
        assert detect_source_format(["Source URL", "Source Price", "Title"]) == SourceFormat.AUTODS

    def test_dropship_tool_name(self):
        assert detect_source_format(["DSers Product ID", "Title"]) == SourceFormat.AUTODS

    def test_ebay_file_exchange(self):
        assert detect_source_format(["Action", "ItemID", "Title"]) == SourceFormat.EBAY_FILE_EXCHANGE
        assert detect_source_format(["Action", "Category", "Title"]) == SourceFormat.EBAY_FILE_EXCHANGE

    def test_generic_csv(self):
        assert detect_source_format(["Name", "Price"]) == SourceFormat.GENERIC_CSV
        assert detect_source_format(["product", "sku"]) == SourceFormat.GENERIC_CSV

    def test_unknown(self):
        assert detect_source_format(["foo", "bar"]) == SourceFormat.UNKNOWN
        assert detect_source_format([]) == SourceFormat.UNKNOWN

    def test_case_and_whitespace_insensitive(self):
        assert detect_source_format(["  HANDLE ", "title", "IMAGE   SRC"]) == SourceFormat.SHOPIFY_CSV
        assert normalize_header("  Image   Src ") == "image src"


class TestIdentifierListDetection:
    def test_more_than_ten_matches(self):
        assert detect_identifier_list(["asin"], _asin_rows(11))

    def test_exactly_ten_is_not_enough(self):
        assert not detect_identifier_list(["asin"], _asin_rows(10))

    def test_wide_files_are_never_lists(self):
        headers = ["a", "b", "c", "d", "asin"]
        rows = [dict(row, a="", b="", c="", d="") for row in _asin_rows(20)]
        assert not detect_identifier_list(headers, rows)

    def test_only_sample_rows_counted(self):
        rows = [{"asin": "nothing"} for _ in range(30)] + _asin_rows(20)
        assert count_identifier_cells(rows, sample_size=30) == 0
        assert not detect_identifier_list(["asin"], rows)

    def test_product_urls_count(self):
        rows = [{"url": f"https://example.com/dp/B0ABCDEF{i:02d}"} for i in range(12)]
        assert detect_identifier_list(["url"], rows)

    def test_threshold_from_config(self):
        config = PipelineConfig(identifier_list_min_matches=2)
        assert detect_identifier_list(["asin"], _asin_rows(3), config)

    def test_classify_prefers_identifier_list(self):
        headers = ["Handle", "Title", "Image"]
        rows = [{"Handle": f"B0000000{i:02d}", "Title": "", "Image": ""} for i in range(15)]
        assert classify(headers, rows) == SourceFormat.ASIN_LIST
        assert classify(headers) == SourceFormat.SHOPIFY_CSV
