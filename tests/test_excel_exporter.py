"""
Unit tests for the intake workbook exporter.
"""

import sys
from pathlib import Path

import pandas as pd

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.excel_exporter import (
    PRODUCT_COLUMNS,
    ProductExporter,
    export_products_csv,
    export_products_xlsx,
    gates_label,
    products_to_frame,
)
from catalog_intake.pipeline import process_table

HEADERS = ["ASIN", "Title", "Price", "Image", "Description"]
ROWS = [
    {
        "ASIN": "B012345678",
        "Title": "Stainless Steel Water Bottle",
        "Price": "$19.99",
        "Image": "https://x/1.jpg",
        "Description": "Double-wall insulated bottle that keeps drinks cold.",
    },
    {"ASIN": "B000000002", "Title": "Copper Mug", "Price": "12", "Image": "", "Description": ""},
]


class TestProductExporter:
    def setup_method(self):
        self.report = process_table(HEADERS, ROWS)

    def test_products_to_frame(self):
        df = products_to_frame(self.report.products)
        assert list(df.columns) == list(PRODUCT_COLUMNS)
        assert df.loc[0, "Sell Price"] == 33.98
        assert df.loc[0, "Gates Passed"] == "5/5"
        assert df.loc[1, "Gates Passed"] == "3/5"

    def test_empty_frame_has_columns(self):
        assert list(products_to_frame([]).columns) == list(PRODUCT_COLUMNS)

    def test_gates_label(self):
        assert gates_label(0) == "0/5"

    def test_workbook_sheets(self, tmp_path):
        path = export_products_xlsx(self.report, stem="sample", output_path=tmp_path)
        assert path.exists()
        assert path.name.startswith("intake_sample_")
        assert path.suffix == ".xlsx"
        assert pd.ExcelFile(path).sheet_names == ["Products", "Summary"]

    def test_products_sheet_content(self, tmp_path):
        path = ProductExporter(tmp_path).export_report(self.report, output_filename="out.xlsx")
        df = pd.read_excel(path, sheet_name="Products")
        assert list(df.columns) == list(PRODUCT_COLUMNS)
        assert len(df) == 2
        assert df.loc[0, "ASIN/SKU"] == "B012345678"
        assert df.loc[0, "Sell Price"] == 33.98
        assert df.loc[1, "Gates Passed"] == "3/5"

    def test_summary_sheet_content(self, tmp_path):
        path = ProductExporter(tmp_path).export_report(self.report, output_filename="out.xlsx")
        summary = pd.read_excel(path, sheet_name="Summary")
        values = dict(zip(summary["Metric"], summary["Value"]))
        assert values["Format"] == "generic-csv"
        assert str(values["Unique Products"]) == "2"

    def test_csv_export(self, tmp_path):
        path = export_products_csv(self.report.products, tmp_path / "nested" / "products.csv")
        df = pd.read_csv(path)
        assert list(df.columns) == list(PRODUCT_COLUMNS)
        assert len(df) == 2
