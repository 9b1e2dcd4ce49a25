"""
Excel Exporter Module - Intake Workbook Generator

Creates formatted Excel workbooks with:
- Products sheet (one row per canonical product, gate-coloured readiness column)
- Summary sheet (format, row/column counts, detected features, timing)

CSV export goes through pandas with the same column layout.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pandas as pd
import xlsxwriter
from xlsxwriter.workbook import Workbook
from xlsxwriter.worksheet import Worksheet

from catalog_intake.config import GATE_COLORS, OUTPUT_PATH, OUTPUT_SETTINGS
from catalog_intake.logger import get_logger
from catalog_intake.models import GATE_NAMES, WARN_GATE_THRESHOLD

if TYPE_CHECKING:
    from collections.abc import Sequence

    from catalog_intake.models import CanonicalProduct
    from catalog_intake.pipeline import IntakeReport

logger = get_logger(__name__)

# Column header -> width
PRODUCT_COLUMNS = {
    "Title": 50,
    "ASIN/SKU": 14,
    "Price": 10,
    "Compare At Price": 14,
    "Sell Price": 10,
    "Profit": 10,
    "Profit %": 10,
    "Image URL": 40,
    "Description": 60,
    "Vendor": 18,
    "Category": 18,
    "Tags": 25,
    "Status": 10,
    "Quantity": 10,
    "Stock Status": 12,
    "Gates Passed": 12,
}

_CURRENCY_COLUMNS = ("Price", "Compare At Price", "Sell Price", "Profit")


def gates_label(gate_count: int) -> str:
    return f"{gate_count}/{len(GATE_NAMES)}"


def product_record(p: CanonicalProduct) -> dict[str, Any]:
    """One export row, keyed by PRODUCT_COLUMNS."""
    return {
        "Title": p.title,
        "ASIN/SKU": p.identifier,
        "Price": p.price,
        "Compare At Price": p.compare_price,
        "Sell Price": p.sell_price,
        "Profit": p.profit,
        "Profit %": p.profit_percent,
        "Image URL": p.image,
        "Description": p.description,
        "Vendor": p.vendor,
        "Category": p.category,
        "Tags": p.tags,
        "Status": p.status,
        "Quantity": p.quantity,
        "Stock Status": p.stock_status.value,
        "Gates Passed": gates_label(p.gate_count),
    }


def products_to_frame(products: Sequence[CanonicalProduct]) -> pd.DataFrame:
    """Flatten products into the export column layout."""
    return pd.DataFrame([product_record(p) for p in products], columns=list(PRODUCT_COLUMNS))


class ProductExporter:
    """
    Writes intake results to formatted Excel workbooks.
    """

    def __init__(self, output_path: Path | str | None = None):
        """
        Initialize the ProductExporter.

        Args:
            output_path: Directory for output files. Defaults to OUTPUT_PATH.
        """
        self.output_path = Path(output_path) if output_path else OUTPUT_PATH
        self.output_path.mkdir(parents=True, exist_ok=True)

        self.workbook: Workbook | None = None
        self.formats: dict[str, Any] = {}

    def _generate_filename(self, stem: str = "upload") -> str:
        """Generate output filename from pattern."""
        timestamp = datetime.now().strftime(OUTPUT_SETTINGS["timestamp_format"])
        return OUTPUT_SETTINGS["workbook_name_pattern"].format(stem=stem, timestamp=timestamp)

    def _setup_formats(self) -> None:
        if self.workbook is None:
            return

        self.formats["header"] = self.workbook.add_format({
            "bold": True,
            "bg_color": "#1A1A2E",
            "font_color": "#FFFFFF",
            "border": 1,
            "align": "center",
            "valign": "vcenter",
            "text_wrap": True,
        })
        self.formats["currency"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["currency_format"],
            "border": 1,
        })
        self.formats["percentage"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["percentage_format"],
            "border": 1,
        })
        self.formats["integer"] = self.workbook.add_format({
            "num_format": OUTPUT_SETTINGS["integer_format"],
            "border": 1,
        })
        self.formats["default"] = self.workbook.add_format({"border": 1})
        self.formats["label"] = self.workbook.add_format({"bold": True, "border": 1})

        for status, color in GATE_COLORS.items():
            self.formats[status] = self.workbook.add_format({
                "bg_color": color,
                "border": 1,
                "align": "center",
            })

    def _get_column_format(self, column_name: str) -> Any:
        if column_name in _CURRENCY_COLUMNS:
            return self.formats["currency"]
        if column_name == "Profit %":
            return self.formats["percentage"]
        if column_name == "Quantity":
            return self.formats["integer"]
        return self.formats["default"]

    def _gate_format(self, gate_count: int) -> Any:
        if gate_count == len(GATE_NAMES):
            return self.formats["pass"]
        if gate_count >= WARN_GATE_THRESHOLD:
            return self.formats["warn"]
        return self.formats["fail"]

    def create_products_sheet(
        self,
        products: Sequence[CanonicalProduct],
        sheet_name: str = "Products",
    ) -> Worksheet:
        """
        Create the product listing sheet.

        Args:
            products: Scored canonical products.
            sheet_name: Name of the worksheet.

        Returns:
            The created worksheet.
        """
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)

        for col_idx, (col_name, width) in enumerate(PRODUCT_COLUMNS.items()):
            ws.write(0, col_idx, col_name, self.formats["header"])
            ws.set_column(col_idx, col_idx, width)

        for row_idx, product in enumerate(products, start=1):
            record = product_record(product)
            for col_idx, col_name in enumerate(PRODUCT_COLUMNS):
                value = record[col_name]
                if col_name == "Gates Passed":
                    ws.write(row_idx, col_idx, value, self._gate_format(product.gate_count))
                elif value == "" or value is None:
                    ws.write_blank(row_idx, col_idx, None, self._get_column_format(col_name))
                else:
                    ws.write(row_idx, col_idx, value, self._get_column_format(col_name))

        ws.freeze_panes(1, 0)
        if products:
            ws.autofilter(0, 0, len(products), len(PRODUCT_COLUMNS) - 1)

        return ws

    def create_summary_sheet(self, report: IntakeReport, sheet_name: str = "Summary") -> Worksheet:
        """Create a key/value sheet with the report counts and features."""
        if self.workbook is None:
            raise RuntimeError("Workbook not initialized")

        ws = self.workbook.add_worksheet(sheet_name)
        ws.set_column(0, 0, 22)
        ws.set_column(1, 1, 50)

        ws.write(0, 0, "Metric", self.formats["header"])
        ws.write(0, 1, "Value", self.formats["header"])

        rows = [
            ("Format", report.format.value),
            ("Total Rows", report.total_rows),
            ("Total Columns", report.total_cols),
            ("Unique Products", report.unique_products),
            ("Removed Rows", report.removed_rows),
            ("Removed Columns", report.removed_cols),
            ("Passed (5/5)", report.passed),
            ("Warned (3-4/5)", report.warned),
            ("Failed (<3/5)", report.failed),
            ("Processing Time (ms)", report.processing_time_ms),
        ]
        for reason, count in report.removal_reasons.items():
            rows.append((f"Removed: {reason}", count))
        for feature in report.detected_features:
            rows.append(("Feature", feature))

        for row_idx, (label, value) in enumerate(rows, start=1):
            ws.write(row_idx, 0, label, self.formats["label"])
            ws.write(row_idx, 1, value, self.formats["default"])

        return ws

    def export_report(
        self,
        report: IntakeReport,
        stem: str = "upload",
        output_filename: str | None = None,
    ) -> Path:
        """
        Write a complete intake workbook.

        Args:
            report: Result of the pipeline.
            stem: Source file stem used in the generated file name.
            output_filename: Custom output filename. If None, auto-generated.

        Returns:
            Path to the created workbook.
        """
        if output_filename is None:
            output_filename = self._generate_filename(stem)

        output_path = self.output_path / output_filename

        self.workbook = xlsxwriter.Workbook(str(output_path))
        self._setup_formats()

        try:
            self.create_products_sheet(report.products, "Products")
            self.create_summary_sheet(report, "Summary")
        finally:
            self.workbook.close()
            self.workbook = None

        logger.info(f"Exported {len(report.products)} products to {output_path}")
        return output_path


def export_products_xlsx(
    report: IntakeReport,
    stem: str = "upload",
    output_path: Path | str | None = None,
    output_filename: str | None = None,
) -> Path:
    """Convenience wrapper around ProductExporter.export_report."""
    return ProductExporter(output_path).export_report(report, stem, output_filename)


def export_products_csv(products: Sequence[CanonicalProduct], path: Path | str) -> Path:
    """Write products to CSV in the export column layout."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    products_to_frame(products).to_csv(csv_path, index=False)
    logger.info(f"Exported {len(products)} products to {csv_path}")
    return csv_path
