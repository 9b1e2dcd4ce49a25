"""
Catalog Intake - End-to-End Execution

This is the main entry point for the product file intake pipeline.
It runs the full workflow for one uploaded file:

1. Load and validate configuration
2. Read the file (CSV/TSV/XLSX/XLS) into headers and rows
3. Detect the source format, map columns, deduplicate and clean rows
4. Score every product against the five listing gates
5. Export the results to an Excel workbook (and optionally CSV)

Usage:
    python main.py --file <filepath> [--output <dir>] [--sheet <name>] [--config <json>]

Examples:
    python main.py --file uploads/matrixify_export.xlsx
    python main.py --file asins.csv --csv
    python main.py --file products.csv --no-export
"""

from __future__ import annotations

import argparse
import sys
import traceback
from datetime import datetime
from pathlib import Path

from catalog_intake.config import OUTPUT_PATH, ensure_directories, load_config, validate_config
from catalog_intake.excel_exporter import export_products_csv, export_products_xlsx
from catalog_intake.file_loader import read_table
from catalog_intake.pipeline import IntakeReport, process_table


def log(message: str, level: str = "INFO") -> None:
    """Simple logging function."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] [{level}] {message}")


def run_pipeline(
    filepath: Path | str,
    output_path: Path | str | None = None,
    sheet_name: str | None = None,
    config_path: Path | str | None = None,
    export_xlsx: bool = True,
    export_csv: bool = False,
) -> IntakeReport | None:
    """
    Run the complete intake pipeline on one file.

    Args:
        filepath: Path to the uploaded product file.
        output_path: Output directory. If None, uses the default output/ folder.
        sheet_name: Workbook sheet to read (first sheet if None).
        config_path: Optional JSON file with pipeline overrides.
        export_xlsx: Whether to write the intake workbook.
        export_csv: Whether to also write a CSV of the products.

    Returns:
        The IntakeReport, or None if the configuration is invalid.
    """
    start_time = datetime.now()
    log("=" * 60)
    log("CATALOG INTAKE")
    log("=" * 60)

    # Step 1: Validate configuration
    log("Step 1: Validating configuration...")
    config = load_config(config_path)
    is_valid, errors = validate_config(config)
    if not is_valid:
        log(f"Configuration errors: {errors}", "ERROR")
        return None
    if output_path is None:
        ensure_directories()
    log(f"Configuration validated (markup x{config.markup_factor:.2f})")

    # Step 2: Read file
    filepath = Path(filepath)
    log(f"Step 2: Reading {filepath.name}...")
    headers, rows = read_table(filepath, sheet_name=sheet_name)
    log(f"  Rows: {len(rows)}, Columns: {len(headers)}")

    # Step 3-4: Classify, map, normalize, score
    log("Step 3: Processing rows...")
    report = process_table(headers, rows, config)
    log(f"  Format: {report.format.value}")
    for feature in report.detected_features:
        log(f"  Feature: {feature}")
    log(f"  Unique products: {report.unique_products} (removed {report.removed_rows} rows)")
    for reason, count in report.removal_reasons.items():
        log(f"    {reason}: {count}")

    log("Step 4: Gate results...")
    log(f"  Passed: {report.passed}")
    log(f"  Warned: {report.warned}")
    log(f"  Failed: {report.failed}")

    # Step 5: Export
    if export_xlsx or export_csv:
        log("Step 5: Exporting...")
    if export_xlsx:
        workbook = export_products_xlsx(report, stem=filepath.stem, output_path=output_path)
        log(f"  Workbook: {workbook}")
    if export_csv:
        csv_dir = Path(output_path) if output_path else OUTPUT_PATH
        csv_file = export_products_csv(report.products, csv_dir / f"intake_{filepath.stem}.csv")
        log(f"  CSV: {csv_file}")

    elapsed = (datetime.now() - start_time).total_seconds()
    log("=" * 60)
    log("INTAKE COMPLETE")
    log("=" * 60)
    log(f"Execution time: {elapsed:.1f} seconds")

    return report


def main(argv: list[str] | None = None) -> int:
    """Main entry point with argument parsing."""
    parser = argparse.ArgumentParser(
        description="Catalog Intake - product file validation and export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --file uploads/export.xlsx        # Process and export workbook
  python main.py --file asins.csv --csv            # Also write CSV
  python main.py --file products.csv --no-export   # Summary only
        """
    )

    parser.add_argument(
        "--file", "-f",
        type=str,
        required=True,
        help="Path to the product file (CSV, TSV, XLSX, XLSM, XLS)"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output directory (optional, uses default output/ if not provided)"
    )
    parser.add_argument(
        "--sheet",
        type=str,
        default=None,
        help="Workbook sheet name (optional, first sheet if not provided)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Pipeline config JSON (optional, uses config/pipeline.json if present)"
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Also export products as CSV"
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        help="Skip workbook export"
    )

    args = parser.parse_args(argv)

    try:
        report = run_pipeline(
            filepath=args.file,
            output_path=args.output,
            sheet_name=args.sheet,
            config_path=args.config,
            export_xlsx=not args.no_export,
            export_csv=args.csv,
        )
        return 0 if report is not None else 1

    except (OSError, ValueError) as e:
        log(f"Pipeline failed: {e}", "ERROR")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
