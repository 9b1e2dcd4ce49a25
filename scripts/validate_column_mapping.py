"""
Column Mapping Validation Script

Runs the schema detector and ColumnMapper against every product file in a
directory and reports, per file, the detected format and which canonical
fields were mapped.

Success criteria per file:
- title, identifier and price are mapped (or the file is an identifier list)
"""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from catalog_intake.column_mapper import ColumnMapper
from catalog_intake.config import OUTPUT_PATH
from catalog_intake.file_loader import ALLOWED_SUFFIXES, read_table
from catalog_intake.schema_detector import SourceFormat, classify

# Fields a structured file must supply to be listable
CRITICAL_FIELDS = ["title", "identifier", "price"]


def validate_single_file(filepath: Path, mapper: ColumnMapper) -> dict:
    """Classify and map one file."""
    try:
        headers, rows = read_table(filepath)
        source_format = classify(headers, rows)
        column_map = mapper.map_columns(headers)
        stats = mapper.get_mapping_statistics(column_map, headers)
        missing = [name for name in CRITICAL_FIELDS if column_map.get(name) is None]
        ok = source_format == SourceFormat.ASIN_LIST or not missing

        return {
            "file": filepath.name,
            "format": source_format.value,
            "rows": len(rows),
            "columns": len(headers),
            "coverage": stats["coverage"],
            "column_map": column_map,
            "missing_critical": missing,
            "unused_headers": stats["unused_headers"],
            "ok": ok,
            "error": None,
        }
    except (OSError, ValueError) as e:
        return {
            "file": filepath.name,
            "format": SourceFormat.UNKNOWN.value,
            "rows": 0,
            "columns": 0,
            "coverage": 0.0,
            "column_map": {},
            "missing_critical": CRITICAL_FIELDS,
            "unused_headers": [],
            "ok": False,
            "error": str(e),
        }


def run_validation(directory: Path) -> list[dict]:
    mapper = ColumnMapper()
    files_to_test = sorted(p for p in directory.rglob("*") if p.suffix.lower() in ALLOWED_SUFFIXES)
    print(f"Found {len(files_to_test)} files to validate\n")

    results = []
    for filepath in files_to_test:
        print(f"Validating: {filepath.name}...")
        result = validate_single_file(filepath, mapper)
        results.append(result)

        status = "PASS" if result["ok"] else "FAIL"
        print(f"  {status} {result['format']}, coverage {result['coverage']:.1f}%")
        if result["missing_critical"] and result["format"] != SourceFormat.ASIN_LIST.value:
            print(f"  Missing: {result['missing_critical']}")
        if result["error"]:
            print(f"  ERROR: {result['error']}")

    return results


def generate_report(results: list[dict], output_path: Path) -> None:
    """Write one row per (file, field) mapping to CSV."""
    rows = []
    for result in results:
        for field_name, header in result["column_map"].items():
            rows.append({
                "Source_File": result["file"],
                "Detected_Format": result["format"],
                "Canonical_Field": field_name,
                "Mapped_Header": header or "",
            })

    pd.DataFrame(rows).to_csv(output_path, index=False)
    print(f"\nDetailed report saved to: {output_path}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Validate column mapping over a directory of product files")
    parser.add_argument("directory", type=str, help="Directory to scan")
    parser.add_argument("--report", action="store_true", help="Write a CSV report to output/")
    args = parser.parse_args()

    print("=" * 80)
    print("COLUMN MAPPING VALIDATION")
    print("=" * 80 + "\n")

    results = run_validation(Path(args.directory))
    passed = sum(1 for r in results if r["ok"])
    print(f"\n{passed}/{len(results)} files mapped all critical fields")

    if args.report and results:
        OUTPUT_PATH.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        generate_report(results, OUTPUT_PATH / f"column_mapping_{timestamp}.csv")

    return 0 if passed == len(results) else 1


if __name__ == "__main__":
    sys.exit(main())
