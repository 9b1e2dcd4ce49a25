"""
Pipeline orchestrator.

Wires schema detection, column mapping, row normalization and gate scoring
into one call that turns decoded tabular data into an IntakeReport. The
orchestrator never raises for data-quality problems; bad input shows up as
gate scores and counts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter
from typing import TYPE_CHECKING, Any

from catalog_intake.column_mapper import ColumnMapper
from catalog_intake.config import DEFAULT_CONFIG, PipelineConfig
from catalog_intake.excel_exporter import products_to_frame
from catalog_intake.file_loader import read_table
from catalog_intake.gates import GateEvaluator
from catalog_intake.identifiers import collect_identifiers
from catalog_intake.logger import debug_watcher, get_logger
from catalog_intake.models import GATE_NAMES, WARN_GATE_THRESHOLD, CanonicalProduct
from catalog_intake.normalization import RowNormalizer
from catalog_intake.schema_detector import SourceFormat, detect_identifier_list, detect_source_format

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    import pandas as pd

    from catalog_intake.column_mapper import ColumnMap

logger = get_logger(__name__)


@dataclass
class IntakeReport:
    """Result of processing one uploaded file."""

    format: SourceFormat = SourceFormat.UNKNOWN
    total_rows: int = 0
    total_cols: int = 0
    unique_products: int = 0
    removed_rows: int = 0
    removed_cols: int = 0
    detected_features: list[str] = field(default_factory=list)
    products: list[CanonicalProduct] = field(default_factory=list)
    passed: int = 0
    failed: int = 0
    warned: int = 0
    processing_time_ms: int = 0
    column_map: dict[str, str | None] = field(default_factory=dict)
    removal_reasons: dict[str, int] = field(default_factory=dict)

    def tally(self) -> None:
        """Recount product and gate totals from the product list."""
        all_gates = len(GATE_NAMES)
        self.unique_products = len(self.products)
        self.passed = sum(1 for p in self.products if p.gate_count == all_gates)
        self.failed = sum(1 for p in self.products if p.gate_count < WARN_GATE_THRESHOLD)
        self.warned = self.unique_products - self.passed - self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format.value,
            "totalRows": self.total_rows,
            "totalCols": self.total_cols,
            "uniqueProducts": self.unique_products,
            "removedRows": self.removed_rows,
            "removedCols": self.removed_cols,
            "detectedFeatures": list(self.detected_features),
            "products": [p.to_dict() for p in self.products],
            "passed": self.passed,
            "failed": self.failed,
            "warned": self.warned,
            "processingTimeMs": self.processing_time_ms,
            "columnMap": dict(self.column_map),
            "removalReasons": dict(self.removal_reasons),
        }

    def to_frame(self) -> pd.DataFrame:
        """Products as a DataFrame in the export column layout."""
        return products_to_frame(self.products)


def _elapsed_ms(start: float) -> int:
    return round((perf_counter() - start) * 1000)


def detect_features(column_map: ColumnMap) -> list[str]:
    """Human-readable notes about what the mapping found."""
    features = []
    if column_map.get("top_row_flag"):
        features.append("Top Row dedup")
    if column_map.get("dedup_handle"):
        features.append("Handle dedup")
    if column_map.get("image"):
        features.append(f"Image col: {column_map['image']}")
    if column_map.get("identifier"):
        features.append(f"Identifier col: {column_map['identifier']}")
    if column_map.get("description"):
        features.append("Has descriptions")
    return features


def process_identifier_list(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    config: PipelineConfig | None = None,
) -> IntakeReport:
    """
    Build one draft product per distinct identifier found anywhere in the file.

    Header cells are scanned too: a bare list often has no real header row,
    so its first identifier lands in the header position.
    """
    start = perf_counter()
    config = config or DEFAULT_CONFIG
    evaluator = GateEvaluator(config)

    cells = list(headers)
    for row in rows:
        cells.extend(row.values())
    identifiers = collect_identifiers(cells)

    products = [
        evaluator.evaluate(CanonicalProduct(identifier=code, status=config.identifier_list_status))
        for code in identifiers
    ]

    # The header line counts as a data row here
    total_rows = len(rows) + 1
    report = IntakeReport(
        format=SourceFormat.ASIN_LIST,
        total_rows=total_rows,
        total_cols=len(headers),
        removed_rows=max(0, total_rows - len(products)),
        removed_cols=0,
        detected_features=[
            "Identifier extraction",
            f"{len(identifiers)} unique identifiers",
            "Needs enrichment",
        ],
        products=products,
    )
    report.tally()
    report.processing_time_ms = _elapsed_ms(start)
    logger.info(f"Identifier list: {len(identifiers)} unique identifiers from {total_rows} rows")
    return report


@debug_watcher
def process_table(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    config: PipelineConfig | None = None,
) -> IntakeReport:
    """
    Turn decoded headers and rows into an IntakeReport.

    Identifier-list detection runs first; otherwise the file is classified,
    mapped once and normalized row by row.

    Args:
        headers: Raw header strings in file order.
        rows: One mapping per data row, keyed by header.
        config: Pipeline settings (defaults to DEFAULT_CONFIG).

    Returns:
        IntakeReport. Empty input gives an empty report, not an error.
    """
    start = perf_counter()
    config = config or DEFAULT_CONFIG
    headers = list(headers)
    rows = list(rows)

    if not headers or not rows:
        logger.warning("No headers or rows to process; returning empty report")
        return IntakeReport(total_cols=len(headers), processing_time_ms=_elapsed_ms(start))

    if detect_identifier_list(headers, rows, config):
        return process_identifier_list(headers, rows, config)

    source_format = detect_source_format(headers)
    column_map = ColumnMapper().map_columns(headers)
    logger.info(f"Detected format: {source_format.value}")

    result = RowNormalizer(column_map, source_format, config).normalize(rows)

    report = IntakeReport(
        format=source_format,
        total_rows=len(rows),
        total_cols=len(headers),
        removed_rows=result.removed_rows,
        removed_cols=max(0, len(headers) - config.canonical_field_count),
        detected_features=detect_features(column_map),
        products=result.products,
        column_map=column_map,
        removal_reasons=dict(result.removal_reasons),
    )
    report.tally()
    report.processing_time_ms = _elapsed_ms(start)

    logger.info(
        f"{report.unique_products} products: {report.passed} passed, "
        f"{report.warned} warned, {report.failed} failed"
    )
    return report


@debug_watcher
def process_file(
    path: Path | str,
    sheet_name: str | int | None = None,
    config: PipelineConfig | None = None,
) -> IntakeReport:
    """
    Read a file from disk and run it through the pipeline.

    Reader errors (missing file, unsupported format) propagate to the caller.
    """
    headers, rows = read_table(Path(path), sheet_name=sheet_name)
    return process_table(headers, rows, config)
