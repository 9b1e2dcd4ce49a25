"""
Row normalization module.

Turns raw spreadsheet rows into CanonicalProduct records in a single pass:
top-row filtering, field extraction and cleaning, identifier/handle
deduplication, and gate scoring. Dedup state lives only for one run.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from catalog_intake.config import DEFAULT_CONFIG, PipelineConfig
from catalog_intake.content_cleaner import ContentCleaner
from catalog_intake.gates import GateEvaluator
from catalog_intake.identifiers import extract_identifier
from catalog_intake.logger import get_logger
from catalog_intake.models import CanonicalProduct
from catalog_intake.schema_detector import SourceFormat
from catalog_intake.value_parser import cell_text, parse_flag, parse_price, parse_quantity, strip_quotes

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from catalog_intake.column_mapper import ColumnMap

logger = get_logger(__name__)

# Discard reasons, in the order they are checked
TOP_ROW_FILTERED = "top_row_filtered"
EMPTY_ROW = "empty_row"
DUPLICATE_IDENTIFIER = "duplicate_identifier"
DUPLICATE_HANDLE = "duplicate_handle"


@dataclass
class NormalizationResult:
    """Products that survived plus discard accounting."""

    products: list[CanonicalProduct] = field(default_factory=list)
    total_rows: int = 0
    removal_reasons: Counter = field(default_factory=Counter)

    @property
    def removed_rows(self) -> int:
        return sum(self.removal_reasons.values())


class RowNormalizer:
    """
    Row reducer. Dedup state is local to each normalize() call.

    Args:
        column_map: Canonical field -> header mapping for this file.
        source_format: Detected format (informational, used in logs).
        config: Pipeline settings.
    """

    def __init__(
        self,
        column_map: ColumnMap,
        source_format: SourceFormat = SourceFormat.UNKNOWN,
        config: PipelineConfig | None = None,
    ):
        self.column_map = column_map
        self.source_format = source_format
        self.config = config or DEFAULT_CONFIG
        self.cleaner = ContentCleaner(self.config)
        self.evaluator = GateEvaluator(self.config)

    def _get(self, row: Mapping[str, Any], field_name: str) -> str:
        header = self.column_map.get(field_name)
        if header is None:
            return ""
        return cell_text(row.get(header, ""))

    def build_product(self, row: Mapping[str, Any], title: str, identifier: str, handle: str) -> CanonicalProduct:
        """Build (unscored) canonical fields from a row that passed the filters."""
        config = self.config

        if not title:
            title = f"{config.fallback_source_label} Product {identifier}" if identifier else config.fallback_title

        image = self._get(row, "image")
        vendor = strip_quotes(self._get(row, "vendor"))
        category = strip_quotes(self._get(row, "category"))
        status = self._get(row, "status")

        quantity_cell = self._get(row, "quantity")
        quantity = parse_quantity(quantity_cell, config.default_quantity) if quantity_cell else config.default_quantity

        return CanonicalProduct(
            title=title,
            identifier=identifier,
            price=parse_price(self._get(row, "price")),
            compare_price=parse_price(self._get(row, "compare_price")),
            image=image if image.startswith("http") else "",
            description=self.cleaner.clean(self._get(row, "description")),
            vendor=vendor[: config.vendor_max_length] or config.default_vendor,
            category=category[: config.category_max_length] or config.default_category,
            tags=self._get(row, "tags"),
            status=status or config.default_status,
            quantity=quantity,
            dedup_handle=handle,
        )

    def normalize(self, rows: Iterable[Mapping[str, Any]]) -> NormalizationResult:
        """
        Reduce rows to unique, scored products in original order.

        Every discarded row is counted under exactly one reason, so
        total_rows == removed_rows + len(products).
        """
        result = NormalizationResult()
        seen_identifiers: set[str] = set()
        seen_handles: set[str] = set()
        has_top_row = self.column_map.get("top_row_flag") is not None

        for row_num, row in enumerate(rows, start=1):
            result.total_rows += 1

            if has_top_row and not parse_flag(self._get(row, "top_row_flag")):
                result.removal_reasons[TOP_ROW_FILTERED] += 1
                continue

            title = strip_quotes(self._get(row, "title")).strip()
            identifier = extract_identifier(self._get(row, "identifier"))
            handle = self._get(row, "dedup_handle")

            if not title and not identifier and not handle:
                result.removal_reasons[EMPTY_ROW] += 1
                logger.debug(f"Row {row_num}: no title, identifier or handle")
                continue

            if identifier and identifier in seen_identifiers:
                result.removal_reasons[DUPLICATE_IDENTIFIER] += 1
                logger.debug(f"Row {row_num}: duplicate identifier {identifier}")
                continue
            if not identifier and handle and handle in seen_handles:
                result.removal_reasons[DUPLICATE_HANDLE] += 1
                logger.debug(f"Row {row_num}: duplicate handle {handle!r}")
                continue

            if identifier:
                seen_identifiers.add(identifier)
            if handle:
                seen_handles.add(handle)

            product = self.build_product(row, title, identifier, handle)
            result.products.append(self.evaluator.evaluate(product))

        logger.info(
            f"Normalized {result.total_rows} rows ({self.source_format.value}): "
            f"{len(result.products)} products, {result.removed_rows} removed "
            f"{dict(result.removal_reasons)}"
        )
        return result


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    column_map: ColumnMap,
    source_format: SourceFormat = SourceFormat.UNKNOWN,
    config: PipelineConfig | None = None,
) -> NormalizationResult:
    """Run a fresh RowNormalizer over the rows."""
    return RowNormalizer(column_map, source_format, config).normalize(rows)
