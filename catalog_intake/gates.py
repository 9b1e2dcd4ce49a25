"""
Five-gate listing-readiness check.

Each gate is evaluated fresh on every call:

- title:       fail if empty or the "unknown product" fallback; pass if > 5 chars with no "<"; else warn
- image:       pass if it starts with "http"
- price:       pass if price > 0; warn if only the compare-at price is set
- identifier:  pass if it is a canonical identifier
- description: pass if > 30 chars; warn if non-empty

Pricing (sell price, profit, profit %) is derived once from the cost price and
kept across re-evaluations unless explicitly cleared or forced.
"""

from __future__ import annotations

from typing import Any

from catalog_intake.config import DEFAULT_CONFIG, PipelineConfig
from catalog_intake.content_cleaner import ContentCleaner
from catalog_intake.identifiers import extract_identifier, is_identifier
from catalog_intake.logger import get_logger
from catalog_intake.models import (
    EDITABLE_FIELDS,
    GATE_NAMES,
    CanonicalProduct,
    GateStatus,
    PricingSnapshot,
    StockStatus,
)
from catalog_intake.value_parser import cell_text, parse_price, parse_quantity, strip_quotes

logger = get_logger(__name__)

TITLE_MIN_LENGTH = 5
DESCRIPTION_MIN_LENGTH = 30


def title_gate(title: str, fallback_title: str = "Unknown Product") -> GateStatus:
    # The fallback placeholder scores like a missing title
    if not title or title.lower() == fallback_title.lower():
        return GateStatus.FAIL
    if len(title) > TITLE_MIN_LENGTH and "<" not in title:
        return GateStatus.PASS
    return GateStatus.WARN


def image_gate(image: str) -> GateStatus:
    return GateStatus.PASS if image.startswith("http") else GateStatus.FAIL


def price_gate(price: float, compare_price: float) -> GateStatus:
    if price > 0:
        return GateStatus.PASS
    if compare_price > 0:
        return GateStatus.WARN
    return GateStatus.FAIL


def identifier_gate(identifier: str) -> GateStatus:
    return GateStatus.PASS if is_identifier(identifier) else GateStatus.FAIL


def description_gate(description: str) -> GateStatus:
    if len(description) > DESCRIPTION_MIN_LENGTH:
        return GateStatus.PASS
    if description:
        return GateStatus.WARN
    return GateStatus.FAIL


class GateEvaluator:
    """
    Scores CanonicalProduct records in place.

    Args:
        config: Pipeline settings (markup factor, fallback title).
    """

    def __init__(self, config: PipelineConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._cleaner = ContentCleaner(self.config)

    def compute_gates(self, product: CanonicalProduct) -> dict[str, GateStatus]:
        return {
            "title": title_gate(product.title, self.config.fallback_title),
            "image": image_gate(product.image),
            "price": price_gate(product.price, product.compare_price),
            "identifier": identifier_gate(product.identifier),
            "description": description_gate(product.description),
        }

    def ensure_pricing(self, product: CanonicalProduct, force: bool = False) -> PricingSnapshot | None:
        """
        Derive sell price, profit and profit % from the cost price.

        An existing snapshot is kept unless force=True. Products with no
        positive price get no snapshot.
        """
        if product.pricing is not None and not force:
            return product.pricing
        if product.price <= 0:
            if force:
                product.pricing = None
            return product.pricing

        markup = self.config.markup_factor
        sell_price = round(product.price * markup, 2)
        profit = round(sell_price - product.price, 2)
        profit_percent = round(profit / product.price * 100, 1)
        product.pricing = PricingSnapshot(
            sell_price=sell_price,
            profit=profit,
            profit_percent=profit_percent,
            markup_factor=markup,
        )
        return product.pricing

    def evaluate(self, product: CanonicalProduct) -> CanonicalProduct:
        """Refresh gates/gate_count and fill derived pricing and stock status."""
        product.gates = self.compute_gates(product)
        product.gate_count = sum(1 for name in GATE_NAMES if product.gates[name] == GateStatus.PASS)

        self.ensure_pricing(product)

        # Freshly ingested priced rows are assumed available until enriched
        if product.stock_status == StockStatus.UNKNOWN and product.price > 0 and product.title:
            product.stock_status = StockStatus.IN_STOCK

        return product

    def is_fallback_title(self, title: str) -> bool:
        """True for titles synthesized during ingestion ("Unknown Product", "Amazon Product B0...")."""
        lowered = title.lower()
        synthesized_prefix = f"{self.config.fallback_source_label} Product ".lower()
        return lowered == self.config.fallback_title.lower() or lowered.startswith(synthesized_prefix)

    def is_placeholder(self, name: str, value: Any) -> bool:
        """True when a field still holds an empty or ingestion-default value."""
        if value in ("", 0, 0.0):
            return True
        if name == "title":
            return self.is_fallback_title(value)
        if name == "vendor":
            return value == self.config.default_vendor
        if name == "category":
            return value == self.config.default_category
        return False

    def _coerce_field(self, name: str, value: Any) -> Any:
        if name == "title":
            return strip_quotes(cell_text(value))
        if name == "identifier":
            return extract_identifier(value)
        if name in ("price", "compare_price"):
            return parse_price(value)
        if name == "image":
            image = cell_text(value)
            return image if image.startswith("http") else ""
        if name == "description":
            return self._cleaner.clean(value)
        if name == "quantity":
            return parse_quantity(value, self.config.default_quantity)
        if name == "stock_status":
            return value if isinstance(value, StockStatus) else StockStatus(cell_text(value))
        if name == "vendor":
            return strip_quotes(cell_text(value))[: self.config.vendor_max_length]
        if name == "category":
            return strip_quotes(cell_text(value))[: self.config.category_max_length]
        return cell_text(value)

    def update_product(self, product: CanonicalProduct, **changes: Any) -> CanonicalProduct:
        """
        Apply a user edit and re-score the record.

        Values are normalized the same way ingestion does. Pricing is not
        recomputed; call clear_pricing() or ensure_pricing(force=True) for that.

        Raises:
            ValueError: If a field name is not editable.
        """
        unknown = [name for name in changes if name not in EDITABLE_FIELDS]
        if unknown:
            raise ValueError(f"Fields cannot be edited: {unknown}")

        for name, value in changes.items():
            setattr(product, name, self._coerce_field(name, value))
        logger.debug(f"Edited {product.identifier or product.title!r}: {sorted(changes)}")
        return self.evaluate(product)

    def merge_enrichment(
        self,
        product: CanonicalProduct,
        data: dict[str, Any],
        overwrite: bool = False,
    ) -> CanonicalProduct:
        """
        Merge enrichment data (e.g. a marketplace lookup) into the record.

        Empty values are ignored. Existing non-empty fields are kept unless
        overwrite=True. The stock status is always taken from the enrichment
        when present, since it reflects real availability.
        """
        merged = []
        for name in EDITABLE_FIELDS:
            if name not in data:
                continue
            value = self._coerce_field(name, data[name])
            if value in ("", 0, 0.0, None):
                continue
            current = getattr(product, name)
            if name == "stock_status" or overwrite or self.is_placeholder(name, current):
                setattr(product, name, value)
                merged.append(name)

        if merged:
            logger.debug(f"Merged enrichment into {product.identifier or product.title!r}: {merged}")
        return self.evaluate(product)


def clear_pricing(product: CanonicalProduct) -> CanonicalProduct:
    """Drop derived pricing so the next evaluation recomputes it."""
    product.pricing = None
    return product


_DEFAULT_EVALUATOR = GateEvaluator()


def run_gates(product: CanonicalProduct) -> CanonicalProduct:
    """Score a product with the default configuration."""
    return _DEFAULT_EVALUATOR.evaluate(product)
