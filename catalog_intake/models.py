"""
Canonical product record produced by the intake pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class GateStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class StockStatus(str, Enum):
    IN_STOCK = "InStock"
    OUT_OF_STOCK = "OutOfStock"
    UNKNOWN = "Unknown"


# Listing-readiness gates, in display order
GATE_NAMES = ("title", "image", "price", "identifier", "description")

# Fewer passing gates than this counts as failed; below all five as warned
WARN_GATE_THRESHOLD = 3


def _failed_gates() -> dict[str, GateStatus]:
    return {name: GateStatus.FAIL for name in GATE_NAMES}


@dataclass(frozen=True)
class PricingSnapshot:
    """Derived pricing, assigned once from the cost price."""

    sell_price: float
    profit: float
    profit_percent: float
    markup_factor: float


@dataclass
class CanonicalProduct:
    """
    One listing candidate.

    `gates` and `gate_count` are derived and refreshed by the GateEvaluator
    after every mutation; `pricing` is None until it has been computed.
    """

    title: str = ""
    identifier: str = ""
    price: float = 0.0
    compare_price: float = 0.0
    image: str = ""
    description: str = ""
    vendor: str = ""
    category: str = ""
    tags: str = ""
    status: str = "Active"
    quantity: int = 999
    dedup_handle: str = ""
    stock_status: StockStatus = StockStatus.UNKNOWN
    pricing: PricingSnapshot | None = None
    gates: dict[str, GateStatus] = field(default_factory=_failed_gates)
    gate_count: int = 0

    @property
    def sell_price(self) -> float:
        return self.pricing.sell_price if self.pricing else 0.0

    @property
    def profit(self) -> float:
        return self.pricing.profit if self.pricing else 0.0

    @property
    def profit_percent(self) -> float:
        return self.pricing.profit_percent if self.pricing else 0.0

    @property
    def is_ready(self) -> bool:
        return self.gate_count == len(GATE_NAMES)

    def to_dict(self) -> dict[str, Any]:
        """Flat, JSON-friendly record (camelCase keys, as consumed by the dashboard)."""
        return {
            "title": self.title,
            "identifier": self.identifier,
            "price": self.price,
            "comparePrice": self.compare_price,
            "sellPrice": self.sell_price,
            "profit": self.profit,
            "profitPercent": self.profit_percent,
            "image": self.image,
            "description": self.description,
            "vendor": self.vendor,
            "category": self.category,
            "tags": self.tags,
            "status": self.status,
            "quantity": self.quantity,
            "dedupHandle": self.dedup_handle,
            "stockStatus": self.stock_status.value,
            "gates": {name: status.value for name, status in self.gates.items()},
            "gateCount": self.gate_count,
        }


# Fields a user edit or an enrichment merge may set
EDITABLE_FIELDS = (
    "title",
    "identifier",
    "price",
    "compare_price",
    "image",
    "description",
    "vendor",
    "category",
    "tags",
    "status",
    "quantity",
    "stock_status",
)
