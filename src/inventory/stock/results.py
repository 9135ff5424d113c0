"""Input contracts and result shapes of the inventory service.

Per-item failures are carried as ItemError values with a stable code instead
of being raised, so one bad line never aborts the rest of a batch.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum


class ItemErrorCode(Enum):
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    VARIANT_NOT_FOUND = "VARIANT_NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    PROCESSING_ERROR = "PROCESSING_ERROR"


class AlertStatus(Enum):
    OUT_OF_STOCK = "OUT_OF_STOCK"
    LOW_STOCK = "LOW_STOCK"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class OrderLineItem:
    """One order line to apply to a variant's stock."""

    product_id: str
    variant_id: str
    quantity: int
    order_id: str | None = None
    order_number: str | None = None


@dataclass(frozen=True)
class CartItem:
    """One cart line to check before checkout."""

    product_id: str
    quantity: int
    product_name: str | None = None


@dataclass(frozen=True)
class PerformedByInfo:
    source: str = "system"
    user_id: str | None = None
    user_name: str | None = None


# ---------------------------------------------------------------------------
# Stock mutation results
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ItemError:
    product_id: str
    variant_id: str | None
    code: str
    message: str
    current_stock: int | None = None
    requested_quantity: int | None = None


@dataclass(frozen=True)
class UpdatedItem:
    product_id: str
    product_name: str
    variant_id: str
    variant_sku: str
    previous_stock: int
    new_stock: int
    quantity: int
    backordered: int = 0
    audit_logged: bool = True


@dataclass(frozen=True)
class SkippedItem:
    product_id: str
    variant_id: str
    variant_sku: str
    reason: str


@dataclass
class StockUpdateResult:
    success: bool = True
    updated_items: list[UpdatedItem] = field(default_factory=list)
    skipped_items: list[SkippedItem] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)

    def add_error(self, error: ItemError) -> None:
        self.errors.append(error)
        self.success = False

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Validation and reporting results
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class StockAvailability:
    product_id: str
    product_name: str | None
    requested_quantity: int
    variant_sku: str | None = None
    available_stock: int | None = None
    is_available: bool = False
    reason: str | None = None
    message: str | None = None


@dataclass
class StockValidation:
    is_valid: bool = True
    items: list[StockAvailability] = field(default_factory=list)
    out_of_stock: list[StockAvailability] = field(default_factory=list)
    insufficient_stock: list[StockAvailability] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LowStockAlert:
    product_id: str
    product_name: str
    product_slug: str
    variant_id: str
    variant_sku: str
    variant_name: str
    current_stock: int
    threshold: int
    status: str
