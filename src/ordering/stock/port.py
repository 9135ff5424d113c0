"""Inventory port (abstract interface).

Ordering never touches catalog documents directly; it asks the inventory
context for variant snapshots and hands it the quantities to take out of
stock.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class InventoryUnavailableError(Exception):
    """The inventory context could not process the order at all."""


@dataclass(frozen=True)
class VariantSnapshot:
    product_id: str
    product_name: str
    variant_id: str
    sku: str
    variant_name: str
    unit_price: float


@dataclass(frozen=True)
class InventoryOutcome:
    success: bool
    updated_count: int = 0
    errors: list[dict] = field(default_factory=list)


class InventoryPort(ABC):
    @abstractmethod
    def describe_variant(self, product_id: str, variant_id: str | None = None, sku: str | None = None):
        """Snapshot of the variant that was bought, or None if the product is unknown.

        Falls back from variant id to SKU, then to the product's first variant.
        Raises InventoryUnavailableError when the catalog cannot be reached.
        """
        ...

    @abstractmethod
    def decrease_stock(self, lines: list[dict]) -> InventoryOutcome:
        """Take ordered quantities out of stock.

        Per-line failures come back in the outcome; InventoryUnavailableError
        is raised only when nothing could be processed.
        """
        ...
