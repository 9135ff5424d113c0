"""Catalog store port.

The stock service never mutates a Product directly. It goes through this
contract, whose decrement/increment operations are conditional updates: a
write only lands if the product has not changed since it was read.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from inventory.catalog.product import Product, StockChange


class CatalogStore(ABC):
    """Abstract access to product documents and their variant counters."""

    @abstractmethod
    def get(self, product_id) -> Product:
        """Return the product or raise ProductNotFoundError."""
        ...

    @abstractmethod
    def decrement_stock(self, product_id, variant_id, quantity: int) -> StockChange:
        """Atomically take `quantity` units from a variant.

        Raises ProductNotFoundError, VariantNotFoundError or
        InsufficientStockError without mutating anything.
        """
        ...

    @abstractmethod
    def increment_stock(self, product_id, variant_id, quantity: int) -> StockChange:
        """Atomically add `quantity` units to a variant."""
        ...

    @abstractmethod
    def listed_products(self) -> Iterator[Product]:
        """Yield every product visible in the storefront (published or out of stock)."""
        ...
