"""Typed failures raised by the catalog and audit stores.

The stock service translates these into per-item error codes; only
CatalogUnavailableError is allowed to escape it.
"""


class InventoryError(Exception):
    """Base class for inventory failures."""


class ProductNotFoundError(InventoryError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class VariantNotFoundError(InventoryError):
    def __init__(self, product_id, variant_id):
        self.product_id = product_id
        self.variant_id = variant_id
        super().__init__(f"Variant {variant_id} not found in product {product_id}")


class InsufficientStockError(InventoryError):
    def __init__(self, variant_sku, current_stock: int, requested_quantity: int):
        self.variant_sku = variant_sku
        self.current_stock = current_stock
        self.requested_quantity = requested_quantity
        super().__init__(
            f"Insufficient stock for {variant_sku}: requested {requested_quantity}, available {current_stock}"
        )


class StaleProductError(InventoryError):
    """The product changed between read and conditional write."""

    def __init__(self, product_id, expected_revision: int, actual_revision: int):
        self.product_id = product_id
        self.expected_revision = expected_revision
        self.actual_revision = actual_revision
        super().__init__(
            f"Product {product_id} was modified concurrently "
            f"(expected revision {expected_revision}, found {actual_revision})"
        )


class CatalogUnavailableError(InventoryError):
    """The catalog storage could not be reached."""


class AuditLogWriteError(InventoryError):
    """An audit entry could not be persisted."""
