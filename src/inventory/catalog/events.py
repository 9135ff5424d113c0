"""Domain events raised by the Product aggregate when stock moves."""

from protean.fields import DateTime, Identifier, Integer, String

from inventory.domain import inventory


@inventory.event(part_of="Product")
class VariantStockChanged:
    """A variant's stock counter was decremented or incremented."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    sku = String(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    quantity = Integer(required=True)
    backordered = Integer(default=0)
    changed_at = DateTime(required=True)


@inventory.event(part_of="Product")
class LowStockDetected:
    """A tracked variant dropped to or below its low-stock threshold."""

    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    sku = String(required=True)
    current_stock = Integer(required=True)
    threshold = Integer(required=True)
    detected_at = DateTime(required=True)


@inventory.event(part_of="Product")
class ProductStatusChanged:
    """Publish status flipped because aggregate stock ran out or came back."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
