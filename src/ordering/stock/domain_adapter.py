"""In-process inventory adapter.

Calls the inventory context's service directly, inside the inventory domain
context.
"""

from dataclasses import asdict

from inventory.domain import inventory
from inventory.errors import CatalogUnavailableError, ProductNotFoundError
from inventory.stock import get_inventory_service
from inventory.stock.results import OrderLineItem

from ordering.stock.port import InventoryOutcome, InventoryPort, InventoryUnavailableError, VariantSnapshot


class DomainInventoryAdapter(InventoryPort):
    def describe_variant(self, product_id, variant_id=None, sku=None):
        with inventory.domain_context():
            try:
                product = get_inventory_service().catalog.get(product_id)
            except ProductNotFoundError:
                return None
            except CatalogUnavailableError as exc:
                raise InventoryUnavailableError(str(exc)) from exc

            variant = (
                (variant_id and product.find_variant(variant_id))
                or (sku and product.find_variant_by_sku(sku))
                or (product.variants[0] if product.variants else None)
            )
            if variant is None:
                return None

            return VariantSnapshot(
                product_id=str(product.id),
                product_name=product.name,
                variant_id=str(variant.id),
                sku=variant.sku,
                variant_name=variant.name,
                unit_price=variant.effective_price(),
            )

    def decrease_stock(self, lines):
        with inventory.domain_context():
            try:
                result = get_inventory_service().decrease_stock([OrderLineItem(**line) for line in lines])
            except CatalogUnavailableError as exc:
                raise InventoryUnavailableError(str(exc)) from exc

        return InventoryOutcome(
            success=result.success,
            updated_count=len(result.updated_items),
            errors=[asdict(error) for error in result.errors],
        )
