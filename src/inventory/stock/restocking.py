"""Admin restock — command and handler.

Restocks, customer returns, cancellations and reservation releases all add
stock back to variants through the inventory service.
"""

import json

from protean import handle
from protean.fields import Identifier, String, Text

from inventory.audit.entry import ChangeSource, ChangeType
from inventory.catalog.product import Product
from inventory.domain import inventory
from inventory.stock import get_inventory_service
from inventory.stock.results import OrderLineItem, PerformedByInfo


@inventory.command(part_of="Product")
class ReplenishStock:
    """Add stock to one or more variants and record why."""

    items = Text(required=True)  # JSON list of {product_id, variant_id, quantity, order_id?, order_number?}
    change_type = String(required=True, default=ChangeType.RESTOCK.value)
    reason = String(max_length=500)
    performed_by_user_id = Identifier()
    performed_by_name = String(max_length=200)
    source = String(default=ChangeSource.ADMIN.value)


@inventory.command_handler(part_of=Product)
class ReplenishStockHandler:
    @handle(ReplenishStock)
    def replenish_stock(self, command):
        items = [OrderLineItem(**raw) for raw in json.loads(command.items)]
        result = get_inventory_service().increase_stock(
            items,
            change_type=command.change_type,
            performed_by=PerformedByInfo(
                source=command.source,
                user_id=command.performed_by_user_id,
                user_name=command.performed_by_name,
            ),
            reason=command.reason,
        )
        return result.to_dict()
