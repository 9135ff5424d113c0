"""InventoryLogEntry aggregate — one immutable record per stock mutation.

Entries carry a denormalized snapshot of the product and variant so that the
history stays readable after a product is renamed or removed. They are only
ever appended and queried.
"""

import json
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text, ValueObject

from inventory.catalog.product import utc_now
from inventory.domain import inventory


class ChangeType(Enum):
    SALE = "sale"
    RESTOCK = "restock"
    RETURN = "return"
    CANCELLATION = "cancellation"
    ADJUSTMENT = "adjustment"
    RESERVATION = "reservation"
    RELEASE = "release"


class ChangeSource(Enum):
    SYSTEM = "system"
    ADMIN = "admin"
    CUSTOMER = "customer"
    WEBHOOK = "webhook"
    API = "api"


DECREASING_CHANGES = frozenset({ChangeType.SALE.value, ChangeType.RESERVATION.value})
INCREASING_CHANGES = frozenset(
    {
        ChangeType.RESTOCK.value,
        ChangeType.RETURN.value,
        ChangeType.CANCELLATION.value,
        ChangeType.RELEASE.value,
    }
)


@inventory.value_object(part_of="InventoryLogEntry")
class PerformedBy:
    """Who or what caused the stock change."""

    user_id = Identifier()
    user_name = String(max_length=200)
    source = String(choices=ChangeSource, default=ChangeSource.SYSTEM.value)


@inventory.aggregate
class InventoryLogEntry:
    product_id = Identifier(required=True)
    product_name = String(max_length=200)
    product_slug = String(max_length=220)
    variant_id = Identifier(required=True)
    variant_sku = String(required=True, max_length=64)
    variant_name = String(max_length=200)
    change_type = String(required=True, choices=ChangeType)
    previous_stock = Integer(required=True, min_value=0)
    new_stock = Integer(required=True, min_value=0)
    quantity_changed = Integer(required=True, min_value=0)
    backordered = Integer(default=0, min_value=0)
    order_id = Identifier()
    order_number = String(max_length=50)
    reason = String(max_length=500)
    performed_by = ValueObject(PerformedBy)
    details = Text()
    occurred_at = DateTime(required=True, default=utc_now)

    @invariant.post
    def stock_delta_must_match_change_type(self):
        if self.change_type in DECREASING_CHANGES:
            expected = max(0, self.previous_stock - self.quantity_changed)
        elif self.change_type in INCREASING_CHANGES:
            expected = self.previous_stock + self.quantity_changed
        else:
            expected = None

        if expected is not None and self.new_stock != expected:
            raise ValidationError(
                {
                    "new_stock": [
                        f"A {self.change_type} of {self.quantity_changed} from {self.previous_stock} "
                        f"must leave {expected}, not {self.new_stock}"
                    ]
                }
            )

    @classmethod
    def record(
        cls,
        change,
        change_type,
        order_id=None,
        order_number=None,
        reason=None,
        performed_by=None,
        details=None,
    ):
        """Build an entry from a StockChange."""
        return cls(
            product_id=change.product_id,
            product_name=change.product_name,
            product_slug=change.product_slug,
            variant_id=change.variant_id,
            variant_sku=change.variant_sku,
            variant_name=change.variant_name,
            change_type=change_type,
            previous_stock=change.previous_stock,
            new_stock=change.new_stock,
            quantity_changed=change.quantity,
            backordered=change.backordered,
            order_id=order_id,
            order_number=order_number,
            reason=reason,
            performed_by=performed_by or PerformedBy(source=ChangeSource.SYSTEM.value),
            details=json.dumps(details) if details else None,
            occurred_at=utc_now(),
        )

    def direction(self) -> str:
        return "increase" if self.new_stock > self.previous_stock else "decrease"

    def to_display(self) -> dict:
        performed_by = self.performed_by or PerformedBy()
        return {
            "id": str(self.id),
            "product": {
                "id": str(self.product_id),
                "name": self.product_name,
                "slug": self.product_slug,
            },
            "variant": {
                "id": str(self.variant_id),
                "sku": self.variant_sku,
                "name": self.variant_name,
            },
            "change_type": self.change_type,
            "previous_stock": self.previous_stock,
            "new_stock": self.new_stock,
            "quantity_changed": self.quantity_changed,
            "backordered": self.backordered,
            "direction": self.direction(),
            "order_id": str(self.order_id) if self.order_id else None,
            "order_number": self.order_number,
            "reason": self.reason,
            "performed_by": {
                "user_id": str(performed_by.user_id) if performed_by.user_id else None,
                "user_name": performed_by.user_name,
                "source": performed_by.source,
            },
            "details": json.loads(self.details) if self.details else None,
            "occurred_at": self.occurred_at,
        }
