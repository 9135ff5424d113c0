"""Order aggregate — an order created from a paid checkout session.

Items, pricing and shipping are snapshots taken when the session completes;
they never follow later catalog changes. Whether the ordered stock was taken
out of inventory is tracked separately in `inventory_status`, and any failure
is written to the order as a private system note.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from ordering.domain import ordering

TAX_RATE = 0.16
FREE_SHIPPING_THRESHOLD = 1000.0
STANDARD_SHIPPING = 150.0


def utc_now() -> datetime:
    return datetime.now(UTC)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class InventoryStatus(Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    PARTIAL = "partial"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    first_name = String(max_length=100, default="Cliente")
    last_name = String(max_length=100)
    street = String(max_length=255, default="Pendiente")
    apartment = String(max_length=100)
    city = String(max_length=100, default="Pendiente")
    state = String(max_length=100, default="Pendiente")
    postal_code = String(max_length=20, default="00000")
    country = String(max_length=2, default="MX")
    phone = String(max_length=30, default="Pendiente")


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Totals locked at checkout. The total must add up to the cent."""

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    tax_rate = Float(default=TAX_RATE)
    shipping = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, default="MXN")

    @invariant.post
    def total_must_add_up(self):
        expected = self.subtotal + self.tax + self.shipping - self.discount
        if abs(expected - self.total) > 0.01:
            raise ValidationError(
                {"total": [f"Total {self.total:.2f} does not match subtotal, tax, shipping and discount ({expected:.2f})"]}
            )


@ordering.value_object(part_of="Order")
class PaymentDetails:
    method = String(max_length=20, default="stripe")
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    paid_at = DateTime()
    payment_intent_id = String(max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    variant_id = Identifier(required=True)
    sku = String(required=True, max_length=64)
    variant_name = String(max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)


@ordering.entity(part_of="Order")
class OrderNote:
    author = String(required=True, max_length=100, default="System")
    content = Text(required=True)
    is_private = Boolean(default=True)
    created_at = DateTime(default=utc_now)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=20)
    # YYYYMMDD the order number sequence belongs to
    order_day = String(required=True, max_length=8)
    checkout_session_id = String(max_length=255, unique=True)
    customer_email = String(required=True, max_length=254)
    customer_name = String(max_length=200)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing, required=True)
    payment = ValueObject(PaymentDetails)
    shipping_address = ValueObject(ShippingAddress)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    inventory_status = String(choices=InventoryStatus, default=InventoryStatus.PENDING.value)
    notes = HasMany(OrderNote)
    created_at = DateTime(default=utc_now)
    updated_at = DateTime(default=utc_now)

    @classmethod
    def create(
        cls,
        order_number,
        order_day,
        customer_email,
        items,
        pricing,
        payment=None,
        shipping_address=None,
        customer_name=None,
        checkout_session_id=None,
        status=OrderStatus.PENDING.value,
    ):
        """Create an order from item snapshots.

        Args:
            items: list of dicts with product_id, product_name, variant_id,
                   sku, variant_name, quantity, unit_price, total_price.
            pricing: OrderPricing value object.
        """
        if not items:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = utc_now()
        order = cls(
            order_number=order_number,
            order_day=order_day,
            checkout_session_id=checkout_session_id,
            customer_email=customer_email,
            customer_name=customer_name,
            pricing=pricing,
            payment=payment or PaymentDetails(),
            shipping_address=shipping_address or ShippingAddress(),
            status=status,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(OrderItem(**item))
        return order

    def inventory_lines(self) -> list[dict]:
        """Quantities to take out of stock, one line per item."""
        return [
            {
                "product_id": str(item.product_id),
                "variant_id": str(item.variant_id),
                "quantity": item.quantity,
                "order_id": str(self.id),
                "order_number": self.order_number,
            }
            for item in self.items
        ]

    def add_note(self, content, author="System", is_private=True):
        note = OrderNote(author=author, content=content, is_private=is_private, created_at=utc_now())
        self.add_notes(note)
        self.updated_at = utc_now()
        return note

    def mark_inventory_committed(self):
        self.inventory_status = InventoryStatus.COMMITTED.value
        self.updated_at = utc_now()

    def mark_inventory_failed(self, errors, partial: bool):
        """Record inventory errors as a private note; the order itself stands."""
        self.inventory_status = (InventoryStatus.PARTIAL if partial else InventoryStatus.FAILED).value
        self.add_note(f"Inventory update failed: {errors}")

    def mark_inventory_critical(self, message):
        self.inventory_status = InventoryStatus.FAILED.value
        self.add_note(f"CRITICAL: Inventory update failed - {message}")
