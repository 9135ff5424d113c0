"""Tests for the Order aggregate."""

import pytest
from ordering.order.order import (
    InventoryStatus,
    Order,
    OrderPricing,
    OrderStatus,
    ShippingAddress,
)
from protean import current_domain
from protean.exceptions import ValidationError


def _items():
    return [
        {
            "product_id": "prod-tee",
            "product_name": "Encore Tour Tee",
            "variant_id": "var-tee-m",
            "sku": "TEE-BLK-M",
            "variant_name": "Black / M",
            "quantity": 2,
            "unit_price": 450.0,
            "total_price": 900.0,
        }
    ]


def _order(**overrides):
    fields = {
        "order_number": "ORD-20260301-0001",
        "order_day": "20260301",
        "customer_email": "fan@example.com",
        "items": _items(),
        "pricing": OrderPricing(subtotal=900.0, tax=144.0, shipping=0.0, total=1044.0),
    }
    fields.update(overrides)
    return Order.create(**fields)


class TestOrderCreation:
    def test_create(self):
        order = _order()

        assert order.order_number == "ORD-20260301-0001"
        assert order.status == OrderStatus.PENDING.value
        assert order.inventory_status == InventoryStatus.PENDING.value
        assert len(order.items) == 1
        assert order.items[0].sku == "TEE-BLK-M"
        assert order.pricing.currency == "MXN"

    def test_requires_items(self):
        with pytest.raises(ValidationError) as exc:
            _order(items=[])
        assert "items" in exc.value.messages

    def test_requires_customer_email(self):
        with pytest.raises(ValidationError):
            _order(customer_email=None)

    def test_missing_address_uses_placeholders(self):
        address = _order().shipping_address
        assert address.first_name == "Cliente"
        assert address.street == "Pendiente"
        assert address.postal_code == "00000"
        assert address.country == "MX"

    def test_explicit_address_is_kept(self):
        order = _order(shipping_address=ShippingAddress(first_name="Ana", city="Guadalajara"))
        assert order.shipping_address.city == "Guadalajara"


class TestOrderPricing:
    def test_total_must_add_up(self):
        with pytest.raises(ValidationError) as exc:
            OrderPricing(subtotal=900.0, tax=144.0, total=1000.0)
        assert "total" in exc.value.messages

    def test_cent_rounding_is_tolerated(self):
        pricing = OrderPricing(subtotal=899.99, tax=144.0, total=1043.995)
        assert pricing.total == 1043.995

    def test_discount_is_subtracted(self):
        pricing = OrderPricing(subtotal=900.0, tax=144.0, discount=100.0, total=944.0)
        assert pricing.discount == 100.0


class TestInventoryTracking:
    def test_inventory_lines(self):
        order = _order()
        assert order.inventory_lines() == [
            {
                "product_id": "prod-tee",
                "variant_id": "var-tee-m",
                "quantity": 2,
                "order_id": str(order.id),
                "order_number": "ORD-20260301-0001",
            }
        ]

    def test_committed(self):
        order = _order()
        order.mark_inventory_committed()

        assert order.inventory_status == InventoryStatus.COMMITTED.value
        assert order.notes == []

    def test_failed_writes_private_note(self):
        order = _order()
        order.mark_inventory_failed('[{"code": "INSUFFICIENT_STOCK"}]', partial=False)

        assert order.inventory_status == InventoryStatus.FAILED.value
        note = order.notes[0]
        assert note.content == 'Inventory update failed: [{"code": "INSUFFICIENT_STOCK"}]'
        assert note.author == "System"
        assert note.is_private is True

    def test_partial_failure(self):
        order = _order()
        order.mark_inventory_failed("[]", partial=True)
        assert order.inventory_status == InventoryStatus.PARTIAL.value

    def test_critical_failure(self):
        order = _order()
        order.mark_inventory_critical("catalog unreachable")

        assert order.inventory_status == InventoryStatus.FAILED.value
        assert order.notes[0].content == "CRITICAL: Inventory update failed - catalog unreachable"

    def test_failure_keeps_order_status(self):
        order = _order(status=OrderStatus.PROCESSING.value)
        order.mark_inventory_critical("down")
        assert order.status == OrderStatus.PROCESSING.value


class TestCheckoutSessionUniqueness:
    def test_second_order_for_same_session_is_rejected(self):
        repo = current_domain.repository_for(Order)
        repo.add(_order(checkout_session_id="cs_test_001"))

        with pytest.raises(ValidationError) as exc:
            repo.add(_order(order_number="ORD-20260301-0002", checkout_session_id="cs_test_001"))

        assert "checkout_session_id" in exc.value.messages

    def test_saving_an_order_again_is_allowed(self):
        repo = current_domain.repository_for(Order)
        order = _order(checkout_session_id="cs_test_001")
        repo.add(order)

        order.mark_inventory_committed()
        repo.add(order)

        assert repo.get(order.id).inventory_status == InventoryStatus.COMMITTED.value
