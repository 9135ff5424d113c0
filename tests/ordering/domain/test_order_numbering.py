from datetime import UTC, datetime

from ordering.order.numbering import format_order_number, next_order_number, order_day
from ordering.order.order import Order, OrderPricing
from protean import current_domain


def _place(number, day):
    current_domain.repository_for(Order).add(
        Order.create(
            order_number=number,
            order_day=day,
            customer_email="fan@example.com",
            items=[
                {
                    "product_id": "prod-tee",
                    "product_name": "Encore Tour Tee",
                    "variant_id": "var-tee-m",
                    "sku": "TEE-BLK-M",
                    "quantity": 1,
                    "unit_price": 450.0,
                    "total_price": 450.0,
                }
            ],
            pricing=OrderPricing(subtotal=450.0, total=450.0),
        )
    )


class TestOrderNumbering:
    def test_order_day(self):
        assert order_day(datetime(2026, 3, 1, 23, 59, tzinfo=UTC)) == "20260301"

    def test_format_pads_sequence(self):
        assert format_order_number("20260301", 7) == "ORD-20260301-0007"
        assert format_order_number("20260301", 12345) == "ORD-20260301-12345"

    def test_first_order_of_the_day(self):
        assert next_order_number("20260301") == "ORD-20260301-0001"

    def test_sequence_counts_orders_of_the_same_day(self):
        _place("ORD-20260301-0001", "20260301")
        _place("ORD-20260301-0002", "20260301")
        _place("ORD-20260228-0001", "20260228")

        assert next_order_number("20260301") == "ORD-20260301-0003"
        assert next_order_number("20260228") == "ORD-20260228-0002"
        assert next_order_number("20260302") == "ORD-20260302-0001"
