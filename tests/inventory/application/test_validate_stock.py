"""Checkout-time availability checks."""

from inventory.stock import get_inventory_service
from inventory.stock.results import CartItem


class TestValidateStock:
    def test_all_available(self, product_factory):
        product = product_factory()
        validation = get_inventory_service().validate_stock([CartItem(str(product.id), 2)])

        assert validation.is_valid is True
        item = validation.items[0]
        assert item.is_available is True
        assert item.variant_sku == "TEE-BLK-M"
        assert item.available_stock == 10

    def test_unknown_product_is_out_of_stock(self):
        validation = get_inventory_service().validate_stock([CartItem("missing", 1, product_name="Ghost Tee")])

        assert validation.is_valid is False
        entry = validation.out_of_stock[0]
        assert entry.reason == "Product not found"
        assert entry.product_name == "Ghost Tee"

    def test_no_active_variant(self, product_factory):
        product = product_factory(
            publish=False,
            variants=[{"sku": "old", "name": "Old", "base_price": 100.0, "stock": 5, "is_active": False}],
        )
        validation = get_inventory_service().validate_stock([CartItem(str(product.id), 1)])

        assert validation.out_of_stock[0].reason == "No active variant available"

    def test_sold_out(self, product_factory):
        product = product_factory(publish=False, variants=[{"sku": "a", "name": "A", "base_price": 1.0, "stock": 0}])
        validation = get_inventory_service().validate_stock([CartItem(str(product.id), 1)])

        assert validation.is_valid is False
        assert validation.out_of_stock[0].reason == "Out of stock"
        assert validation.out_of_stock[0].available_stock == 0

    def test_insufficient(self, product_factory):
        product = product_factory(variants=[{"sku": "a", "name": "A", "base_price": 1.0, "stock": 3}])
        validation = get_inventory_service().validate_stock([CartItem(str(product.id), 5)])

        assert validation.is_valid is False
        assert validation.insufficient_stock[0].message == "Only 3 units available"
        assert validation.items == []

    def test_untracked_and_backorderable_are_available(self, product_factory):
        poster = product_factory(
            name="Tour Poster",
            variants=[{"sku": "poster", "name": "Poster", "base_price": 250.0, "track_inventory": False}],
        )
        vinyl = product_factory(
            name="Limited Vinyl",
            variants=[{"sku": "lp", "name": "LP", "base_price": 1199.0, "stock": 1, "allow_backorder": True}],
        )
        validation = get_inventory_service().validate_stock(
            [CartItem(str(poster.id), 100), CartItem(str(vinyl.id), 4)],
        )

        assert validation.is_valid is True
        assert len(validation.items) == 2

    def test_validation_does_not_change_stock(self, product_factory):
        product = product_factory()
        service = get_inventory_service()
        service.validate_stock([CartItem(str(product.id), 3)])

        assert service.catalog.get(product.id).variants[0].counter.stock == 10
        assert service.audit_log.get_history(product.id) == []

    def test_mixed_cart_collects_every_problem(self, product_factory):
        ok = product_factory()
        short = product_factory(name="Short Tee", variants=[{"sku": "s", "name": "S", "base_price": 1.0, "stock": 1}])
        validation = get_inventory_service().validate_stock(
            [CartItem(str(ok.id), 1), CartItem(str(short.id), 2), CartItem("missing", 1)],
        )

        assert validation.is_valid is False
        assert len(validation.items) == 1
        assert len(validation.insufficient_stock) == 1
        assert len(validation.out_of_stock) == 1
