import pytest
from ordering.gateway import set_gateway
from ordering.gateway.fake_adapter import FakeGateway
from ordering.gateway.port import CheckoutLineItem, CheckoutSession
from ordering.stock import set_inventory
from ordering.stock.fake_adapter import FakeInventory
from ordering.stock.port import VariantSnapshot
from protean import current_domain


@pytest.fixture(autouse=True)
def _ctx(ordering_bed, inventory_bed, reset_domain_data):
    with ordering_bed.domain_context():
        yield
        reset_domain_data(current_domain)
    with inventory_bed.domain_context():
        reset_domain_data(current_domain)


@pytest.fixture()
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def fake_inventory():
    fake = FakeInventory()
    fake.add_variant(
        VariantSnapshot(
            product_id="prod-tee",
            product_name="Encore Tour Tee",
            variant_id="var-tee-m",
            sku="TEE-BLK-M",
            variant_name="Black / M",
            unit_price=450.0,
        )
    )
    fake.add_variant(
        VariantSnapshot(
            product_id="prod-lp",
            product_name="Midnight Sessions Vinyl",
            variant_id="var-lp",
            sku="LP-MIDNIGHT",
            variant_name="Standard LP",
            unit_price=799.0,
        )
    )
    set_inventory(fake)
    return fake


@pytest.fixture()
def session_factory():
    """Build a completed checkout session; line items default to 2 tees and 1 LP."""

    def _make(session_id="cs_test_001", line_items=None, metadata=None, **fields):
        if line_items is None:
            line_items = (
                CheckoutLineItem(
                    quantity=2,
                    unit_amount=45000,
                    amount_total=90000,
                    product_id="prod-tee",
                    variant_id="var-tee-m",
                    sku="TEE-BLK-M",
                ),
                CheckoutLineItem(
                    quantity=1,
                    unit_amount=79900,
                    amount_total=79900,
                    product_id="prod-lp",
                    variant_id="var-lp",
                    sku="LP-MIDNIGHT",
                ),
            )
        defaults = {
            "customer_email": "fan@example.com",
            "customer_name": "Ana Torres",
            "amount_total": 197084,
            "payment_intent_id": "pi_test_001",
            "address": {"line1": "Av. Reforma 100", "city": "CDMX", "state": "CDMX", "postal_code": "06600"},
        }
        defaults.update(fields)
        return CheckoutSession(
            id=session_id,
            line_items=tuple(line_items),
            metadata=metadata if metadata is not None else {"subtotal": "1699.00", "tax": "271.84", "total": "1970.84"},
            **defaults,
        )

    return _make


@pytest.fixture()
def completed_event():
    """Webhook event for a completed checkout session."""

    def _make(session_id="cs_test_001"):
        return {
            "id": "evt_test_001",
            "type": "checkout.session.completed",
            "data": {"object": {"id": session_id, "object": "checkout.session"}},
        }

    return _make
