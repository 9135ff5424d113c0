import pytest
from inventory.catalog.product import Product
from protean import current_domain


@pytest.fixture(autouse=True)
def _ctx(inventory_bed, reset_domain_data):
    with inventory_bed.domain_context():
        yield
        reset_domain_data(current_domain)


@pytest.fixture()
def product_factory():
    """Build, optionally publish, and persist a product.

    `variants` is a list of add_variant() keyword dicts; by default one
    tracked variant holding 10 units.
    """

    def _make(name="Encore Tour Tee", publish=True, variants=None, **fields):
        product = Product.create(name=name, category=fields.pop("category", "apparel"), **fields)
        for variant in variants or [{"sku": "tee-blk-m", "name": "Black / M", "base_price": 450.0, "stock": 10}]:
            product.add_variant(**variant)
        if publish:
            product.publish()
        repo = current_domain.repository_for(Product)
        repo.add(product)
        return repo.get(product.id)

    return _make
