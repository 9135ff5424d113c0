"""Two checkouts racing for the same variant must never oversell it."""

from inventory.audit.memory_store import InMemoryAuditLogStore
from inventory.catalog.product import Product
from inventory.catalog.repository_store import RepositoryCatalogStore
from inventory.errors import StaleProductError
from inventory.stock.results import ItemErrorCode, OrderLineItem
from inventory.stock.service import InventoryService
from protean import current_domain


class RacingCatalog(RepositoryCatalogStore):
    """Lets a competing write land between our read and our commit."""

    def __init__(self, competitor):
        self.competitor = competitor
        self.raced = False

    def _load(self, product_id):
        product = super()._load(product_id)
        if not self.raced:
            self.raced = True
            self.competitor()
        return product


class LateWriteCatalog(RepositoryCatalogStore):
    """Lets a competing write land after the revision check, just before our write."""

    def __init__(self, competitor):
        self.competitor = competitor

    def _write(self, product):
        if self.competitor is not None:
            competitor, self.competitor = self.competitor, None
            competitor()
        super()._write(product)


class AlwaysStaleCatalog(RepositoryCatalogStore):
    max_attempts = 3

    def __init__(self):
        self.commits = 0

    def _commit(self, product, expected_revision):
        self.commits += 1
        raise StaleProductError(product.id, expected_revision, expected_revision + 1)


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).variants[0].counter.stock


class TestConcurrentDecrement:
    def test_loser_sees_fresh_stock_and_fails(self, product_factory):
        product = product_factory(variants=[{"sku": "lp", "name": "LP", "base_price": 799.0, "stock": 5}])
        line = OrderLineItem(str(product.id), str(product.variants[0].id), 3)
        winner_log = InMemoryAuditLogStore()
        loser_log = InMemoryAuditLogStore()
        winner = InventoryService(RepositoryCatalogStore(), winner_log)

        results = []
        loser = InventoryService(
            RacingCatalog(lambda: results.append(winner.decrease_stock([line]))),
            loser_log,
        )
        results.append(loser.decrease_stock([line]))
        winner_result, loser_result = results

        assert winner_result.success is True
        assert winner_result.updated_items[0].new_stock == 2

        assert loser_result.success is False
        error = loser_result.errors[0]
        assert error.code == ItemErrorCode.INSUFFICIENT_STOCK.value
        assert error.current_stock == 2
        assert error.requested_quantity == 3

        assert _stock(product.id) == 2
        assert len(winner_log.entries) == 1
        assert loser_log.entries == []

    def test_write_after_revision_check_is_still_rejected(self, product_factory):
        product = product_factory(variants=[{"sku": "lp", "name": "LP", "base_price": 799.0, "stock": 5}])
        line = OrderLineItem(str(product.id), str(product.variants[0].id), 3)
        winner = InventoryService(RepositoryCatalogStore(), InMemoryAuditLogStore())
        loser = InventoryService(LateWriteCatalog(lambda: winner.decrease_stock([line])), InMemoryAuditLogStore())

        result = loser.decrease_stock([line])

        assert result.success is False
        assert result.errors[0].code == ItemErrorCode.INSUFFICIENT_STOCK.value
        assert result.errors[0].current_stock == 2
        assert _stock(product.id) == 2

    def test_loser_retries_and_succeeds_when_stock_allows(self, product_factory):
        product = product_factory(variants=[{"sku": "lp", "name": "LP", "base_price": 799.0, "stock": 10}])
        line = OrderLineItem(str(product.id), str(product.variants[0].id), 3)
        winner = InventoryService(RepositoryCatalogStore(), InMemoryAuditLogStore())
        loser = InventoryService(RacingCatalog(lambda: winner.decrease_stock([line])), InMemoryAuditLogStore())

        result = loser.decrease_stock([line])

        assert result.success is True
        assert result.updated_items[0].previous_stock == 7
        assert result.updated_items[0].new_stock == 4
        assert _stock(product.id) == 4
        assert current_domain.repository_for(Product).get(product.id).revision == 2

    def test_gives_up_after_max_attempts(self, product_factory):
        product = product_factory()
        catalog = AlwaysStaleCatalog()
        service = InventoryService(catalog, InMemoryAuditLogStore())

        result = service.decrease_stock([OrderLineItem(str(product.id), str(product.variants[0].id), 1)])

        assert catalog.commits == 3
        assert result.errors[0].code == ItemErrorCode.PROCESSING_ERROR.value
        assert _stock(product.id) == 10
