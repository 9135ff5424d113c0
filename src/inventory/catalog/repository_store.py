"""Catalog store backed by the Protean Product repository.

Stock writes are read-mutate-commit loops guarded by Product.revision: the
commit re-reads the persisted revision and only writes if it still matches
what was loaded. On a conflict the product is reloaded and the mutation is
re-evaluated against the fresh stock, so a concurrent decrement can turn a
would-be success into InsufficientStockError instead of a lost update.

The revision check and the write are two statements; the write itself is
conditional on the version that was loaded, which closes the gap between them.
"""

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy.exc import DBAPIError

from inventory.catalog.product import LISTED_STATUSES, Product
from inventory.catalog.store import CatalogStore
from inventory.errors import CatalogUnavailableError, ProductNotFoundError, StaleProductError
from inventory.utils.logging import get_logger

logger = get_logger(__name__)

# Storage failures that mean the catalog cannot be reached at all
_UNAVAILABLE = (DBAPIError, ConnectionError)


class RepositoryCatalogStore(CatalogStore):
    max_attempts = 5
    page_size = 100

    def get(self, product_id):
        return self._load(product_id)

    def decrement_stock(self, product_id, variant_id, quantity):
        return self._apply(product_id, lambda product: product.decrement_stock(variant_id, quantity))

    def increment_stock(self, product_id, variant_id, quantity):
        return self._apply(product_id, lambda product: product.increment_stock(variant_id, quantity))

    def listed_products(self):
        for status in LISTED_STATUSES:
            offset = 0
            while True:
                items = self._page(status, offset)
                yield from items
                if len(items) < self.page_size:
                    break
                offset += self.page_size

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------
    def _repository(self):
        return current_domain.repository_for(Product)

    def _page(self, status, offset):
        try:
            return (
                self._repository()
                ._dao.query.filter(status=status)
                .order_by("name")
                .offset(offset)
                .limit(self.page_size)
                .all()
                .items
            )
        except _UNAVAILABLE as exc:
            raise CatalogUnavailableError(str(exc)) from exc

    def _load(self, product_id):
        try:
            return self._repository().get(product_id)
        except ObjectNotFoundError:
            raise ProductNotFoundError(product_id) from None
        except _UNAVAILABLE as exc:
            raise CatalogUnavailableError(str(exc)) from exc

    def _apply(self, product_id, mutate):
        for attempt in range(1, self.max_attempts + 1):
            product = self._load(product_id)
            expected_revision = product.revision
            change = mutate(product)
            if not change.tracked:
                return change

            try:
                self._commit(product, expected_revision)
            except (StaleProductError, ExpectedVersionError) as exc:
                logger.info(
                    "Stock write conflict, retrying",
                    product_id=str(product_id),
                    attempt=attempt,
                    reason=str(exc),
                )
                continue
            return change

        raise StaleProductError(product_id, expected_revision, self._load(product_id).revision)

    def _commit(self, product, expected_revision):
        persisted = self._load(product.id)
        if persisted.revision != expected_revision:
            raise StaleProductError(product.id, expected_revision, persisted.revision)

        product.revision = expected_revision + 1
        self._write(product)

    def _write(self, product):
        # The update carries the aggregate's loaded `_version` as a predicate
        # (`UPDATE ... WHERE _version = :loaded` on SQLAlchemy, checked under
        # the store lock in memory), so a write landing after the revision
        # check fails with ExpectedVersionError rather than being overwritten.
        try:
            self._repository().add(product)
        except _UNAVAILABLE as exc:
            raise CatalogUnavailableError(str(exc)) from exc
