"""Inventory service — applies order and restock deltas to variant stock.

Every item in a batch is processed on its own: a failure is recorded against
that item and the loop moves on. Each successful mutation of a tracked variant
is followed by exactly one audit entry. A failed audit write is logged for
reconciliation but never rolls back the stock change.

The only error allowed to escape is CatalogUnavailableError on the first
item, which means the catalog is down rather than one line being bad.
"""

from inventory.audit.entry import INCREASING_CHANGES, ChangeSource, ChangeType, InventoryLogEntry, PerformedBy
from inventory.audit.store import AuditLogStore
from inventory.catalog.store import CatalogStore
from inventory.errors import (
    CatalogUnavailableError,
    InsufficientStockError,
    ProductNotFoundError,
    VariantNotFoundError,
)
from inventory.stock.results import (
    AlertStatus,
    ItemError,
    ItemErrorCode,
    LowStockAlert,
    PerformedByInfo,
    SkippedItem,
    StockAvailability,
    StockUpdateResult,
    StockValidation,
    UpdatedItem,
)
from inventory.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    def __init__(self, catalog: CatalogStore, audit_log: AuditLogStore) -> None:
        self.catalog = catalog
        self.audit_log = audit_log

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------
    def decrease_stock(self, items) -> StockUpdateResult:
        """Take ordered quantities out of stock, one `sale` entry per mutation."""
        performed_by = PerformedByInfo(source=ChangeSource.SYSTEM.value)
        return self._process(
            items,
            self.catalog.decrement_stock,
            ChangeType.SALE.value,
            performed_by,
            reason=None,
        )

    def increase_stock(
        self,
        items,
        change_type: str = ChangeType.RESTOCK.value,
        performed_by: PerformedByInfo | None = None,
        reason: str | None = None,
    ) -> StockUpdateResult:
        """Put quantities back into stock (restock, return, cancellation, release)."""
        if change_type not in INCREASING_CHANGES:
            raise ValueError(f"'{change_type}' is not a stock-increasing change type")

        return self._process(
            items,
            self.catalog.increment_stock,
            change_type,
            performed_by or PerformedByInfo(source=ChangeSource.SYSTEM.value),
            reason=reason,
        )

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------
    def validate_stock(self, cart_items) -> StockValidation:
        """Advisory availability check of cart items against each product's first active variant."""
        validation = StockValidation()

        for item in cart_items:
            try:
                product = self.catalog.get(item.product_id)
            except ProductNotFoundError:
                validation.is_valid = False
                validation.out_of_stock.append(
                    StockAvailability(
                        product_id=str(item.product_id),
                        product_name=item.product_name,
                        requested_quantity=item.quantity,
                        reason="Product not found",
                    )
                )
                continue

            variant = product.first_active_variant()
            if variant is None:
                validation.is_valid = False
                validation.out_of_stock.append(
                    StockAvailability(
                        product_id=str(product.id),
                        product_name=product.name,
                        requested_quantity=item.quantity,
                        reason="No active variant available",
                    )
                )
                continue

            counter = variant.counter
            availability = {
                "product_id": str(product.id),
                "product_name": product.name,
                "requested_quantity": item.quantity,
                "variant_sku": variant.sku,
                "available_stock": counter.stock,
            }

            if not counter.track_inventory or counter.allow_backorder:
                validation.items.append(StockAvailability(**availability, is_available=True))
            elif counter.stock == 0:
                validation.is_valid = False
                validation.out_of_stock.append(StockAvailability(**availability, reason="Out of stock"))
            elif counter.stock < item.quantity:
                validation.is_valid = False
                validation.insufficient_stock.append(
                    StockAvailability(**availability, message=f"Only {counter.stock} units available")
                )
            else:
                validation.items.append(StockAvailability(**availability, is_available=True))

        return validation

    def get_low_stock_alerts(self) -> list[LowStockAlert]:
        """Active tracked variants of listed products at or below their threshold."""
        alerts = []
        for product in self.catalog.listed_products():
            for variant in product.variants:
                if not variant.is_active or not variant.is_low_stock():
                    continue

                stock = variant.counter.stock
                alerts.append(
                    LowStockAlert(
                        product_id=str(product.id),
                        product_name=product.name,
                        product_slug=product.slug,
                        variant_id=str(variant.id),
                        variant_sku=variant.sku,
                        variant_name=variant.name,
                        current_stock=stock,
                        threshold=variant.counter.low_stock_threshold,
                        status=(AlertStatus.OUT_OF_STOCK if stock == 0 else AlertStatus.LOW_STOCK).value,
                    )
                )

        return sorted(alerts, key=lambda a: (a.current_stock, a.product_name, a.variant_sku))

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------
    def _process(self, items, mutate, change_type, performed_by, reason) -> StockUpdateResult:
        result = StockUpdateResult()

        for index, item in enumerate(items):
            product_id = str(item.product_id)
            variant_id = str(item.variant_id) if item.variant_id else None

            try:
                change = mutate(item.product_id, item.variant_id, item.quantity)
            except ProductNotFoundError as exc:
                logger.warning("Product not found for stock update", product_id=product_id)
                result.add_error(
                    ItemError(product_id, variant_id, ItemErrorCode.PRODUCT_NOT_FOUND.value, str(exc))
                )
            except VariantNotFoundError as exc:
                logger.warning("Variant not found for stock update", product_id=product_id, variant_id=variant_id)
                result.add_error(
                    ItemError(product_id, variant_id, ItemErrorCode.VARIANT_NOT_FOUND.value, str(exc))
                )
            except InsufficientStockError as exc:
                logger.warning(
                    "Insufficient stock",
                    product_id=product_id,
                    variant_sku=exc.variant_sku,
                    current_stock=exc.current_stock,
                    requested_quantity=exc.requested_quantity,
                )
                result.add_error(
                    ItemError(
                        product_id,
                        variant_id,
                        ItemErrorCode.INSUFFICIENT_STOCK.value,
                        str(exc),
                        current_stock=exc.current_stock,
                        requested_quantity=exc.requested_quantity,
                    )
                )
            except CatalogUnavailableError as exc:
                if index == 0:
                    logger.critical("Catalog unavailable, aborting stock update", error=str(exc))
                    raise
                logger.error("Catalog unavailable mid-batch", product_id=product_id, error=str(exc))
                result.add_error(ItemError(product_id, variant_id, ItemErrorCode.PROCESSING_ERROR.value, str(exc)))
            except Exception as exc:
                logger.exception("Error processing stock item", product_id=product_id, variant_id=variant_id)
                result.add_error(ItemError(product_id, variant_id, ItemErrorCode.PROCESSING_ERROR.value, str(exc)))
            else:
                self._record(result, item, change, change_type, performed_by, reason)

        logger.info(
            "Stock update processed",
            change_type=change_type,
            updated=len(result.updated_items),
            skipped=len(result.skipped_items),
            failed=len(result.errors),
        )
        return result

    def _record(self, result, item, change, change_type, performed_by, reason):
        if not change.tracked:
            result.skipped_items.append(
                SkippedItem(
                    product_id=change.product_id,
                    variant_id=change.variant_id,
                    variant_sku=change.variant_sku,
                    reason="Inventory not tracked",
                )
            )
            return

        logger.info(
            "Stock updated",
            product_id=change.product_id,
            variant_sku=change.variant_sku,
            change_type=change_type,
            previous_stock=change.previous_stock,
            new_stock=change.new_stock,
            backordered=change.backordered,
            order_number=item.order_number,
        )

        audit_logged = self._log_change(item, change, change_type, performed_by, reason)
        result.updated_items.append(
            UpdatedItem(
                product_id=change.product_id,
                product_name=change.product_name,
                variant_id=change.variant_id,
                variant_sku=change.variant_sku,
                previous_stock=change.previous_stock,
                new_stock=change.new_stock,
                quantity=change.quantity,
                backordered=change.backordered,
                audit_logged=audit_logged,
            )
        )

    def _log_change(self, item, change, change_type, performed_by, reason) -> bool:
        try:
            entry = InventoryLogEntry.record(
                change,
                change_type,
                order_id=item.order_id,
                order_number=item.order_number,
                reason=reason,
                performed_by=PerformedBy(
                    user_id=performed_by.user_id,
                    user_name=performed_by.user_name,
                    source=performed_by.source,
                ),
            )
            self.audit_log.log_change(entry)
        except Exception:
            # Stock has already moved; leave it and flag the gap for reconciliation
            logger.exception(
                "Audit log write failed, stock change needs reconciliation",
                product_id=change.product_id,
                variant_id=change.variant_id,
                variant_sku=change.variant_sku,
                change_type=change_type,
                previous_stock=change.previous_stock,
                new_stock=change.new_stock,
                quantity=change.quantity,
                order_id=item.order_id,
            )
            return False
        return True
