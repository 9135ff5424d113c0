"""Order ingestion — turns verified payment events into Orders.

For `checkout.session.completed` the order is persisted first and stock is
taken out afterwards, so an inventory failure can never lose a paid order.
Whatever inventory reports back is recorded on the order: committed, or a
private system note describing what failed.

A checkout session that already produced an order is ignored, which keeps a
redelivered webhook from decrementing stock twice.
"""

import json

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.gateway import get_gateway
from ordering.order.numbering import next_order_number, order_day
from ordering.order.order import (
    TAX_RATE,
    Order,
    OrderPricing,
    OrderStatus,
    PaymentDetails,
    PaymentStatus,
    ShippingAddress,
    utc_now,
)
from ordering.stock import get_inventory
from ordering.stock.port import InventoryUnavailableError, VariantSnapshot
from ordering.utils.logging import get_logger

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


def _amount(value) -> float | None:
    if value in (None, ""):
        return None
    return round(float(value), 2)


def _cents(value: int) -> float:
    return round(value / 100, 2)


class OrderIngestion:
    def __init__(self, gateway=None, inventory=None) -> None:
        self.gateway = gateway or get_gateway()
        self.inventory = inventory or get_inventory()
        self._handlers = {
            CHECKOUT_COMPLETED: self.checkout_completed,
            PAYMENT_SUCCEEDED: self.payment_succeeded,
            PAYMENT_FAILED: self.payment_failed,
        }

    def handle_event(self, event: dict):
        """Dispatch one verified gateway event. Never raises."""
        event_type = event.get("type")
        payload = (event.get("data") or {}).get("object") or {}

        handler = self._handlers.get(event_type)
        if handler is None:
            logger.info("Unhandled webhook event type", event_type=event_type, event_id=event.get("id"))
            return None

        try:
            return handler(payload)
        except Exception:
            logger.exception("Error processing webhook event", event_type=event_type, event_id=event.get("id"))
            return None

    # -----------------------------------------------------------------------
    # Event handlers
    # -----------------------------------------------------------------------
    def checkout_completed(self, payload: dict):
        session_id = payload["id"]
        repo = current_domain.repository_for(Order)

        existing = repo._dao.query.filter(checkout_session_id=session_id).all().items
        if existing:
            logger.info(
                "Checkout session already ingested",
                session_id=session_id,
                order_number=existing[0].order_number,
            )
            return existing[0]

        session = self.gateway.retrieve_checkout_session(session_id)
        items, unavailable = self._order_items(session)
        if not items:
            logger.warning("Checkout session has no purchasable items", session_id=session_id)
            return None

        try:
            order = self._build_order(session, items)
        except ValidationError as exc:
            logger.error("Could not build order from checkout session", session_id=session_id, errors=exc.messages)
            return None

        try:
            repo.add(order)
        except ValidationError as exc:
            if "checkout_session_id" not in exc.messages:
                raise
            logger.info("Checkout session ingested concurrently", session_id=session_id)
            return None
        logger.info(
            "Order created from checkout session",
            order_number=order.order_number,
            session_id=session_id,
            total=order.pricing.total,
        )

        if unavailable is not None:
            self._inventory_critical(order, unavailable)
        else:
            self._commit_inventory(order)
        repo.add(order)
        return order

    def payment_succeeded(self, payload: dict):
        logger.info("Payment succeeded", payment_intent_id=payload.get("id"), amount=payload.get("amount"))

    def payment_failed(self, payload: dict):
        error = payload.get("last_payment_error") or {}
        logger.warning("Payment failed", payment_intent_id=payload.get("id"), reason=error.get("message"))

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------
    def _commit_inventory(self, order):
        try:
            outcome = self.inventory.decrease_stock(order.inventory_lines())
        except Exception as exc:
            self._inventory_critical(order, str(exc), exc_info=True)
            return

        if outcome.success:
            order.mark_inventory_committed()
            logger.info("Inventory committed for order", order_number=order.order_number)
            return

        logger.error(
            "Inventory update failed for some items",
            order_number=order.order_number,
            errors=outcome.errors,
        )
        order.mark_inventory_failed(json.dumps(outcome.errors), partial=outcome.updated_count > 0)

    def _inventory_critical(self, order, message, exc_info=False):
        logger.critical(
            "Inventory update failed for order",
            order_number=order.order_number,
            error=message,
            exc_info=exc_info,
        )
        order.mark_inventory_critical(message)

    def _order_items(self, session) -> tuple[list[dict], str | None]:
        """Item snapshots for the session's lines.

        When inventory cannot be reached the lines are taken as the gateway
        reported them, and the reason comes back so the order is still created
        and flagged instead of being dropped.
        """
        items = []
        unavailable = None
        for line in session.line_items:
            if not line.product_id:
                logger.warning("Line item without product reference", session_id=session.id, sku=line.sku)
                continue

            if unavailable is None:
                try:
                    snapshot = self.inventory.describe_variant(
                        line.product_id, variant_id=line.variant_id, sku=line.sku
                    )
                except InventoryUnavailableError as exc:
                    unavailable = str(exc)
                    logger.error(
                        "Inventory unavailable while describing items",
                        session_id=session.id,
                        error=unavailable,
                    )

            if unavailable is not None:
                snapshot = self._line_snapshot(line)
                if snapshot is None:
                    logger.warning("Line item without variant reference", session_id=session.id, sku=line.sku)
                    continue
            elif snapshot is None:
                logger.warning("Product not found for line item", session_id=session.id, product_id=line.product_id)
                continue

            items.append(
                {
                    "product_id": snapshot.product_id,
                    "product_name": snapshot.product_name,
                    "variant_id": snapshot.variant_id,
                    "sku": snapshot.sku,
                    "variant_name": snapshot.variant_name,
                    "quantity": line.quantity,
                    "unit_price": _cents(line.unit_amount),
                    "total_price": _cents(line.amount_total),
                }
            )
        return items, unavailable

    @staticmethod
    def _line_snapshot(line):
        if not (line.variant_id and line.sku):
            return None
        return VariantSnapshot(
            product_id=line.product_id,
            product_name=line.description or line.sku,
            variant_id=line.variant_id,
            sku=line.sku,
            variant_name=line.description or "",
            unit_price=_cents(line.unit_amount),
        )

    def _build_order(self, session, items):
        metadata = session.metadata
        subtotal = _amount(metadata.get("subtotal"))
        if subtotal is None:
            subtotal = round(sum(item["total_price"] for item in items), 2)
        tax = _amount(metadata.get("tax")) or 0.0
        shipping = _amount(metadata.get("shipping")) or 0.0
        total = _amount(metadata.get("total"))
        if total is None:
            total = round(subtotal + tax + shipping, 2)

        name_parts = (session.customer_name or "").split(" ", 1)
        address = session.address

        day = order_day()
        return Order.create(
            order_number=next_order_number(day),
            order_day=day,
            checkout_session_id=session.id,
            customer_email=session.customer_email,
            customer_name=session.customer_name,
            items=items,
            pricing=OrderPricing(
                subtotal=subtotal,
                tax=tax,
                tax_rate=TAX_RATE,
                shipping=shipping,
                total=total,
                currency=session.currency.upper(),
            ),
            payment=PaymentDetails(
                method="stripe",
                status=PaymentStatus.PAID.value,
                paid_at=utc_now(),
                payment_intent_id=session.payment_intent_id,
            ),
            shipping_address=ShippingAddress(
                first_name=metadata.get("firstName") or name_parts[0] or "Cliente",
                last_name=metadata.get("lastName") or (name_parts[1] if len(name_parts) > 1 else ""),
                street=address.get("line1") or "Pendiente",
                apartment=address.get("line2") or "",
                city=address.get("city") or "Pendiente",
                state=address.get("state") or "Pendiente",
                postal_code=address.get("postal_code") or "00000",
                country=address.get("country") or "MX",
                phone=metadata.get("phone") or session.customer_phone or "Pendiente",
            ),
            status=OrderStatus.PROCESSING.value,
        )
