"""Stripe payment gateway adapter.

Uses the stripe SDK to verify webhook signatures and to fetch completed
checkout sessions with their line items expanded down to the product, whose
metadata carries the catalog productId / variantId / sku.

Without a webhook secret, verification is skipped outside production so the
webhook can be exercised locally with the Stripe CLI.
"""

import json

import stripe

from ordering.gateway.port import CheckoutLineItem, CheckoutSession, InvalidWebhookSignature, PaymentGateway
from ordering.utils.logging import get_logger

logger = get_logger(__name__)


class StripeGateway(PaymentGateway):
    def __init__(self, api_key: str, webhook_secret: str | None = None, environment: str = "development") -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.environment = environment

    def construct_event(self, payload, signature):
        if not self.webhook_secret:
            if self.environment == "production":
                raise InvalidWebhookSignature("Webhook secret is not configured")
            logger.warning("Webhook signature verification skipped, no secret configured")
            return json.loads(payload)

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except ValueError as exc:
            raise InvalidWebhookSignature(f"Invalid payload: {exc}") from exc
        except stripe.SignatureVerificationError as exc:
            raise InvalidWebhookSignature(str(exc)) from exc
        return json.loads(payload)

    def retrieve_checkout_session(self, session_id):
        session = stripe.checkout.Session.retrieve(
            session_id,
            expand=["line_items.data.price.product"],
            api_key=self.api_key,
        )
        details = session.get("customer_details") or {}

        return CheckoutSession(
            id=session["id"],
            customer_email=session.get("customer_email") or details.get("email"),
            amount_total=session.get("amount_total") or 0,
            currency=session.get("currency") or "mxn",
            customer_name=details.get("name"),
            customer_phone=details.get("phone"),
            payment_intent_id=session.get("payment_intent"),
            payment_status=session.get("payment_status") or "paid",
            metadata=dict(session.get("metadata") or {}),
            address=dict(details.get("address") or {}),
            line_items=tuple(self._line_item(item) for item in session["line_items"]["data"]),
        )

    @staticmethod
    def _line_item(item) -> CheckoutLineItem:
        price = item["price"]
        product = price.get("product")
        # Unexpanded products arrive as a bare id string
        metadata = (product.get("metadata") or {}) if isinstance(product, dict) else {}
        return CheckoutLineItem(
            quantity=item["quantity"],
            unit_amount=price.get("unit_amount") or 0,
            amount_total=item.get("amount_total") or 0,
            product_id=metadata.get("productId"),
            variant_id=metadata.get("variantId"),
            sku=metadata.get("sku"),
            description=item.get("description"),
        )
