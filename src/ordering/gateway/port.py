"""Payment gateway port (abstract interface).

The gateway is an opaque source of "checkout completed / order paid" events.
Ordering only needs two things from it: a verified webhook event, and the
completed checkout session with its line items.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class InvalidWebhookSignature(Exception):
    """The webhook payload could not be authenticated."""


@dataclass(frozen=True)
class CheckoutLineItem:
    """One purchased line. Amounts are in the currency's minor unit (cents)."""

    quantity: int
    unit_amount: int
    amount_total: int
    product_id: str | None = None
    variant_id: str | None = None
    sku: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class CheckoutSession:
    id: str
    customer_email: str | None
    amount_total: int
    currency: str = "mxn"
    customer_name: str | None = None
    customer_phone: str | None = None
    payment_intent_id: str | None = None
    payment_status: str = "paid"
    metadata: dict = field(default_factory=dict)
    address: dict = field(default_factory=dict)
    line_items: tuple[CheckoutLineItem, ...] = ()


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def construct_event(self, payload: bytes, signature: str) -> dict:
        """Verify a webhook payload and return the decoded event.

        Raises InvalidWebhookSignature when verification fails.
        """
        ...

    @abstractmethod
    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session together with its line items."""
        ...
