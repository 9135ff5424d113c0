"""Configurable fake payment gateway for development and testing.

Sessions are registered up front with register_session(); webhooks are
accepted when signed with "test-signature".
"""

import json

from ordering.gateway.port import CheckoutSession, InvalidWebhookSignature, PaymentGateway

TEST_SIGNATURE = "test-signature"


class FakeGateway(PaymentGateway):
    def __init__(self) -> None:
        self.sessions: dict[str, CheckoutSession] = {}
        self.calls: list[dict] = []

    def register_session(self, session: CheckoutSession) -> None:
        self.sessions[session.id] = session

    def construct_event(self, payload, signature):
        self.calls.append({"method": "construct_event", "signature": signature})
        if signature != TEST_SIGNATURE:
            raise InvalidWebhookSignature("Signature does not match")
        try:
            return json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidWebhookSignature(f"Malformed payload: {exc}") from exc

    def retrieve_checkout_session(self, session_id):
        self.calls.append({"method": "retrieve_checkout_session", "session_id": session_id})
        try:
            return self.sessions[session_id]
        except KeyError:
            raise LookupError(f"Checkout session {session_id} not found") from None
