"""FastAPI routes for the Ordering domain — payment webhook."""

from fastapi import APIRouter, Header, HTTPException, Request

from ordering.api.schemas import WebhookAck
from ordering.gateway import get_gateway
from ordering.gateway.port import InvalidWebhookSignature
from ordering.order.ingestion import OrderIngestion
from ordering.utils.logging import get_logger

logger = get_logger(__name__)

webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/payments", response_model=WebhookAck)
async def payment_webhook(request: Request, stripe_signature: str = Header(default="")) -> WebhookAck:
    """Receive a payment gateway event.

    Answers 401 when the signature does not verify; once verified the event is
    always acknowledged, even if processing it failed.
    """
    payload = await request.body()
    try:
        event = get_gateway().construct_event(payload, stripe_signature)
    except InvalidWebhookSignature as exc:
        logger.warning("Rejected webhook with invalid signature", error=str(exc))
        raise HTTPException(status_code=401, detail="Invalid webhook signature") from None

    OrderIngestion().handle_event(event)
    return WebhookAck(received=True)
