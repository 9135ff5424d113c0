"""Pydantic response schemas for the Ordering API."""

from pydantic import BaseModel


class WebhookAck(BaseModel):
    received: bool = True
