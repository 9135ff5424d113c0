"""Pydantic request/response schemas for the Inventory API.

These are external contracts, separate from the service result dataclasses.
JSON uses camelCase (`changeType`, `previousStock`, ...); requests accept
either casing.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Checkout validation
# ---------------------------------------------------------------------------
class CartItemSchema(CamelModel):
    product_id: str
    quantity: int = Field(ge=1)
    product_name: str | None = None


class ValidateStockRequest(CamelModel):
    items: list[CartItemSchema] = Field(min_length=1)


class StockAvailabilitySchema(CamelModel):
    product_id: str
    product_name: str | None = None
    requested_quantity: int
    variant_sku: str | None = None
    available_stock: int | None = None
    is_available: bool = False
    reason: str | None = None
    message: str | None = None


class StockValidationResponse(CamelModel):
    is_valid: bool
    items: list[StockAvailabilitySchema] = []
    out_of_stock: list[StockAvailabilitySchema] = []
    insufficient_stock: list[StockAvailabilitySchema] = []


# ---------------------------------------------------------------------------
# Restock
# ---------------------------------------------------------------------------
class RestockItemSchema(CamelModel):
    product_id: str
    variant_id: str
    quantity: int = Field(ge=1)
    order_id: str | None = None
    order_number: str | None = None


class RestockRequest(CamelModel):
    items: list[RestockItemSchema] = Field(min_length=1)
    change_type: Literal["restock", "return", "cancellation", "release"] = "restock"
    reason: str | None = Field(default=None, max_length=500)
    performed_by_user_id: str | None = None
    performed_by_name: str | None = None


class ItemErrorSchema(CamelModel):
    product_id: str
    variant_id: str | None = None
    code: str
    message: str
    current_stock: int | None = None
    requested_quantity: int | None = None


class UpdatedItemSchema(CamelModel):
    product_id: str
    product_name: str
    variant_id: str
    variant_sku: str
    previous_stock: int
    new_stock: int
    quantity: int
    backordered: int = 0
    audit_logged: bool = True


class SkippedItemSchema(CamelModel):
    product_id: str
    variant_id: str
    variant_sku: str
    reason: str


class StockUpdateResponse(CamelModel):
    success: bool
    updated_items: list[UpdatedItemSchema] = []
    skipped_items: list[SkippedItemSchema] = []
    errors: list[ItemErrorSchema] = []


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------
class ProductRefSchema(CamelModel):
    id: str
    name: str | None = None
    slug: str | None = None


class VariantRefSchema(CamelModel):
    id: str
    sku: str
    name: str | None = None


class PerformedBySchema(CamelModel):
    user_id: str | None = None
    user_name: str | None = None
    source: str


class LogEntrySchema(CamelModel):
    id: str
    product: ProductRefSchema
    variant: VariantRefSchema
    change_type: str
    previous_stock: int
    new_stock: int
    quantity_changed: int
    backordered: int = 0
    direction: Literal["increase", "decrease"]
    order_id: str | None = None
    order_number: str | None = None
    reason: str | None = None
    performed_by: PerformedBySchema
    details: dict | None = None
    occurred_at: datetime


class LogListResponse(CamelModel):
    count: int
    logs: list[LogEntrySchema]


class ChangeTypeStatsSchema(CamelModel):
    change_type: str
    count: int
    total_quantity_changed: int


class StatsResponse(CamelModel):
    stats: list[ChangeTypeStatsSchema]


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------
class LowStockAlertSchema(CamelModel):
    product_id: str
    product_name: str
    product_slug: str
    variant_id: str
    variant_sku: str
    variant_name: str
    current_stock: int
    threshold: int
    status: Literal["OUT_OF_STOCK", "LOW_STOCK"]


class LowStockAlertsResponse(CamelModel):
    count: int
    alerts: list[LowStockAlertSchema]
