"""FastAPI routes for the Inventory domain — checkout validation, restock and reporting."""

import json
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, HTTPException, Query
from protean.utils.globals import current_domain

from inventory.api.schemas import (
    ChangeTypeStatsSchema,
    LogEntrySchema,
    LogListResponse,
    LowStockAlertSchema,
    LowStockAlertsResponse,
    RestockRequest,
    StatsResponse,
    StockUpdateResponse,
    StockValidationResponse,
    ValidateStockRequest,
)
from inventory.audit.store import DEFAULT_HISTORY_LIMIT, DEFAULT_SEARCH_LIMIT
from inventory.stock import get_inventory_service
from inventory.stock.restocking import ReplenishStock
from inventory.stock.results import CartItem

inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])

ChangeTypeName = Literal["sale", "restock", "return", "cancellation", "adjustment", "reservation", "release"]


def _aware(value: datetime | None) -> datetime | None:
    """Treat naive query datetimes as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _log_list(entries) -> LogListResponse:
    return LogListResponse(
        count=len(entries),
        logs=[LogEntrySchema.model_validate(entry.to_display()) for entry in entries],
    )


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@inventory_router.post("/validate", response_model=StockValidationResponse)
async def validate_stock(body: ValidateStockRequest) -> StockValidationResponse:
    """Check cart items against current stock before checkout."""
    validation = get_inventory_service().validate_stock(
        [CartItem(product_id=i.product_id, quantity=i.quantity, product_name=i.product_name) for i in body.items]
    )
    response = StockValidationResponse.model_validate(validation.to_dict())
    if not validation.is_valid:
        detail = response.model_dump(by_alias=True, include={"out_of_stock", "insufficient_stock"})
        raise HTTPException(
            status_code=400,
            detail={"message": "Some products are not available in the requested quantity", **detail},
        )
    return response


# ---------------------------------------------------------------------------
# Restock (admin)
# ---------------------------------------------------------------------------
@inventory_router.post("/restock", response_model=StockUpdateResponse)
async def restock(body: RestockRequest) -> StockUpdateResponse:
    """Add stock back to variants (restock, return, cancellation, release)."""
    command = ReplenishStock(
        items=json.dumps([item.model_dump() for item in body.items]),
        change_type=body.change_type,
        reason=body.reason,
        performed_by_user_id=body.performed_by_user_id,
        performed_by_name=body.performed_by_name,
    )
    result = current_domain.process(command, asynchronous=False)
    return StockUpdateResponse.model_validate(result)


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------
@inventory_router.get("/logs", response_model=LogListResponse)
async def list_logs(
    limit: int = Query(default=DEFAULT_SEARCH_LIMIT, ge=1, le=1000),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    change_type: ChangeTypeName | None = Query(default=None, alias="changeType"),
    product_id: str | None = Query(default=None, alias="productId"),
) -> LogListResponse:
    """List audit entries across all products, newest first."""
    entries = get_inventory_service().audit_log.search(
        limit=limit,
        start_date=_aware(start_date),
        end_date=_aware(end_date),
        change_type=change_type,
        product_id=product_id,
    )
    return _log_list(entries)


@inventory_router.get("/logs/product/{product_id}", response_model=LogListResponse)
async def product_history(
    product_id: str,
    variant_id: str | None = Query(default=None, alias="variantId"),
    limit: int = Query(default=DEFAULT_HISTORY_LIMIT, ge=1, le=1000),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
) -> LogListResponse:
    """Stock history of one product, optionally narrowed to a variant."""
    entries = get_inventory_service().audit_log.get_history(
        product_id,
        variant_id=variant_id,
        limit=limit,
        start_date=_aware(start_date),
        end_date=_aware(end_date),
    )
    return _log_list(entries)


@inventory_router.get("/logs/order/{order_id}", response_model=LogListResponse)
async def order_history(order_id: str) -> LogListResponse:
    """Stock movements recorded for one order."""
    return _log_list(get_inventory_service().audit_log.get_by_order(order_id))


@inventory_router.get("/stats", response_model=StatsResponse)
async def stats(
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    change_type: ChangeTypeName | None = Query(default=None, alias="changeType"),
) -> StatsResponse:
    """Per change type counts and quantity totals."""
    rows = get_inventory_service().audit_log.get_stats(
        start_date=_aware(start_date),
        end_date=_aware(end_date),
        change_type=change_type,
    )
    return StatsResponse(stats=[ChangeTypeStatsSchema.model_validate(asdict(row)) for row in rows])


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------
@inventory_router.get("/alerts/low-stock", response_model=LowStockAlertsResponse)
async def low_stock_alerts() -> LowStockAlertsResponse:
    """Listed variants at or below their low-stock threshold."""
    alerts = get_inventory_service().get_low_stock_alerts()
    return LowStockAlertsResponse(
        count=len(alerts),
        alerts=[LowStockAlertSchema.model_validate(asdict(alert)) for alert in alerts],
    )
