"""Order numbers: ORD-YYYYMMDD-NNNN, a sequence that restarts every day."""

from datetime import datetime

from protean.utils.globals import current_domain

from ordering.order.order import Order, utc_now


def order_day(moment: datetime | None = None) -> str:
    return (moment or utc_now()).strftime("%Y%m%d")


def format_order_number(day: str, sequence: int) -> str:
    return f"ORD-{day}-{sequence:04d}"


def next_order_number(day: str) -> str:
    """Number for the next order placed on `day` (YYYYMMDD)."""
    placed = current_domain.repository_for(Order)._dao.query.filter(order_day=day).all()
    return format_order_number(day, placed.total + 1)
