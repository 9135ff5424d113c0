"""Inventory bounded context — Catalog stock, audit trail and stock service.

Owns the per-variant stock counters embedded in Product documents, the
append-only inventory audit log, and the service that applies order and
restock deltas to them.
"""

from protean.domain import Domain

from inventory.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="encore")

logger = get_logger(__name__)

inventory = Domain(name="inventory")
