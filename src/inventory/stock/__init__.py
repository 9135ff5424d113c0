"""Inventory service factory.

Provides get_inventory_service() / set_inventory_service() so callers and
tests can swap the stores the service is wired to:
- RepositoryCatalogStore + RepositoryAuditLogStore by default
- any CatalogStore / AuditLogStore pair (e.g. InMemoryAuditLogStore) in tests
"""

from inventory.audit.repository_store import RepositoryAuditLogStore
from inventory.catalog.repository_store import RepositoryCatalogStore
from inventory.stock.service import InventoryService

_current_service: InventoryService | None = None


def get_inventory_service() -> InventoryService:
    """Return the current inventory service, wired to the repository stores by default."""
    global _current_service
    if _current_service is None:
        _current_service = InventoryService(catalog=RepositoryCatalogStore(), audit_log=RepositoryAuditLogStore())
    return _current_service


def set_inventory_service(service: InventoryService) -> None:
    """Override the active inventory service (useful for tests)."""
    global _current_service
    _current_service = service


def reset_inventory_service() -> None:
    """Reset to the default service."""
    global _current_service
    _current_service = None
