"""Inventory port factory.

Provides get_inventory() / set_inventory() to swap implementations:
- DomainInventoryAdapter (default) calls the inventory context in-process
- FakeInventory for ordering tests
"""

from ordering.stock.domain_adapter import DomainInventoryAdapter
from ordering.stock.port import InventoryPort

_current_inventory: InventoryPort | None = None


def get_inventory() -> InventoryPort:
    """Return the current inventory port. Defaults to DomainInventoryAdapter."""
    global _current_inventory
    if _current_inventory is None:
        _current_inventory = DomainInventoryAdapter()
    return _current_inventory


def set_inventory(port: InventoryPort) -> None:
    """Override the active inventory port (useful for tests)."""
    global _current_inventory
    _current_inventory = port


def reset_inventory() -> None:
    """Reset to the default inventory port."""
    global _current_inventory
    _current_inventory = None
