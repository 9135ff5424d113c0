"""Audit log store port.

Two adapters implement it: RepositoryAuditLogStore (the default, persisted
through the InventoryLogEntry repository) and InMemoryAuditLogStore (tests and
failure injection). The store never retries; a failed write raises.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from inventory.audit.entry import InventoryLogEntry

DEFAULT_HISTORY_LIMIT = 50
DEFAULT_SEARCH_LIMIT = 100


@dataclass(frozen=True)
class ChangeTypeStats:
    change_type: str
    count: int
    total_quantity_changed: int


def summarize(entries: Iterable[InventoryLogEntry]) -> list[ChangeTypeStats]:
    """Group entries by change type, most frequent first."""
    counts: dict[str, int] = defaultdict(int)
    totals: dict[str, int] = defaultdict(int)
    for entry in entries:
        counts[entry.change_type] += 1
        totals[entry.change_type] += entry.quantity_changed

    stats = [ChangeTypeStats(change_type=ct, count=counts[ct], total_quantity_changed=totals[ct]) for ct in counts]
    return sorted(stats, key=lambda s: (-s.count, s.change_type))


class AuditLogStore(ABC):
    """Abstract append-only audit log."""

    @abstractmethod
    def log_change(self, entry: InventoryLogEntry) -> InventoryLogEntry:
        """Persist one entry. Raises AuditLogWriteError on failure."""
        ...

    @abstractmethod
    def get_history(
        self,
        product_id,
        variant_id=None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> list[InventoryLogEntry]:
        """Entries for a product (optionally one variant), newest first."""
        ...

    @abstractmethod
    def get_by_order(self, order_id) -> list[InventoryLogEntry]:
        """Entries recorded for an order, newest first."""
        ...

    @abstractmethod
    def get_stats(
        self,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        change_type: str | None = None,
    ) -> list[ChangeTypeStats]:
        """Per change type counts and quantity totals, most frequent first."""
        ...

    @abstractmethod
    def search(
        self,
        limit: int = DEFAULT_SEARCH_LIMIT,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        change_type: str | None = None,
        product_id=None,
    ) -> list[InventoryLogEntry]:
        """Admin listing across all entries, newest first."""
        ...
