"""In-memory audit log store for tests and local experiments.

Writes can be made to fail on demand so callers can be exercised against a
broken audit log without touching the catalog.
"""

from inventory.audit.store import DEFAULT_HISTORY_LIMIT, DEFAULT_SEARCH_LIMIT, AuditLogStore, summarize
from inventory.errors import AuditLogWriteError


class InMemoryAuditLogStore(AuditLogStore):
    def __init__(self) -> None:
        self.entries: list = []
        self.fail_writes: bool = False
        self.failure_reason: str = "Audit log unavailable"

    def configure(self, fail_writes: bool, failure_reason: str = "Audit log unavailable") -> None:
        self.fail_writes = fail_writes
        self.failure_reason = failure_reason

    def log_change(self, entry):
        if self.fail_writes:
            raise AuditLogWriteError(self.failure_reason)
        self.entries.append(entry)
        return entry

    def _select(self, start_date=None, end_date=None, change_type=None, **exact):
        selected = []
        for entry in self.entries:
            if start_date is not None and entry.occurred_at < start_date:
                continue
            if end_date is not None and entry.occurred_at > end_date:
                continue
            if change_type is not None and entry.change_type != change_type:
                continue
            if any(value is not None and str(getattr(entry, key)) != str(value) for key, value in exact.items()):
                continue
            selected.append(entry)
        return sorted(selected, key=lambda e: e.occurred_at, reverse=True)

    def get_history(self, product_id, variant_id=None, limit=DEFAULT_HISTORY_LIMIT, start_date=None, end_date=None):
        return self._select(start_date, end_date, product_id=product_id, variant_id=variant_id)[:limit]

    def get_by_order(self, order_id):
        return self._select(order_id=order_id)

    def get_stats(self, start_date=None, end_date=None, change_type=None):
        return summarize(self._select(start_date, end_date, change_type))

    def search(self, limit=DEFAULT_SEARCH_LIMIT, start_date=None, end_date=None, change_type=None, product_id=None):
        return self._select(start_date, end_date, change_type, product_id=product_id)[:limit]
