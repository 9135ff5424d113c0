"""Audit log store persisted through the InventoryLogEntry repository."""

from protean.utils.globals import current_domain
from sqlalchemy.exc import DBAPIError

from inventory.audit.entry import InventoryLogEntry
from inventory.audit.store import DEFAULT_HISTORY_LIMIT, DEFAULT_SEARCH_LIMIT, AuditLogStore, summarize
from inventory.errors import AuditLogWriteError

# Upper bound on entries aggregated by get_stats in one pass
STATS_SCAN_LIMIT = 10_000


def _filters(start_date=None, end_date=None, change_type=None, **exact):
    filters = {key: value for key, value in exact.items() if value is not None}
    if start_date is not None:
        filters["occurred_at__gte"] = start_date
    if end_date is not None:
        filters["occurred_at__lte"] = end_date
    if change_type is not None:
        filters["change_type"] = change_type
    return filters


class RepositoryAuditLogStore(AuditLogStore):
    def _repository(self):
        return current_domain.repository_for(InventoryLogEntry)

    def _query(self, limit, **filters):
        query = self._repository()._dao.query
        if filters:
            query = query.filter(**filters)
        return query.order_by("-occurred_at").limit(limit).all().items

    def log_change(self, entry):
        try:
            self._repository().add(entry)
        except (DBAPIError, ConnectionError) as exc:
            raise AuditLogWriteError(str(exc)) from exc
        return entry

    def get_history(self, product_id, variant_id=None, limit=DEFAULT_HISTORY_LIMIT, start_date=None, end_date=None):
        return self._query(
            limit,
            **_filters(start_date, end_date, product_id=str(product_id), variant_id=variant_id and str(variant_id)),
        )

    def get_by_order(self, order_id):
        return self._query(DEFAULT_SEARCH_LIMIT, order_id=str(order_id))

    def get_stats(self, start_date=None, end_date=None, change_type=None):
        return summarize(self._query(STATS_SCAN_LIMIT, **_filters(start_date, end_date, change_type)))

    def search(self, limit=DEFAULT_SEARCH_LIMIT, start_date=None, end_date=None, change_type=None, product_id=None):
        return self._query(
            limit,
            **_filters(start_date, end_date, change_type, product_id=product_id and str(product_id)),
        )
