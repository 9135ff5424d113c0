"""Fake inventory for ordering tests.

Holds variant snapshots in memory, records every decrease request, and can
be told to report per-line errors or to be unavailable.
"""

from ordering.stock.port import InventoryOutcome, InventoryPort, InventoryUnavailableError, VariantSnapshot


class FakeInventory(InventoryPort):
    def __init__(self) -> None:
        self.variants: dict[str, list[VariantSnapshot]] = {}
        self.decrease_calls: list[list[dict]] = []
        self.errors: list[dict] = []
        self.unavailable_reason: str | None = None

    def add_variant(self, snapshot: VariantSnapshot) -> None:
        self.variants.setdefault(snapshot.product_id, []).append(snapshot)

    def configure(self, errors: list[dict] | None = None, unavailable_reason: str | None = None) -> None:
        self.errors = errors or []
        self.unavailable_reason = unavailable_reason

    def describe_variant(self, product_id, variant_id=None, sku=None):
        variants = self.variants.get(product_id)
        if not variants:
            return None
        return (
            next((v for v in variants if v.variant_id == variant_id), None)
            or next((v for v in variants if sku and v.sku == sku.upper()), None)
            or variants[0]
        )

    def decrease_stock(self, lines):
        self.decrease_calls.append(lines)
        if self.unavailable_reason:
            raise InventoryUnavailableError(self.unavailable_reason)
        return InventoryOutcome(
            success=not self.errors,
            updated_count=len(lines) - len(self.errors),
            errors=list(self.errors),
        )
