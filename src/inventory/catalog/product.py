"""Product aggregate root with embedded Variant entities and their stock counters.

Each Variant owns an InventoryCounter value object. Stock is only ever changed
through Product.decrement_stock / Product.increment_stock so that the publish
status, the revision token and the raised events stay in step with the counter.

Publish status is derived from stock:
    published     -> out_of_stock   when no variant is in stock any more
    out_of_stock  -> published      when stock comes back
"""

import re
import unicodedata
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text, ValueObject

from inventory.catalog.events import LowStockDetected, ProductStatusChanged, VariantStockChanged
from inventory.domain import inventory
from inventory.errors import InsufficientStockError, VariantNotFoundError


def utc_now() -> datetime:
    return datetime.now(UTC)


def slugify(value: str) -> str:
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower())
    return slug.strip("-")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ProductCategory(Enum):
    APPAREL = "apparel"
    ACCESSORIES = "accessories"
    MUSIC = "music"
    INSTRUMENTS = "instruments"
    COLLECTIBLES = "collectibles"
    OTHER = "other"


class ProductStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    OUT_OF_STOCK = "out_of_stock"


class VariantSize(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    XXXL = "XXXL"
    ONE_SIZE = "Unitalla"
    NOT_APPLICABLE = "N/A"


class Currency(Enum):
    USD = "USD"
    MXN = "MXN"
    EUR = "EUR"


# Statuses whose products are visible to shoppers and scanned for alerts
LISTED_STATUSES = (ProductStatus.PUBLISHED.value, ProductStatus.OUT_OF_STOCK.value)


@dataclass(frozen=True)
class StockChange:
    """Outcome of a single stock mutation on one variant."""

    product_id: str
    product_name: str
    product_slug: str
    variant_id: str
    variant_sku: str
    variant_name: str
    previous_stock: int
    new_stock: int
    quantity: int
    backordered: int = 0
    tracked: bool = True


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@inventory.value_object(part_of="Product")
class Pricing:
    """Variant pricing. A sale price, when set, must undercut the base price."""

    base_price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    currency = String(max_length=3, choices=Currency, default=Currency.MXN.value)
    cost_price = Float(min_value=0.0)

    @invariant.post
    def sale_price_must_be_below_base_price(self):
        if self.sale_price is not None and self.sale_price >= self.base_price:
            raise ValidationError({"sale_price": ["Sale price must be lower than the base price"]})

    def effective_price(self) -> float:
        return self.sale_price if self.sale_price is not None else self.base_price


@inventory.value_object(part_of="Product")
class InventoryCounter:
    """Per-variant stock counter and the policy that governs it."""

    stock = Integer(default=0, min_value=0)
    low_stock_threshold = Integer(default=5, min_value=0)
    track_inventory = Boolean(default=True)
    allow_backorder = Boolean(default=False)

    def with_stock(self, stock: int) -> "InventoryCounter":
        return InventoryCounter(
            stock=stock,
            low_stock_threshold=self.low_stock_threshold,
            track_inventory=self.track_inventory,
            allow_backorder=self.allow_backorder,
        )


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@inventory.entity(part_of="Product")
class Variant:
    """A purchasable variant. Addressed by id, never shared between products."""

    sku = String(required=True, max_length=64)
    name = String(required=True, max_length=200)
    size = String(choices=VariantSize, default=VariantSize.NOT_APPLICABLE.value)
    color = String(max_length=50)
    material = String(max_length=100)
    pricing = ValueObject(Pricing, required=True)
    counter = ValueObject(InventoryCounter, required=True)
    is_active = Boolean(default=True)

    def effective_price(self) -> float:
        return self.pricing.effective_price()

    def is_in_stock(self) -> bool:
        if not self.counter.track_inventory:
            return True
        return self.counter.stock > 0 or self.counter.allow_backorder

    def is_low_stock(self) -> bool:
        return self.counter.track_inventory and self.counter.stock <= self.counter.low_stock_threshold


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@inventory.aggregate
class Product:
    """Catalog product holding one or more variants with independent stock."""

    name = String(required=True, unique=True, min_length=3, max_length=200)
    slug = String(required=True, unique=True, max_length=220)
    description = Text()
    brand = String(max_length=100)
    category = String(choices=ProductCategory, default=ProductCategory.OTHER.value)
    status = String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    variants = HasMany(Variant)
    # Bumped on every persisted stock write; used as a compare-and-set token
    revision = Integer(default=0)
    created_at = DateTime(default=utc_now)
    updated_at = DateTime(default=utc_now)

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not re.match(r"^[a-z0-9]+(-[a-z0-9]+)*$", self.slug):
            raise ValidationError({"slug": ["Slug must contain only lowercase alphanumeric characters and hyphens"]})

    @classmethod
    def create(cls, name, category=None, slug=None, description=None, brand=None):
        now = utc_now()
        return cls(
            name=name,
            slug=slug or slugify(name),
            category=category or ProductCategory.OTHER.value,
            description=description,
            brand=brand,
            created_at=now,
            updated_at=now,
        )

    def add_variant(
        self,
        sku,
        name,
        base_price,
        sale_price=None,
        currency=Currency.MXN.value,
        cost_price=None,
        stock=0,
        low_stock_threshold=5,
        track_inventory=True,
        allow_backorder=False,
        size=VariantSize.NOT_APPLICABLE.value,
        color=None,
        material=None,
        is_active=True,
    ):
        variant = Variant(
            sku=sku.strip().upper(),
            name=name,
            size=size,
            color=color,
            material=material,
            pricing=Pricing(
                base_price=base_price,
                sale_price=sale_price,
                currency=currency,
                cost_price=cost_price,
            ),
            counter=InventoryCounter(
                stock=stock,
                low_stock_threshold=low_stock_threshold,
                track_inventory=track_inventory,
                allow_backorder=allow_backorder,
            ),
            is_active=is_active,
        )
        self.add_variants(variant)
        self.updated_at = utc_now()
        return variant

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------
    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def find_variant_by_sku(self, sku):
        normalized = sku.strip().upper()
        return next((v for v in self.variants if v.sku == normalized), None)

    def first_active_variant(self):
        return next((v for v in self.variants if v.is_active), None)

    def has_stock(self) -> bool:
        return any(v.is_in_stock() for v in self.variants)

    def total_stock(self) -> int:
        return sum(v.counter.stock for v in self.variants if v.counter.track_inventory)

    def is_listed(self) -> bool:
        return self.status in LISTED_STATUSES

    # -----------------------------------------------------------------------
    # Stock mutations
    # -----------------------------------------------------------------------
    def decrement_stock(self, variant_id, quantity: int) -> StockChange:
        """Take `quantity` units from a variant.

        Raises InsufficientStockError when stock cannot cover the quantity and
        backorders are not allowed. With backorders the counter is clamped at
        zero and the shortfall is reported as `backordered`.
        """
        variant = self._require_variant(variant_id)
        counter = variant.counter
        if not counter.track_inventory:
            return self._change(variant, counter.stock, counter.stock, quantity, tracked=False)

        self._require_positive(quantity)

        if counter.stock < quantity and not counter.allow_backorder:
            raise InsufficientStockError(variant.sku, counter.stock, quantity)

        previous_stock = counter.stock
        new_stock = max(0, previous_stock - quantity)
        backordered = max(0, quantity - previous_stock)
        self._set_stock(variant, new_stock, quantity, backordered)

        return self._change(variant, previous_stock, new_stock, quantity, backordered=backordered)

    def increment_stock(self, variant_id, quantity: int) -> StockChange:
        """Add `quantity` units to a variant. There is no upper bound."""
        variant = self._require_variant(variant_id)
        counter = variant.counter
        if not counter.track_inventory:
            return self._change(variant, counter.stock, counter.stock, quantity, tracked=False)

        self._require_positive(quantity)

        previous_stock = counter.stock
        new_stock = previous_stock + quantity
        self._set_stock(variant, new_stock, quantity, 0)

        return self._change(variant, previous_stock, new_stock, quantity)

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------
    def publish(self):
        if self.status not in (ProductStatus.DRAFT.value, ProductStatus.OUT_OF_STOCK.value):
            raise ValidationError({"status": ["Only draft or out-of-stock products can be published"]})

        if not self.variants:
            raise ValidationError({"variants": ["Product must have at least one variant to be published"]})

        if not self.has_stock():
            raise ValidationError({"variants": ["Product must have stock to be published"]})

        self._transition(ProductStatus.PUBLISHED.value)

    def archive(self):
        if self.status == ProductStatus.ARCHIVED.value:
            raise ValidationError({"status": ["Product is already archived"]})

        self._transition(ProductStatus.ARCHIVED.value)

    def refresh_status(self):
        """Flip between published and out_of_stock to match current stock."""
        if self.status == ProductStatus.PUBLISHED.value and not self.has_stock():
            self._transition(ProductStatus.OUT_OF_STOCK.value)
        elif self.status == ProductStatus.OUT_OF_STOCK.value and self.has_stock():
            self._transition(ProductStatus.PUBLISHED.value)

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------
    def _require_variant(self, variant_id):
        variant = self.find_variant(variant_id)
        if variant is None:
            raise VariantNotFoundError(self.id, variant_id)
        return variant

    @staticmethod
    def _require_positive(quantity):
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

    def _set_stock(self, variant, new_stock, quantity, backordered):
        previous_stock = variant.counter.stock
        variant.counter = variant.counter.with_stock(new_stock)
        now = utc_now()
        self.updated_at = now

        self.raise_(
            VariantStockChanged(
                product_id=self.id,
                variant_id=variant.id,
                sku=variant.sku,
                previous_stock=previous_stock,
                new_stock=new_stock,
                quantity=quantity,
                backordered=backordered,
                changed_at=now,
            )
        )

        threshold = variant.counter.low_stock_threshold
        if new_stock <= threshold < previous_stock:
            self.raise_(
                LowStockDetected(
                    product_id=self.id,
                    variant_id=variant.id,
                    sku=variant.sku,
                    current_stock=new_stock,
                    threshold=threshold,
                    detected_at=now,
                )
            )

        self.refresh_status()

    def _transition(self, new_status):
        previous_status = self.status
        now = utc_now()
        self.status = new_status
        self.updated_at = now

        self.raise_(
            ProductStatusChanged(
                product_id=self.id,
                previous_status=previous_status,
                new_status=new_status,
                changed_at=now,
            )
        )

    def _change(self, variant, previous_stock, new_stock, quantity, backordered=0, tracked=True):
        return StockChange(
            product_id=str(self.id),
            product_name=self.name,
            product_slug=self.slug,
            variant_id=str(variant.id),
            variant_sku=variant.sku,
            variant_name=variant.name,
            previous_stock=previous_stock,
            new_stock=new_stock,
            quantity=quantity,
            backordered=backordered,
            tracked=tracked,
        )
