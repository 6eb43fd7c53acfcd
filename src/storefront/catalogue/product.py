"""Product aggregate root with Variant entities.

Products are the catalogue records carts and orders are priced against.
They are maintained by administrators; the ordering side only ever reads
them through :class:`storefront.catalogue.lookup.CatalogueLookup`.
"""

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, HasMany, Integer, String

from storefront.catalogue.events import (
    ProductAdded,
    ProductDeactivated,
    ProductPricingUpdated,
    ProductStockAdjusted,
    VariantAdded,
)
from storefront.domain import storefront
from storefront.pricing.money import optional_money, to_money
from storefront.utils.dates import utcnow, within_window


@storefront.entity(part_of="Product")
class Variant:
    """A specific option of a product, e.g. ``Size: XL``.

    ``price`` and ``stock`` are optional overrides; when absent the parent
    product's values apply.
    """

    option_name: String(required=True, max_length=50)
    option_value: String(required=True, max_length=100)
    sku: String(max_length=50)
    price: Decimal(min_value=0)
    stock: Integer(min_value=0)


@storefront.aggregate
class Product:
    title: String(required=True, max_length=255)
    sku: String(max_length=50)
    image_url: String(max_length=1024)
    base_price: Decimal(required=True, min_value=0)
    sale_price: Decimal(min_value=0)
    sale_starts_at: DateTime()
    sale_ends_at: DateTime()
    stock: Integer(default=0, min_value=0)
    allow_backorder: Boolean(default=False)
    is_active: Boolean(default=True)
    variants: HasMany(Variant)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def sale_price_must_be_below_base_price(self):
        if self.sale_price is not None and self.base_price is not None and self.sale_price >= self.base_price:
            raise ValidationError({"sale_price": ["Sale price must be lower than the base price"]})

    @invariant.post
    def sale_window_must_be_ordered(self):
        if self.sale_starts_at and self.sale_ends_at and self.sale_starts_at > self.sale_ends_at:
            raise ValidationError({"sale_ends_at": ["Sale must end after it starts"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        base_price,
        stock=0,
        sale_price=None,
        sale_starts_at=None,
        sale_ends_at=None,
        sku=None,
        image_url=None,
        allow_backorder=False,
    ):
        now = utcnow()
        product = cls(
            title=title,
            sku=sku,
            image_url=image_url,
            base_price=to_money(base_price),
            sale_price=optional_money(sale_price),
            sale_starts_at=sale_starts_at,
            sale_ends_at=sale_ends_at,
            stock=stock,
            allow_backorder=allow_backorder,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                title=title,
                base_price=product.base_price,
                sale_price=product.sale_price,
                stock=stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Pricing
    # -------------------------------------------------------------------
    def update_pricing(self, base_price, sale_price=None, sale_starts_at=None, sale_ends_at=None):
        """Replace the price block. Omitting ``sale_price`` ends any sale."""
        with atomic_change(self):
            self.base_price = to_money(base_price)
            self.sale_price = optional_money(sale_price)
            self.sale_starts_at = sale_starts_at
            self.sale_ends_at = sale_ends_at
            self.updated_at = utcnow()

        self.raise_(
            ProductPricingUpdated(
                product_id=str(self.id),
                base_price=self.base_price,
                sale_price=self.sale_price,
                sale_starts_at=sale_starts_at,
                sale_ends_at=sale_ends_at,
            )
        )

    def active_sale_price(self, at=None):
        """The sale price when one is set, undercuts the base price and is in its window."""
        if self.sale_price is None or self.sale_price >= self.base_price:
            return None
        if not within_window(at or utcnow(), self.sale_starts_at, self.sale_ends_at):
            return None
        return self.sale_price

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def adjust_stock(self, new_stock, variant_id=None):
        if new_stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        if variant_id is None:
            previous = self.stock
            self.stock = new_stock
        else:
            variant = self.variant(variant_id)
            if variant is None:
                raise ValidationError({"variant_id": [f"Variant {variant_id} not found"]})
            previous = variant.stock
            variant.stock = new_stock
        self.updated_at = utcnow()

        self.raise_(
            ProductStockAdjusted(
                product_id=str(self.id),
                variant_id=str(variant_id) if variant_id else None,
                previous_stock=previous,
                new_stock=new_stock,
            )
        )

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    def add_variant(self, option_name, option_value, price=None, stock=None, sku=None):
        variant = Variant(
            option_name=option_name,
            option_value=option_value,
            sku=sku,
            price=optional_money(price),
            stock=stock,
        )
        self.add_variants(variant)
        self.updated_at = utcnow()

        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                option_name=option_name,
                option_value=option_value,
                price=variant.price,
                stock=stock,
            )
        )
        return variant

    def variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def deactivate(self):
        if not self.is_active:
            return
        self.is_active = False
        self.updated_at = utcnow()
        self.raise_(ProductDeactivated(product_id=str(self.id)))
