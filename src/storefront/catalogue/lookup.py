"""Read-only catalogue lookup used by pricing, carts and checkout.

The ordering side never mutates catalogue records. It reads them through a
``CatalogueLookup``, which snapshots each record into an immutable value the
first time it is asked for and serves the same snapshot for the rest of the
request. Every command handler builds a fresh lookup, so a price change is
visible to the very next operation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.combo import ComboOffer
from storefront.catalogue.product import Product
from storefront.errors import NotFoundError
from storefront.utils.dates import utcnow


@dataclass(frozen=True)
class VariantRecord:
    id: str
    product_id: str
    option_name: str
    option_value: str
    sku: str | None
    price: Decimal | None
    stock: int | None


@dataclass(frozen=True)
class CatalogueItem:
    id: str
    title: str
    sku: str | None
    image_url: str | None
    base_price: Decimal
    sale_price: Decimal | None
    stock: int
    allow_backorder: bool
    is_active: bool
    variants: dict[str, VariantRecord] = field(default_factory=dict)

    def available_stock(self, variant: VariantRecord | None = None) -> int:
        if variant is not None and variant.stock is not None:
            return variant.stock
        return self.stock


@dataclass(frozen=True)
class ComboRecord:
    id: str
    name: str
    product_ids: tuple[str, ...]
    combo_price: Decimal
    image_url: str | None
    is_active: bool


class CatalogueLookup:
    """Per-request cache of catalogue snapshots.

    ``at`` pins the instant sale windows and combo validity are evaluated
    against, so every price resolved through one lookup is consistent.
    """

    def __init__(self, at: datetime | None = None):
        self.at = at or utcnow()
        self._products: dict[str, CatalogueItem] = {}
        self._combos: dict[str, ComboRecord] = {}

    # -------------------------------------------------------------------
    # Products and variants
    # -------------------------------------------------------------------
    def product(self, product_id) -> CatalogueItem:
        key = str(product_id)
        if key not in self._products:
            try:
                product = current_domain.repository_for(Product).get(key)
            except ObjectNotFoundError:
                raise NotFoundError("product", key) from None
            self._products[key] = self._snapshot_product(product)

        item = self._products[key]
        if not item.is_active:
            raise NotFoundError("product", key)
        return item

    def variant(self, product_id, variant_id) -> VariantRecord:
        item = self.product(product_id)
        variant = item.variants.get(str(variant_id))
        if variant is None:
            raise NotFoundError("variant", str(variant_id))
        return variant

    def _snapshot_product(self, product: Product) -> CatalogueItem:
        product_id = str(product.id)
        variants = {
            str(v.id): VariantRecord(
                id=str(v.id),
                product_id=product_id,
                option_name=v.option_name,
                option_value=v.option_value,
                sku=v.sku,
                price=v.price,
                stock=v.stock,
            )
            for v in product.variants
        }
        return CatalogueItem(
            id=product_id,
            title=product.title,
            sku=product.sku,
            image_url=product.image_url,
            base_price=product.base_price,
            # Sale windows are resolved here so the snapshot carries one answer
            sale_price=product.active_sale_price(self.at),
            stock=product.stock or 0,
            allow_backorder=bool(product.allow_backorder),
            is_active=bool(product.is_active),
            variants=variants,
        )

    # -------------------------------------------------------------------
    # Combo offers
    # -------------------------------------------------------------------
    def combo_offer(self, combo_offer_id) -> ComboRecord:
        key = str(combo_offer_id)
        if key not in self._combos:
            try:
                combo = current_domain.repository_for(ComboOffer).get(key)
            except ObjectNotFoundError:
                raise NotFoundError("combo_offer", key) from None
            self._combos[key] = ComboRecord(
                id=key,
                name=combo.name,
                product_ids=tuple(combo.product_id_list),
                combo_price=combo.combo_price,
                image_url=combo.image_url,
                is_active=combo.is_available(self.at),
            )

        record = self._combos[key]
        if not record.is_active:
            raise NotFoundError("combo_offer", key)
        return record
