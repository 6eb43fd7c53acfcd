"""Catalogue administration: commands and handlers for products and combo offers.

These are the write side of the catalogue collaborator. Carts and orders
never issue them; they only read what these handlers persist.
"""

import json

from protean import handle
from protean.fields import Boolean, DateTime, Decimal, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.combo import ComboOffer
from storefront.catalogue.product import Product
from storefront.domain import logger, storefront


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@storefront.command(part_of="Product")
class AddProduct:
    title = String(required=True, max_length=255)
    base_price = Decimal(required=True, min_value=0)
    sale_price = Decimal(min_value=0)
    sale_starts_at = DateTime()
    sale_ends_at = DateTime()
    stock = Integer(default=0, min_value=0)
    sku = String(max_length=50)
    image_url = String(max_length=1024)
    allow_backorder = Boolean(default=False)


@storefront.command(part_of="Product")
class UpdateProductPricing:
    product_id = Identifier(required=True)
    base_price = Decimal(required=True, min_value=0)
    sale_price = Decimal(min_value=0)
    sale_starts_at = DateTime()
    sale_ends_at = DateTime()


@storefront.command(part_of="Product")
class AdjustProductStock:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    stock = Integer(required=True)


@storefront.command(part_of="Product")
class AddVariant:
    product_id = Identifier(required=True)
    option_name = String(required=True, max_length=50)
    option_value = String(required=True, max_length=100)
    price = Decimal(min_value=0)
    stock = Integer(min_value=0)
    sku = String(max_length=50)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ProductCommandHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            title=command.title,
            base_price=command.base_price,
            stock=command.stock,
            sale_price=command.sale_price,
            sale_starts_at=command.sale_starts_at,
            sale_ends_at=command.sale_ends_at,
            sku=command.sku,
            image_url=command.image_url,
            allow_backorder=command.allow_backorder,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_added", product_id=str(product.id), title=product.title)
        return str(product.id)

    @handle(UpdateProductPricing)
    def update_pricing(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_pricing(
            base_price=command.base_price,
            sale_price=command.sale_price,
            sale_starts_at=command.sale_starts_at,
            sale_ends_at=command.sale_ends_at,
        )
        repo.add(product)

    @handle(AdjustProductStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.stock, variant_id=command.variant_id)
        repo.add(product)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            option_name=command.option_name,
            option_value=command.option_value,
            price=command.price,
            stock=command.stock,
            sku=command.sku,
        )
        repo.add(product)
        return str(variant.id)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)


# ---------------------------------------------------------------------------
# Combo offers
# ---------------------------------------------------------------------------
@storefront.command(part_of="ComboOffer")
class CreateComboOffer:
    name = String(required=True, max_length=255)
    product_ids = Text(required=True)  # JSON list of product ids
    combo_price = Decimal(required=True, min_value=0)
    original_price = Decimal(min_value=0)
    description = Text()
    image_url = String(max_length=1024)
    starts_at = DateTime()
    ends_at = DateTime()


@storefront.command(part_of="ComboOffer")
class DeactivateComboOffer:
    combo_offer_id = Identifier(required=True)


@storefront.command_handler(part_of=ComboOffer)
class ComboOfferCommandHandler:
    @handle(CreateComboOffer)
    def create_combo_offer(self, command):
        product_ids = (
            json.loads(command.product_ids) if isinstance(command.product_ids, str) else command.product_ids
        )
        combo = ComboOffer.create(
            name=command.name,
            product_ids=product_ids,
            combo_price=command.combo_price,
            original_price=command.original_price,
            description=command.description,
            image_url=command.image_url,
            starts_at=command.starts_at,
            ends_at=command.ends_at,
        )
        current_domain.repository_for(ComboOffer).add(combo)
        logger.info("combo_offer_created", combo_offer_id=str(combo.id), products=len(product_ids))
        return str(combo.id)

    @handle(DeactivateComboOffer)
    def deactivate(self, command):
        repo = current_domain.repository_for(ComboOffer)
        combo = repo.get(command.combo_offer_id)
        combo.deactivate()
        repo.add(combo)
