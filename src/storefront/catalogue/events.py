"""Domain events for the Product and ComboOffer aggregates."""

from protean.fields import Boolean, DateTime, Decimal, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A new sellable product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    title: String(required=True)
    base_price: Decimal(required=True)
    sale_price: Decimal()
    stock: Integer(required=True)


@storefront.event(part_of="Product")
class ProductPricingUpdated:
    """Base price, sale price or sale window of a product changed."""

    __version__ = 1

    product_id: Identifier(required=True)
    base_price: Decimal(required=True)
    sale_price: Decimal()
    sale_starts_at: DateTime()
    sale_ends_at: DateTime()


@storefront.event(part_of="Product")
class ProductStockAdjusted:
    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier()
    previous_stock: Integer()
    new_stock: Integer(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id: Identifier(required=True)


@storefront.event(part_of="Product")
class VariantAdded:
    """A purchasable option (size, colour) was added to a product."""

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    option_name: String(required=True)
    option_value: String(required=True)
    price: Decimal()
    stock: Integer()


@storefront.event(part_of="ComboOffer")
class ComboOfferCreated:
    """A fixed-price bundle of products went on offer."""

    __version__ = 1

    combo_offer_id: Identifier(required=True)
    name: String(required=True)
    product_ids: Text(required=True)  # JSON list of product ids
    combo_price: Decimal(required=True)
    is_active: Boolean()


@storefront.event(part_of="ComboOffer")
class ComboOfferDeactivated:
    __version__ = 1

    combo_offer_id: Identifier(required=True)
