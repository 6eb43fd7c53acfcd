"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product (optionally a variant or combo) was added to a cart."""

    __version__ = 1

    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    combo_offer_id = Identifier()
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartQuantityUpdated:
    __version__ = 1

    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    owner_id = Identifier(required=True)
    lines_removed = Integer(required=True)


@storefront.event(part_of="Cart")
class GuestCartMerged:
    """A guest session's lines were folded into a signed-in customer's cart."""

    __version__ = 1

    owner_id = Identifier(required=True)
    guest_owner_id = String(required=True)
    lines_merged = Integer(required=True)
