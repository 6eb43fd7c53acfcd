"""Cart line operations: commands and handler.

Every handler runs in its own unit of work and returns the cart's freshly
recomputed :class:`~storefront.cart.snapshot.CartSnapshot`, so callers never
need a separate read after a mutation. A failed operation raises before the
cart is persisted and leaves it exactly as it was.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, validate_quantity
from storefront.cart.snapshot import empty_snapshot, snapshot_of
from storefront.cart.stock import ensure_in_stock
from storefront.catalogue.lookup import CatalogueLookup
from storefront.domain import logger, storefront
from storefront.errors import NotFoundError
from storefront.pricing.resolver import PriceResolver


@storefront.command(part_of="Cart")
class AddCartItem:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    combo_offer_id = Identifier()
    quantity = Integer(default=1)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    owner_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class MergeGuestCart:
    """Fold a guest session's cart into a signed-in customer's cart."""

    owner_id = Identifier(required=True)
    guest_owner_id = Identifier(required=True)


def _load_cart(repo, owner_id):
    try:
        return repo.get(str(owner_id))
    except ObjectNotFoundError:
        return None


@storefront.command_handler(part_of=Cart)
class CartCommandHandler:
    @handle(AddCartItem)
    def add_item(self, command):
        validate_quantity(command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = _load_cart(repo, command.owner_id) or Cart.create(command.owner_id)

        lookup = CatalogueLookup()
        # Resolving the price up front rejects unknown or withdrawn references
        PriceResolver(lookup).resolve(command.product_id, command.variant_id, command.combo_offer_id)

        existing = cart.find_line(command.product_id, command.variant_id, command.combo_offer_id)
        resulting = command.quantity + (existing.quantity if existing else 0)
        ensure_in_stock(
            lookup,
            command.product_id,
            resulting,
            variant_id=command.variant_id,
            combo_offer_id=command.combo_offer_id,
        )

        line = cart.add_item(
            command.product_id,
            quantity=command.quantity,
            variant_id=command.variant_id,
            combo_offer_id=command.combo_offer_id,
        )
        repo.add(cart)

        logger.info(
            "cart_item_added",
            owner_id=cart.owner_id,
            line_id=str(line.id),
            product_id=str(command.product_id),
            quantity=command.quantity,
        )
        return snapshot_of(cart, lookup)

    @handle(UpdateCartItemQuantity)
    def update_quantity(self, command):
        validate_quantity(command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = _load_cart(repo, command.owner_id)
        line = cart.line(command.line_id) if cart else None
        if line is None:
            raise NotFoundError("cart_line", str(command.line_id))

        lookup = CatalogueLookup()
        ensure_in_stock(
            lookup,
            line.product_id,
            command.quantity,
            variant_id=line.variant_id,
            combo_offer_id=line.combo_offer_id,
        )

        cart.update_quantity(command.line_id, command.quantity)
        repo.add(cart)
        return snapshot_of(cart, lookup)

    @handle(RemoveCartItem)
    def remove_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _load_cart(repo, command.owner_id)
        if cart is None:
            return empty_snapshot(command.owner_id)

        if cart.remove_item(command.line_id):
            repo.add(cart)
        return snapshot_of(cart)

    @handle(ClearCart)
    def clear(self, command):
        repo = current_domain.repository_for(Cart)
        cart = _load_cart(repo, command.owner_id)
        if cart is None:
            return empty_snapshot(command.owner_id)

        if cart.clear():
            repo.add(cart)
            logger.info("cart_cleared", owner_id=cart.owner_id)
        return snapshot_of(cart)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(Cart)
        guest_cart = _load_cart(repo, command.guest_owner_id)
        cart = _load_cart(repo, command.owner_id) or Cart.create(command.owner_id)
        if guest_cart is None:
            return snapshot_of(cart)

        merged_keys = {line.key for line in guest_cart.lines}
        if cart.merge_from(guest_cart):
            # Merged lines must be sellable at their combined quantity, or nothing is saved
            lookup = CatalogueLookup()
            for line in cart.lines:
                if line.key in merged_keys:
                    ensure_in_stock(
                        lookup,
                        line.product_id,
                        line.quantity,
                        variant_id=line.variant_id,
                        combo_offer_id=line.combo_offer_id,
                    )

            repo.add(guest_cart)
            repo.add(cart)
            logger.info(
                "guest_cart_merged",
                owner_id=cart.owner_id,
                guest_owner_id=guest_cart.owner_id,
            )
        return snapshot_of(cart)
