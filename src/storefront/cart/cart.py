"""Cart aggregate: the mutable, per-owner shopping cart.

One cart exists per owner (a customer id or a guest session id) and its
identity *is* the owner id. The cart stores lines and quantities only;
count and subtotal are always recomputed from the catalogue (see
:mod:`storefront.cart.snapshot`) so an open cart never shows a stale price.

Concurrent mutations of the same cart are serialized by the aggregate
version: a handler that loses the race is re-run against fresh state. Every
mutation stamps ``updated_at`` so that adding or dropping a line also
re-saves the root and goes through the version check.
"""

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    GuestCartMerged,
)
from storefront.domain import storefront
from storefront.errors import NotFoundError
from storefront.utils.dates import utcnow


def validate_quantity(quantity):
    """Quantities are whole numbers of at least one; zero is not a removal."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})


def line_key(product_id, variant_id=None, combo_offer_id=None):
    return (str(product_id), str(variant_id) if variant_id else None, str(combo_offer_id) if combo_offer_id else None)


@storefront.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    combo_offer_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    @property
    def key(self):
        return line_key(self.product_id, self.variant_id, self.combo_offer_id)


@storefront.aggregate
class Cart:
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id):
        now = utcnow()
        return cls(id=str(owner_id), created_at=now, updated_at=now)

    @property
    def owner_id(self):
        return str(self.id)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_line(self, product_id, variant_id=None, combo_offer_id=None):
        key = line_key(product_id, variant_id, combo_offer_id)
        return next((line for line in self.lines if line.key == key), None)

    def line(self, line_id):
        return next((line for line in self.lines if str(line.id) == str(line_id)), None)

    @property
    def item_count(self):
        return sum(line.quantity for line in self.lines)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity=1, variant_id=None, combo_offer_id=None):
        """Add a line, or grow the existing line with the same product/variant/combo key."""
        validate_quantity(quantity)
        if variant_id and combo_offer_id:
            raise ValidationError({"combo_offer_id": ["A line selects either a variant or a combo offer, not both"]})

        now = utcnow()
        line = self.find_line(product_id, variant_id, combo_offer_id)
        if line:
            line.quantity += quantity
        else:
            line = CartLine(
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                combo_offer_id=str(combo_offer_id) if combo_offer_id else None,
                quantity=quantity,
                added_at=now,
            )
            self.add_lines(line)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                owner_id=self.owner_id,
                line_id=str(line.id),
                product_id=str(product_id),
                variant_id=line.variant_id,
                combo_offer_id=line.combo_offer_id,
                quantity=quantity,
                line_quantity=line.quantity,
            )
        )
        return line

    def update_quantity(self, line_id, quantity):
        validate_quantity(quantity)

        line = self.line(line_id)
        if line is None:
            raise NotFoundError("cart_line", str(line_id))

        previous_quantity = line.quantity
        line.quantity = quantity
        self.updated_at = utcnow()

        self.raise_(
            CartQuantityUpdated(
                owner_id=self.owner_id,
                line_id=str(line_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )
        return line

    def remove_item(self, line_id):
        """Remove a line. Removing a line that is already gone is a no-op."""
        line = self.line(line_id)
        if line is None:
            return False

        self.remove_lines(line)
        self.updated_at = utcnow()

        self.raise_(CartItemRemoved(owner_id=self.owner_id, line_id=str(line_id)))
        return True

    def clear(self):
        removed = self._drop_all_lines()
        if removed:
            self.raise_(CartCleared(owner_id=self.owner_id, lines_removed=removed))
        return removed

    def checkout(self):
        """Empty the cart once its lines have become an order.

        No cart event is raised; the order's own ``OrderPlaced`` event records
        the conversion.
        """
        return self._drop_all_lines()

    def _drop_all_lines(self):
        lines = list(self.lines)
        for line in lines:
            self.remove_lines(line)
        if lines:
            self.updated_at = utcnow()
        return len(lines)

    # -------------------------------------------------------------------
    # Guest cart merging
    # -------------------------------------------------------------------
    def merge_from(self, guest_cart):
        """Fold another cart's lines into this one, then empty it.

        Lines with the same product/variant/combo key add their quantities.
        """
        if guest_cart.owner_id == self.owner_id:
            raise ValidationError({"guest_owner_id": ["A cart cannot be merged into itself"]})

        now = utcnow()
        merged = 0
        for guest_line in list(guest_cart.lines):
            line = self.find_line(guest_line.product_id, guest_line.variant_id, guest_line.combo_offer_id)
            if line:
                line.quantity += guest_line.quantity
            else:
                self.add_lines(
                    CartLine(
                        product_id=guest_line.product_id,
                        variant_id=guest_line.variant_id,
                        combo_offer_id=guest_line.combo_offer_id,
                        quantity=guest_line.quantity,
                        added_at=now,
                    )
                )
            merged += 1

        if merged:
            self.updated_at = now
            guest_cart.clear()
            self.raise_(
                GuestCartMerged(
                    owner_id=self.owner_id,
                    guest_owner_id=guest_cart.owner_id,
                    lines_merged=merged,
                )
            )
        return merged
