"""Price resolver: the single effective unit price of a cart or order line.

Precedence, highest first:

1. the combo offer's bundle price, when a combo is selected and available;
2. the variant's price override, when a variant is selected and has one;
3. the product's sale price, when it undercuts the base price and the sale
   window is open;
4. the product's base price.

The resolver only reads catalogue snapshots, so it is deterministic for a
given lookup and safe to call repeatedly and concurrently.
"""

from decimal import Decimal

from protean.exceptions import ValidationError

from storefront.catalogue.lookup import CatalogueLookup
from storefront.errors import NotFoundError
from storefront.pricing.money import to_money


class PriceResolver:
    def __init__(self, lookup: CatalogueLookup | None = None):
        self.lookup = lookup or CatalogueLookup()

    def resolve(self, product_id, variant_id=None, combo_offer_id=None) -> Decimal:
        if variant_id and combo_offer_id:
            raise ValidationError({"combo_offer_id": ["A line selects either a variant or a combo offer, not both"]})

        item = self.lookup.product(product_id)

        if combo_offer_id:
            combo = self.lookup.combo_offer(combo_offer_id)
            if item.id not in combo.product_ids:
                raise NotFoundError("combo_offer", str(combo_offer_id))
            return to_money(combo.combo_price)

        if variant_id:
            variant = self.lookup.variant(product_id, variant_id)
            if variant.price is not None:
                return to_money(variant.price)

        if item.sale_price is not None and item.sale_price < item.base_price:
            return to_money(item.sale_price)

        return to_money(item.base_price)


def resolve_price(product_id, variant_id=None, combo_offer_id=None, lookup=None) -> Decimal:
    """Resolve one unit price; pass ``lookup`` to share a request's catalogue cache."""
    return PriceResolver(lookup).resolve(product_id, variant_id=variant_id, combo_offer_id=combo_offer_id)
