"""Cart snapshots: lines, count and subtotal, recomputed on every read.

Nothing here is cached between requests. Prices come from the resolver at
the moment the snapshot is taken, so a catalogue price change shows up in
every open cart immediately.
"""

from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.lookup import CatalogueLookup
from storefront.pricing.money import ZERO, to_money
from storefront.pricing.resolver import PriceResolver


@dataclass(frozen=True)
class CartLineView:
    line_id: str
    product_id: str
    variant_id: str | None
    combo_offer_id: str | None
    title: str | None
    option: str | None
    sku: str | None
    image_url: str | None
    quantity: int
    unit_price: Decimal | None
    line_total: Decimal | None
    available: bool = True


@dataclass(frozen=True)
class CartSnapshot:
    """A cart as the shopper sees it right now.

    ``count`` is the total quantity across every line, unavailable ones
    included. A line withdrawn from the catalogue adds to ``count`` but not
    to ``subtotal``, and its view carries no price.
    """

    owner_id: str
    lines: tuple[CartLineView, ...]
    count: int
    subtotal: Decimal

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def to_dict(self) -> dict:
        return {
            "owner_id": self.owner_id,
            "lines": [
                {
                    "line_id": line.line_id,
                    "product_id": line.product_id,
                    "variant_id": line.variant_id,
                    "combo_offer_id": line.combo_offer_id,
                    "title": line.title,
                    "option": line.option,
                    "sku": line.sku,
                    "image_url": line.image_url,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                    "line_total": line.line_total,
                    "available": line.available,
                }
                for line in self.lines
            ],
            "count": self.count,
            "subtotal": self.subtotal,
        }


def empty_snapshot(owner_id) -> CartSnapshot:
    return CartSnapshot(owner_id=str(owner_id), lines=(), count=0, subtotal=ZERO)


def snapshot_of(cart: Cart, lookup: CatalogueLookup | None = None, strict: bool = False) -> CartSnapshot:
    """Price every line of ``cart``.

    A line whose product, variant or combo has been withdrawn from the
    catalogue is reported with ``available=False`` and left out of the
    subtotal. With ``strict=True`` (checkout) the ``NotFoundError`` propagates
    instead.
    """
    lookup = lookup or CatalogueLookup()
    resolver = PriceResolver(lookup)

    views = []
    count = 0
    subtotal = ZERO
    for line in cart.lines:
        count += line.quantity
        try:
            unit_price = resolver.resolve(line.product_id, line.variant_id, line.combo_offer_id)
        except ObjectNotFoundError:
            if strict:
                raise
            views.append(_unavailable_line(line))
            continue

        item = lookup.product(line.product_id)
        title, option, sku, image_url = item.title, None, item.sku, item.image_url
        if line.combo_offer_id:
            combo = lookup.combo_offer(line.combo_offer_id)
            title, image_url = combo.name, combo.image_url or image_url
        elif line.variant_id:
            variant = lookup.variant(line.product_id, line.variant_id)
            option = f"{variant.option_name}: {variant.option_value}"
            sku = variant.sku or sku

        line_total = to_money(unit_price * line.quantity)
        views.append(
            CartLineView(
                line_id=str(line.id),
                product_id=str(line.product_id),
                variant_id=line.variant_id,
                combo_offer_id=line.combo_offer_id,
                title=title,
                option=option,
                sku=sku,
                image_url=image_url,
                quantity=line.quantity,
                unit_price=unit_price,
                line_total=line_total,
            )
        )
        subtotal += line_total

    return CartSnapshot(owner_id=cart.owner_id, lines=tuple(views), count=count, subtotal=to_money(subtotal))


def _unavailable_line(line) -> CartLineView:
    return CartLineView(
        line_id=str(line.id),
        product_id=str(line.product_id),
        variant_id=line.variant_id,
        combo_offer_id=line.combo_offer_id,
        title=None,
        option=None,
        sku=None,
        image_url=None,
        quantity=line.quantity,
        unit_price=None,
        line_total=None,
        available=False,
    )


def cart_snapshot(owner_id, lookup: CatalogueLookup | None = None) -> CartSnapshot:
    """Current snapshot of an owner's cart; owners without a cart get an empty one."""
    try:
        cart = current_domain.repository_for(Cart).get(str(owner_id))
    except ObjectNotFoundError:
        return empty_snapshot(owner_id)
    return snapshot_of(cart, lookup)
