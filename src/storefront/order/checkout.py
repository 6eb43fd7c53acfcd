"""Checkout: turn an owner's cart into an order in a single unit of work.

The cart, the coupon and the new order are saved together when the handler
returns. Any error raised on the way (an empty cart, a line that went out of
stock, a coupon that was used up a moment ago) rolls the whole unit back, so
the cart stays intact, the coupon keeps its use and no order exists.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.snapshot import snapshot_of
from storefront.cart.stock import ensure_in_stock
from storefront.catalogue.lookup import CatalogueLookup
from storefront.coupon.engine import redeem_coupon
from storefront.domain import logger, storefront
from storefront.errors import EmptyCartError
from storefront.order.numbering import generate_order_number
from storefront.order.order import Order
from storefront.pricing.money import ZERO

_ORDER_NUMBER_ATTEMPTS = 5


@storefront.command(part_of="Order")
class PlaceOrder:
    owner_id = Identifier(required=True)
    shipping_address = Text(required=True, sanitize=False)  # JSON: address dict
    billing_address = Text(sanitize=False)  # JSON: address dict
    payment_method = String(max_length=50)
    payment_status = String(max_length=20, default="pending")
    coupon_code = String(max_length=50)
    guest_email = String(max_length=254)
    contact_email = String(max_length=254)
    notes = Text(sanitize=False)


def _load_json(value):
    if value is None or isinstance(value, dict):
        return value
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        raise ValidationError({"shipping_address": ["Address must be a JSON object"]}) from None


def _unused_order_number(repo) -> str:
    for _ in range(_ORDER_NUMBER_ATTEMPTS):
        number = generate_order_number()
        if not repo._dao.query.filter(order_number=number).all().items:
            return number
    raise ValidationError({"order_number": ["Could not allocate a unique order number"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(Cart)
        try:
            cart = cart_repo.get(str(command.owner_id))
        except ObjectNotFoundError:
            raise EmptyCartError(command.owner_id) from None
        if not cart.lines:
            raise EmptyCartError(command.owner_id)

        guest_email = (command.guest_email or "").strip() or None
        if guest_email and "@" not in guest_email:
            raise ValidationError({"guest_email": ["Enter a valid email address"]})

        # One lookup pins every price and stock figure to the same instant
        lookup = CatalogueLookup()
        snapshot = snapshot_of(cart, lookup, strict=True)
        for line in snapshot.lines:
            ensure_in_stock(
                lookup,
                line.product_id,
                line.quantity,
                variant_id=line.variant_id,
                combo_offer_id=line.combo_offer_id,
            )

        discount = ZERO
        coupon_code = None
        if command.coupon_code:
            coupon, discount = redeem_coupon(command.coupon_code, snapshot.subtotal, snapshot.count)
            coupon_code = coupon.code

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=_unused_order_number(order_repo),
            items=[
                {
                    "product_id": line.product_id,
                    "variant_id": line.variant_id,
                    "combo_offer_id": line.combo_offer_id,
                    "title": line.title,
                    "option": line.option,
                    "sku": line.sku,
                    "image_url": line.image_url,
                    "unit_price": line.unit_price,
                    "quantity": line.quantity,
                    "line_total": line.line_total,
                }
                for line in snapshot.lines
            ],
            subtotal=snapshot.subtotal,
            discount=discount,
            customer_id=None if guest_email else cart.owner_id,
            guest_email=guest_email,
            contact_email=(command.contact_email or "").strip() or None,
            coupon_code=coupon_code,
            payment_method=command.payment_method,
            payment_status=command.payment_status or "pending",
            shipping_address=_load_json(command.shipping_address),
            billing_address=_load_json(command.billing_address),
            notes=command.notes,
        )

        cart.checkout()
        cart_repo.add(cart)
        order_repo.add(order)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            owner_id=cart.owner_id,
            total=str(order.total),
            coupon_code=coupon_code,
        )
        return order
