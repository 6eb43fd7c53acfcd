"""Coupon engine: look up a code, check it against a cart, compute the discount.

``apply_coupon`` is a read-only check used to preview a discount. The
checkout path calls ``redeem_coupon`` instead, which performs the same
checks and consumes a use in the caller's unit of work.
"""

from decimal import Decimal

from protean.utils.globals import current_domain

from storefront.coupon.coupon import Coupon, normalize_code
from storefront.errors import CouponNotFoundError


def find_coupon(code) -> Coupon | None:
    normalized = normalize_code(code)
    if not normalized:
        return None
    repo = current_domain.repository_for(Coupon)
    matches = repo._dao.query.filter(code=normalized).all().items
    return matches[0] if matches else None


def get_coupon(code) -> Coupon:
    """The coupon for ``code``; missing and inactive coupons are both ``CouponNotFoundError``."""
    coupon = find_coupon(code)
    if coupon is None or not coupon.is_active:
        raise CouponNotFoundError(normalize_code(code))
    return coupon


def list_coupons(active_only=False) -> list[Coupon]:
    """Coupons, newest first."""
    query = current_domain.repository_for(Coupon)._dao.query
    if active_only:
        query = query.filter(is_active=True)
    return query.order_by("-created_at").all().items


def apply_coupon(code, cart_subtotal, item_count=None) -> Decimal:
    """Validate ``code`` against a cart and return the discount it would grant."""
    return get_coupon(code).evaluate(cart_subtotal, item_count=item_count)


def redeem_coupon(code, cart_subtotal, item_count=None) -> tuple[Coupon, Decimal]:
    """Re-validate and consume one use of ``code`` inside the active unit of work."""
    coupon = get_coupon(code)
    discount = coupon.redeem(cart_subtotal, item_count=item_count)
    current_domain.repository_for(Coupon).add(coupon)
    return coupon, discount
