"""Domain events for the Coupon aggregate."""

from protean.fields import Boolean, DateTime, Decimal, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    coupon_type = String(required=True)
    amount = Decimal(required=True)
    max_uses = Integer()
    expires_at = DateTime()


@storefront.event(part_of="Coupon")
class CouponDeactivated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)


@storefront.event(part_of="Coupon")
class CouponUpdated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    amount = Decimal()
    min_cart_total = Decimal()
    min_quantity = Integer()
    max_uses = Integer()
    expires_at = DateTime()
    description = Text()
    is_active = Boolean()
