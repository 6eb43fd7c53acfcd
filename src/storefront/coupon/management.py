"""Coupon administration: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.coupon.coupon import Coupon, CouponType, normalize_code
from storefront.coupon.engine import find_coupon, get_coupon
from storefront.domain import logger, storefront
from storefront.errors import CouponNotFoundError


@storefront.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=50)
    coupon_type = String(required=True, max_length=20)
    amount = Decimal(required=True, min_value=0)
    min_cart_total = Decimal(min_value=0)
    min_quantity = Integer(min_value=1)
    max_uses = Integer(min_value=1)
    expires_at = DateTime()
    description = Text()


@storefront.command(part_of="Coupon")
class DeactivateCoupon:
    code = String(required=True, max_length=50)


@storefront.command(part_of="Coupon")
class UpdateCoupon:
    """Change the terms of an issued coupon. Omitted fields stay as they are."""

    code = String(required=True, max_length=50)
    amount = Decimal(min_value=0)
    min_cart_total = Decimal(min_value=0)
    min_quantity = Integer(min_value=1)
    max_uses = Integer(min_value=1)
    expires_at = DateTime()
    description = Text()
    is_active = Boolean()


@storefront.command_handler(part_of=Coupon)
class CouponCommandHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        if find_coupon(command.code) is not None:
            raise ValidationError({"code": ["A coupon with this code already exists"]})

        if command.coupon_type not in {t.value for t in CouponType}:
            raise ValidationError({"coupon_type": ["Coupon type must be 'percentage' or 'fixed'"]})

        coupon = Coupon.create(
            code=command.code,
            coupon_type=command.coupon_type,
            amount=command.amount,
            min_cart_total=command.min_cart_total,
            min_quantity=command.min_quantity,
            max_uses=command.max_uses,
            expires_at=command.expires_at,
            description=command.description,
        )
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("coupon_created", code=coupon.code, coupon_type=coupon.coupon_type)
        return str(coupon.id)

    @handle(DeactivateCoupon)
    def deactivate_coupon(self, command):
        coupon = get_coupon(command.code)
        coupon.deactivate()
        current_domain.repository_for(Coupon).add(coupon)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        # Inactive coupons stay editable so they can be switched back on
        coupon = find_coupon(command.code)
        if coupon is None:
            raise CouponNotFoundError(normalize_code(command.code))

        coupon.update_terms(
            amount=command.amount,
            min_cart_total=command.min_cart_total,
            min_quantity=command.min_quantity,
            max_uses=command.max_uses,
            expires_at=command.expires_at,
            description=command.description,
            is_active=command.is_active,
        )
        current_domain.repository_for(Coupon).add(coupon)
        logger.info("coupon_updated", code=coupon.code)
        return coupon
