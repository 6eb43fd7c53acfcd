"""Coupon aggregate: discount codes with eligibility and usage limits.

Validation never consumes a use. ``used_count`` only moves when an order
is committed (:meth:`Coupon.redeem`), inside the same unit of work that
persists the order. Because the coupon is saved with its version, two
checkouts racing for the last use cannot both commit: the loser is retried,
re-validates against the new count and fails with ``CouponExhaustedError``.
"""

from decimal import Decimal as D
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Decimal, Integer, String, Text

from storefront.coupon.events import CouponCreated, CouponDeactivated, CouponUpdated
from storefront.domain import storefront
from storefront.errors import (
    CouponExhaustedError,
    CouponExpiredError,
    CouponMinimumNotMetError,
    CouponNotFoundError,
)
from storefront.pricing.money import ZERO, optional_money, to_money
from storefront.utils.dates import as_utc, utcnow


class CouponType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code):
    return (code or "").strip().upper()


@storefront.aggregate
class Coupon:
    code = String(required=True, max_length=50, unique=True)
    description = Text()
    coupon_type = String(required=True, choices=CouponType)
    amount = Decimal(required=True, min_value=0)
    min_cart_total = Decimal(min_value=0)
    min_quantity = Integer(min_value=1)
    max_uses = Integer(min_value=1)
    used_count = Integer(default=0, min_value=0)
    expires_at = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()

    @invariant.post
    def percentage_must_not_exceed_hundred(self):
        if self.coupon_type == CouponType.PERCENTAGE.value and self.amount is not None and self.amount > 100:
            raise ValidationError({"amount": ["A percentage coupon cannot exceed 100"]})

    @invariant.post
    def usage_must_stay_within_limit(self):
        if self.max_uses is not None and (self.used_count or 0) > self.max_uses:
            raise ValidationError({"used_count": ["Coupon used more times than allowed"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        coupon_type,
        amount,
        min_cart_total=None,
        min_quantity=None,
        max_uses=None,
        expires_at=None,
        description=None,
    ):
        coupon = cls(
            code=normalize_code(code),
            coupon_type=CouponType(coupon_type).value,
            amount=to_money(amount),
            min_cart_total=optional_money(min_cart_total),
            min_quantity=min_quantity,
            max_uses=max_uses,
            expires_at=expires_at,
            description=description,
            created_at=utcnow(),
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                coupon_type=coupon.coupon_type,
                amount=coupon.amount,
                max_uses=max_uses,
                expires_at=expires_at,
            )
        )
        return coupon

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    @property
    def is_exhausted(self):
        return self.max_uses is not None and (self.used_count or 0) >= self.max_uses

    def is_expired(self, at=None):
        return self.expires_at is not None and as_utc(self.expires_at) < as_utc(at or utcnow())

    def check_eligibility(self, cart_subtotal, item_count=None, at=None):
        """Raise the specific rejection for this cart, checked in a fixed order."""
        if not self.is_active:
            raise CouponNotFoundError(self.code)
        if self.is_expired(at):
            raise CouponExpiredError(self.code)
        if self.is_exhausted:
            raise CouponExhaustedError(self.code)
        if self.min_cart_total is not None and to_money(cart_subtotal) < self.min_cart_total:
            raise CouponMinimumNotMetError(
                self.code, f"Cart subtotal must be at least {self.min_cart_total} to use this coupon"
            )
        if self.min_quantity is not None and item_count is not None and item_count < self.min_quantity:
            raise CouponMinimumNotMetError(
                self.code, f"Cart must hold at least {self.min_quantity} item(s) to use this coupon"
            )

    def discount_for(self, cart_subtotal):
        """Discount for a subtotal; a fixed discount never exceeds the subtotal."""
        subtotal = to_money(cart_subtotal)
        if subtotal <= ZERO:
            return ZERO
        if self.coupon_type == CouponType.PERCENTAGE.value:
            return to_money(subtotal * self.amount / D(100))
        return min(to_money(self.amount), subtotal)

    def evaluate(self, cart_subtotal, item_count=None, at=None):
        self.check_eligibility(cart_subtotal, item_count=item_count, at=at)
        return self.discount_for(cart_subtotal)

    # -------------------------------------------------------------------
    # Redemption
    # -------------------------------------------------------------------
    def redeem(self, cart_subtotal, item_count=None, at=None):
        """Consume one use and return the discount granted.

        The guard runs against the state loaded in the current unit of work;
        the version check at commit turns guard and increment into one
        compare-and-set.
        """
        discount = self.evaluate(cart_subtotal, item_count=item_count, at=at)
        self.used_count = (self.used_count or 0) + 1
        return discount

    def deactivate(self):
        if not self.is_active:
            return
        self.is_active = False
        self.raise_(CouponDeactivated(coupon_id=str(self.id), code=self.code))

    def update_terms(
        self,
        amount=None,
        min_cart_total=None,
        min_quantity=None,
        max_uses=None,
        expires_at=None,
        description=None,
        is_active=None,
    ):
        """Change the given terms; ``None`` leaves a term as it is.

        The code and type are fixed once issued. Lowering ``max_uses`` below
        the uses already made is rejected by the usage invariant.
        """
        changes = {
            "amount": to_money(amount) if amount is not None else None,
            "min_cart_total": optional_money(min_cart_total),
            "min_quantity": min_quantity,
            "max_uses": max_uses,
            "expires_at": expires_at,
            "description": description,
            "is_active": is_active,
        }
        changes = {name: value for name, value in changes.items() if value is not None}
        if not changes:
            return

        with atomic_change(self):
            for name, value in changes.items():
                setattr(self, name, value)

        self.raise_(CouponUpdated(coupon_id=str(self.id), code=self.code, **changes))
