"""Tests for Coupon eligibility, discount arithmetic and redemption."""

from datetime import timedelta
from decimal import Decimal

import pytest
from protean.exceptions import ValidationError

from storefront.coupon.coupon import Coupon, normalize_code
from storefront.coupon.events import CouponUpdated
from storefront.errors import (
    CouponExhaustedError,
    CouponExpiredError,
    CouponMinimumNotMetError,
    CouponNotFoundError,
)
from storefront.utils.dates import utcnow


def _coupon(**overrides):
    defaults = {"code": "save10", "coupon_type": "percentage", "amount": Decimal("10")}
    defaults.update(overrides)
    return Coupon.create(**defaults)


class TestCouponCreation:
    def test_code_is_upper_cased(self):
        assert _coupon().code == "SAVE10"

    def test_normalize_code_strips_whitespace(self):
        assert normalize_code("  welcome5 ") == "WELCOME5"

    def test_percentage_above_hundred_is_rejected(self):
        with pytest.raises(ValidationError):
            _coupon(amount=Decimal("150"))

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            _coupon(coupon_type="bogus")

    def test_starts_unused(self):
        assert _coupon().used_count == 0


class TestDiscountArithmetic:
    def test_percentage_rounds_half_up(self):
        assert _coupon().discount_for(Decimal("59.95")) == Decimal("6.00")

    def test_percentage_of_round_amount(self):
        assert _coupon(amount=Decimal("25")).discount_for(Decimal("80.00")) == Decimal("20.00")

    def test_fixed_discount(self):
        coupon = _coupon(coupon_type="fixed", amount=Decimal("5"))
        assert coupon.discount_for(Decimal("30.00")) == Decimal("5.00")

    def test_fixed_discount_never_exceeds_subtotal(self):
        coupon = _coupon(coupon_type="fixed", amount=Decimal("50"))
        assert coupon.discount_for(Decimal("30.00")) == Decimal("30.00")

    def test_zero_subtotal_gives_zero(self):
        assert _coupon().discount_for(Decimal("0")) == Decimal("0.00")


class TestEligibility:
    def test_inactive_coupon_is_reported_as_not_found(self):
        coupon = _coupon()
        coupon.deactivate()
        with pytest.raises(CouponNotFoundError):
            coupon.evaluate(Decimal("100"))

    def test_expired(self):
        coupon = _coupon(expires_at=utcnow() - timedelta(days=1))
        with pytest.raises(CouponExpiredError) as exc:
            coupon.evaluate(Decimal("100"))
        assert exc.value.messages == {"coupon_code": ["Coupon has expired"]}

    def test_not_yet_expired(self):
        coupon = _coupon(expires_at=utcnow() + timedelta(days=1))
        assert coupon.evaluate(Decimal("100")) == Decimal("10.00")

    def test_exhausted(self):
        coupon = _coupon(max_uses=1)
        coupon.used_count = 1
        with pytest.raises(CouponExhaustedError):
            coupon.evaluate(Decimal("100"))

    def test_minimum_cart_total(self):
        coupon = _coupon(min_cart_total=Decimal("50"))
        with pytest.raises(CouponMinimumNotMetError):
            coupon.evaluate(Decimal("49.99"))
        assert coupon.evaluate(Decimal("50.00")) == Decimal("5.00")

    def test_minimum_quantity(self):
        coupon = _coupon(min_quantity=3)
        with pytest.raises(CouponMinimumNotMetError):
            coupon.evaluate(Decimal("100"), item_count=2)
        assert coupon.evaluate(Decimal("100"), item_count=3) == Decimal("10.00")

    def test_expiry_is_checked_before_exhaustion(self):
        coupon = _coupon(max_uses=1, expires_at=utcnow() - timedelta(days=1))
        coupon.used_count = 1
        with pytest.raises(CouponExpiredError):
            coupon.evaluate(Decimal("100"))

    def test_exhaustion_is_checked_before_minimum(self):
        coupon = _coupon(max_uses=1, min_cart_total=Decimal("500"))
        coupon.used_count = 1
        with pytest.raises(CouponExhaustedError):
            coupon.evaluate(Decimal("10"))


class TestRedemption:
    def test_redeem_consumes_one_use(self):
        coupon = _coupon(max_uses=2)
        assert coupon.redeem(Decimal("20.00")) == Decimal("2.00")
        assert coupon.used_count == 1

    def test_evaluate_does_not_consume(self):
        coupon = _coupon(max_uses=1)
        coupon.evaluate(Decimal("20.00"))
        coupon.evaluate(Decimal("20.00"))
        assert coupon.used_count == 0

    def test_cannot_redeem_past_limit(self):
        coupon = _coupon(max_uses=1)
        coupon.redeem(Decimal("20.00"))
        with pytest.raises(CouponExhaustedError):
            coupon.redeem(Decimal("20.00"))
        assert coupon.used_count == 1


class TestUpdateTerms:
    def test_none_leaves_term_unchanged(self):
        coupon = _coupon(max_uses=5, min_quantity=2)
        coupon.update_terms(amount=Decimal("20"))
        assert coupon.amount == Decimal("20.00")
        assert coupon.max_uses == 5
        assert coupon.min_quantity == 2

    def test_raises_update_event_with_changed_terms_only(self):
        coupon = _coupon()
        coupon._events.clear()
        coupon.update_terms(max_uses=10)

        event = coupon._events[-1]
        assert isinstance(event, CouponUpdated)
        assert event.max_uses == 10
        assert event.amount is None

    def test_no_changes_raises_no_event(self):
        coupon = _coupon()
        coupon._events.clear()
        coupon.update_terms()
        assert coupon._events == []

    def test_can_switch_back_on(self):
        coupon = _coupon()
        coupon.deactivate()
        coupon.update_terms(is_active=True)
        assert coupon.is_active

    def test_limit_cannot_drop_below_uses_made(self):
        coupon = _coupon(max_uses=5)
        coupon.redeem(Decimal("20.00"))
        coupon.redeem(Decimal("20.00"))
        with pytest.raises(ValidationError):
            coupon.update_terms(max_uses=1)

    def test_percentage_cannot_exceed_hundred(self):
        coupon = _coupon()
        with pytest.raises(ValidationError):
            coupon.update_terms(amount=Decimal("101"))
