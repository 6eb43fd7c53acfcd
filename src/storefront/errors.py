"""Caller-facing errors raised by the storefront core.

Every error builds on a Protean exception so the FastAPI exception handlers
map it to the right HTTP status: validation failures to 400, missing records
to 404 and illegal state changes to 409. All of them are recoverable; a unit
of work that raises one is rolled back in full.
"""

from protean.exceptions import InvalidStateError, ObjectNotFoundError, ValidationError

__all__ = [
    "CouponError",
    "CouponExhaustedError",
    "CouponExpiredError",
    "CouponMinimumNotMetError",
    "CouponNotFoundError",
    "EmptyCartError",
    "InvalidTransitionError",
    "NotFoundError",
    "OutOfStockError",
    "ValidationError",
]


class NotFoundError(ObjectNotFoundError):
    """A catalogue item, variant, combo offer, coupon, order or cart line is missing."""

    def __init__(self, kind, identifier):
        self.kind = kind
        self.identifier = identifier
        self.messages = {kind: [f"{kind} `{identifier}` does not exist"]}
        super().__init__(f"{kind} `{identifier}` does not exist")


class OutOfStockError(ValidationError):
    def __init__(self, product_id, requested, available):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            {"quantity": [f"Only {available} unit(s) of `{product_id}` available, {requested} requested"]}
        )


class EmptyCartError(ValidationError):
    def __init__(self, owner_id):
        self.owner_id = owner_id
        super().__init__({"cart": ["Cannot check out an empty cart"]})


# ---------------------------------------------------------------------------
# Coupon rejections
# ---------------------------------------------------------------------------
class CouponNotFoundError(NotFoundError):
    def __init__(self, code):
        super().__init__("coupon", code)
        self.code = code
        self.messages = {"coupon_code": ["Invalid coupon code"]}


class CouponError(ValidationError):
    """A coupon exists but cannot be redeemed right now."""

    reason = "Coupon cannot be applied"

    def __init__(self, code, reason=None):
        self.code = code
        super().__init__({"coupon_code": [reason or self.reason]})


class CouponExpiredError(CouponError):
    reason = "Coupon has expired"


class CouponExhaustedError(CouponError):
    reason = "Coupon usage limit reached"


class CouponMinimumNotMetError(CouponError):
    reason = "Cart does not meet the coupon minimum"


# ---------------------------------------------------------------------------
# Order lifecycle
# ---------------------------------------------------------------------------
class InvalidTransitionError(InvalidStateError):
    def __init__(self, current, target):
        self.current = current
        self.target = target
        self.messages = {"status": [f"Cannot transition from {current} to {target}"]}
        super().__init__(f"Cannot transition from {current} to {target}")
