"""Order aggregate: the immutable, priced result of a checkout.

Items, prices, discount and total are frozen when the order is placed and
never change afterwards. Only the lifecycle fields move:

    pending → processing → shipped → delivered
    pending | processing → cancelled

``delivered`` and ``cancelled`` are terminal. Tracking updates are an
append-only side channel that may be posted at any status.
"""

import json
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Decimal,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import setting, storefront
from storefront.errors import InvalidTransitionError
from storefront.order.events import (
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusRecorded,
    TrackingUpdateAdded,
)
from storefront.pricing.money import ZERO, to_money
from storefront.utils.dates import utcnow


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationError(
            {"status": [f"Unknown order status `{value}`; expected one of {', '.join(s.value for s in OrderStatus)}"]}
        ) from None


def parse_payment_status(value) -> PaymentStatus:
    try:
        return PaymentStatus((value or "").strip().lower())
    except ValueError:
        raise ValidationError({"payment_status": [f"Unknown payment status `{value}`"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where an order goes, captured verbatim at checkout."""

    name = String(max_length=255)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=50)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """One frozen order line. ``unit_price`` is the price resolved at checkout."""

    product_id = Identifier(required=True)
    variant_id = Identifier()
    combo_offer_id = Identifier()
    title = String(required=True, max_length=255)
    option = String(max_length=255)
    sku = String(max_length=50)
    image_url = String(max_length=500)
    unit_price = Decimal(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    line_total = Decimal(required=True, min_value=0)

    def to_dict(self):
        return {
            "item_id": str(self.id),
            "product_id": str(self.product_id),
            "variant_id": self.variant_id,
            "combo_offer_id": self.combo_offer_id,
            "title": self.title,
            "option": self.option,
            "sku": self.sku,
            "image_url": self.image_url,
            "unit_price": str(self.unit_price),
            "quantity": self.quantity,
            "line_total": str(self.line_total),
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=40, unique=True)
    customer_id = Identifier()
    guest_email = String(max_length=254)
    contact_email = String(max_length=254)
    items = HasMany(OrderItem)
    subtotal = Decimal(required=True, min_value=0)
    discount = Decimal(default=ZERO, min_value=0)
    total = Decimal(required=True, min_value=0)
    currency = String(max_length=3, default="USD")
    coupon_code = String(max_length=50)
    payment_method = String(max_length=50)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    shipping_address = ValueObject(ShippingAddress)
    billing_address = ValueObject(ShippingAddress)
    notes = Text(sanitize=False)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking_number = String(max_length=255)
    tracking_status = String(max_length=100)
    tracking_updates = Text(sanitize=False)  # JSON list of {date, status, location, description}
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def must_belong_to_customer_or_guest(self):
        if not self.customer_id and not self.guest_email:
            raise ValidationError({"customer_id": ["An order needs a customer or a guest email"]})

    @invariant.post
    def total_must_not_be_negative(self):
        if self.total is not None and self.total < 0:
            raise ValidationError({"total": ["Order total cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        items,
        subtotal,
        discount=ZERO,
        customer_id=None,
        guest_email=None,
        contact_email=None,
        coupon_code=None,
        payment_method=None,
        payment_status=PaymentStatus.PENDING.value,
        shipping_address=None,
        billing_address=None,
        notes=None,
    ):
        """Create a pending order from priced lines.

        ``items`` are mappings with the OrderItem fields. The total is
        ``subtotal - discount``, floored at zero. Notifications go to
        ``contact_email``, falling back to the guest email.
        """
        subtotal = to_money(subtotal)
        discount = to_money(discount or ZERO)
        total = max(to_money(subtotal - discount), ZERO)
        now = utcnow()

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            guest_email=guest_email,
            contact_email=contact_email or guest_email,
            items=[OrderItem(**item) for item in items],
            subtotal=subtotal,
            discount=discount,
            total=total,
            currency=setting("currency", "USD"),
            coupon_code=coupon_code,
            payment_method=payment_method,
            payment_status=parse_payment_status(payment_status).value,
            shipping_address=ShippingAddress(**shipping_address) if isinstance(shipping_address, dict) else shipping_address,
            billing_address=ShippingAddress(**billing_address) if isinstance(billing_address, dict) else billing_address,
            notes=notes,
            status=OrderStatus.PENDING.value,
            tracking_updates="[]",
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer_id) if customer_id else None,
                guest_email=guest_email,
                contact_email=order.contact_email,
                items=json.dumps([item.to_dict() for item in order.items]),
                subtotal=order.subtotal,
                discount=order.discount,
                total=order.total,
                currency=order.currency,
                coupon_code=coupon_code,
                payment_method=payment_method,
                payment_status=order.payment_status,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.current_status]

    def can_transition_to(self, target) -> bool:
        return parse_status(target) in _VALID_TRANSITIONS[self.current_status]

    def transition_to(self, target, tracking_number=None, reason=None):
        """Move to ``target`` along the lifecycle graph.

        Raises ``ValidationError`` for an unknown status or a shipment without
        a tracking number, and ``InvalidTransitionError`` for any move the
        graph does not allow, including every move out of a terminal state.
        """
        new_status = parse_status(target)
        current = self.current_status
        if new_status not in _VALID_TRANSITIONS[current]:
            raise InvalidTransitionError(current.value, new_status.value)

        tracking_number = (tracking_number or "").strip() or None
        if new_status == OrderStatus.SHIPPED:
            if not tracking_number:
                raise ValidationError({"tracking_number": ["A tracking number is required to ship an order"]})
            self.tracking_number = tracking_number
        if new_status == OrderStatus.CANCELLED and reason:
            self.cancellation_reason = reason

        self.status = new_status.value
        self.updated_at = utcnow()

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                contact_email=self.contact_email,
                previous_status=current.value,
                new_status=new_status.value,
                tracking_number=self.tracking_number,
                reason=reason,
                changed_at=self.updated_at,
            )
        )

    def start_processing(self):
        self.transition_to(OrderStatus.PROCESSING.value)

    def ship(self, tracking_number):
        self.transition_to(OrderStatus.SHIPPED.value, tracking_number=tracking_number)

    def deliver(self):
        self.transition_to(OrderStatus.DELIVERED.value)

    def cancel(self, reason=None):
        self.transition_to(OrderStatus.CANCELLED.value, reason=reason)

    # -------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------
    @property
    def tracking_history(self) -> list[dict]:
        return json.loads(self.tracking_updates) if self.tracking_updates else []

    def add_tracking_update(self, status, date=None, location=None, description=None):
        """Append a carrier progress record. Never changes the order status."""
        status = (status or "").strip()
        if not status:
            raise ValidationError({"status": ["A tracking update needs a status"]})

        if date is None:
            date = utcnow().isoformat()
        elif not isinstance(date, str):
            date = date.isoformat()

        update = {
            "date": date,
            "status": status,
            "location": location,
            "description": description,
        }
        history = self.tracking_history
        history.append(update)
        self.tracking_updates = json.dumps(history)
        self.tracking_status = status
        self.updated_at = utcnow()

        self.raise_(TrackingUpdateAdded(order_id=str(self.id), **update))
        return update

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def record_payment_status(self, payment_status):
        new_status = parse_payment_status(payment_status).value
        if new_status == self.payment_status:
            return

        previous = self.payment_status
        self.payment_status = new_status
        self.updated_at = utcnow()
        self.raise_(
            PaymentStatusRecorded(
                order_id=str(self.id),
                previous_status=previous,
                new_status=new_status,
            )
        )
