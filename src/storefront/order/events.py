"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Decimal, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new, priced order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier()
    guest_email = String()
    contact_email = String()
    items = Text(required=True, sanitize=False)  # JSON: frozen order items
    subtotal = Decimal(required=True)
    discount = Decimal(required=True)
    total = Decimal(required=True)
    currency = String(max_length=3)
    coupon_code = String()
    payment_method = String()
    payment_status = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    contact_email = String()
    previous_status = String(required=True)
    new_status = String(required=True)
    tracking_number = String()
    reason = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TrackingUpdateAdded:
    """A carrier or administrator posted a shipment progress event."""

    __version__ = 1

    order_id = Identifier(required=True)
    date = String(required=True)
    status = String(required=True)
    location = String()
    description = Text(sanitize=False)


@storefront.event(part_of="Order")
class PaymentStatusRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String()
    new_status = String(required=True)
