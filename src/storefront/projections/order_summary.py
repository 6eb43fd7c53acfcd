"""Order summary: the listing view behind order history and the admin board."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Decimal, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged, PaymentStatusRecorded
from storefront.order.order import Order


@storefront.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=40)
    customer_id = Identifier()
    guest_email = String(max_length=254)
    status = String(required=True, max_length=20)
    payment_status = String(max_length=20)
    item_count = Integer(default=0)
    total = Decimal()
    currency = String(max_length=3, default="USD")
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                guest_email=event.guest_email,
                status="pending",
                payment_status=event.payment_status,
                item_count=sum(item["quantity"] for item in items),
                total=event.total,
                currency=event.currency or "USD",
                created_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.new_status
        summary.updated_at = event.changed_at
        repo.add(summary)

    @on(PaymentStatusRecorded)
    def on_payment_status_recorded(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.payment_status = event.new_status
        repo.add(summary)
