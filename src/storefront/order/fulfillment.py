"""Order lifecycle commands: status transitions, tracking and payment status.

Each command loads one order, applies a single change and saves it with its
version, so two administrators updating the same order are serialized.
"""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order
from storefront.order.queries import get_order


@storefront.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    tracking_number = String(max_length=255)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class AddTrackingUpdate:
    """A carrier progress event. ``date`` defaults to now."""

    order_id = Identifier(required=True)
    status = String(required=True, max_length=100)
    date = String(max_length=40)
    location = String(max_length=255, sanitize=False)
    description = Text(sanitize=False)


@storefront.command(part_of="Order")
class RecordPaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=20)


@storefront.command_handler(part_of=Order)
class OrderFulfillmentHandler:
    @handle(TransitionOrderStatus)
    def transition_status(self, command):
        order = get_order(command.order_id)
        previous = order.status
        order.transition_to(
            command.status,
            tracking_number=command.tracking_number,
            reason=command.reason,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "order_status_changed",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
        )
        return order

    @handle(AddTrackingUpdate)
    def add_tracking_update(self, command):
        order = get_order(command.order_id)
        order.add_tracking_update(
            command.status,
            date=command.date,
            location=command.location,
            description=command.description,
        )
        current_domain.repository_for(Order).add(order)
        return order

    @handle(RecordPaymentStatus)
    def record_payment_status(self, command):
        order = get_order(command.order_id)
        order.record_payment_status(command.payment_status)
        current_domain.repository_for(Order).add(order)
        logger.info("payment_status_recorded", order_id=str(order.id), payment_status=order.payment_status)
        return order
