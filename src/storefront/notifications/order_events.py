"""Order notifications: confirmation on placement, an update on every transition.

Sending email is fire-and-forget. A provider that fails or raises is logged
and otherwise ignored, so a notification problem never undoes an order or a
status change.
"""

import json

from protean.utils.mixins import handle

from storefront.domain import logger, setting, storefront
from storefront.notifications.channel import EMAIL, get_channel
from storefront.notifications.templates import ORDER_CONFIRMATION, ORDER_STATUS_UPDATE, get_template
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.order.order import Order


def send_order_email(notification_type: str, recipient: str | None, context: dict) -> dict | None:
    """Render and send one email. Returns the adapter's result, or None if nothing was sent."""
    if not recipient:
        logger.info(
            "notification_skipped",
            notification_type=notification_type,
            order_number=context.get("order_number"),
            reason="no recipient",
        )
        return None

    rendered = get_template(notification_type).render(context)
    try:
        result = get_channel(EMAIL).send(
            to=recipient,
            subject=rendered["subject"],
            body=rendered["body"],
            sender=setting("notification_sender"),
        )
    except Exception as exc:
        logger.error(
            "notification_failed",
            notification_type=notification_type,
            order_number=context.get("order_number"),
            error=str(exc),
        )
        return None

    if result.get("status") != "sent":
        logger.warning(
            "notification_not_delivered",
            notification_type=notification_type,
            order_number=context.get("order_number"),
            error=result.get("error"),
        )
    else:
        logger.info(
            "notification_sent",
            notification_type=notification_type,
            order_number=context.get("order_number"),
            message_id=result.get("message_id"),
        )
    return result


@storefront.event_handler(part_of=Order)
class OrderNotificationsHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        send_order_email(
            ORDER_CONFIRMATION,
            event.contact_email,
            {
                "order_number": event.order_number,
                "items": json.loads(event.items) if isinstance(event.items, str) else [],
                "subtotal": str(event.subtotal),
                "discount": str(event.discount),
                "total": str(event.total),
                "currency": event.currency or "USD",
            },
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        send_order_email(
            ORDER_STATUS_UPDATE,
            event.contact_email,
            {
                "order_number": event.order_number,
                "previous_status": event.previous_status,
                "new_status": event.new_status,
                "tracking_number": event.tracking_number,
            },
        )
