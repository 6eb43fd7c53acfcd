"""Email templates for order notifications, keyed by notification type."""

from storefront.notifications.templates.order_confirmation import OrderConfirmationTemplate
from storefront.notifications.templates.status_update import STATUS_LABELS, OrderStatusUpdateTemplate, status_label

ORDER_CONFIRMATION = "order_confirmation"
ORDER_STATUS_UPDATE = "order_status_update"

TEMPLATE_REGISTRY: dict[str, type] = {
    ORDER_CONFIRMATION: OrderConfirmationTemplate,
    ORDER_STATUS_UPDATE: OrderStatusUpdateTemplate,
}

__all__ = [
    "ORDER_CONFIRMATION",
    "ORDER_STATUS_UPDATE",
    "STATUS_LABELS",
    "TEMPLATE_REGISTRY",
    "get_template",
    "status_label",
]


def get_template(notification_type: str):
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
