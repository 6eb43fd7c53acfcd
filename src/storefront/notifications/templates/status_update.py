"""Order status update: sent on every lifecycle transition."""

STATUS_LABELS = {
    "pending": "Order Placed",
    "processing": "Being Prepared",
    "shipped": "Shipped",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


class OrderStatusUpdateTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        new_status = context.get("new_status", "")
        tracking_number = context.get("tracking_number")

        if new_status == "shipped" and tracking_number:
            subject = f"Your Order Has Shipped! - #{order_number}"
        else:
            subject = f"Order Update - #{order_number}"

        body = f"Your order #{order_number} is now: {status_label(new_status)}.\n"
        if tracking_number:
            body += f"\nTracking Number: {tracking_number}\n"
        return {"subject": subject, "body": body}
