"""Order lookups for customers, guests and back-office tools."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.errors import NotFoundError
from storefront.order.order import Order, parse_status
from storefront.projections.order_summary import OrderSummary


def get_order(order_id) -> Order:
    try:
        return current_domain.repository_for(Order).get(str(order_id))
    except ObjectNotFoundError:
        raise NotFoundError("order", str(order_id)) from None


def find_order_by_number(order_number, email=None) -> Order:
    """Public order tracking.

    When ``email`` is given it must match the order's guest email, ignoring
    case. A mismatch is reported exactly like an unknown number so the
    endpoint cannot be used to discover order numbers.
    """
    number = (order_number or "").strip().upper()
    repo = current_domain.repository_for(Order)
    order = repo._dao.query.filter(order_number=number).all().first if number else None
    if order is None:
        raise NotFoundError("order", number)

    if email is not None:
        if not order.guest_email or order.guest_email.strip().lower() != email.strip().lower():
            raise NotFoundError("order", number)
    return order


def list_orders(customer_id=None, status=None, limit=100, offset=0) -> list:
    """Order summaries, newest first, optionally narrowed by customer and status."""
    criteria = {}
    if customer_id:
        criteria["customer_id"] = str(customer_id)
    if status:
        criteria["status"] = parse_status(status).value

    query = current_domain.repository_for(OrderSummary)._dao.query
    if criteria:
        query = query.filter(**criteria)
    return query.order_by("-created_at").offset(offset).limit(limit).all().items
