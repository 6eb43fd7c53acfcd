"""Storefront bounded context: Catalogue, Cart, Coupons and Orders.

Turns a mutable, per-owner shopping cart into a priced, discounted and
immutable order, then drives that order through its fulfillment lifecycle.
Catalogue records are maintained by administrators and read through a
per-request lookup when carts and orders are priced.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)


def setting(name, default=None):
    """Read a storefront-specific value from the ``custom`` config section."""
    return storefront.config.get("custom", {}).get(name, default)
