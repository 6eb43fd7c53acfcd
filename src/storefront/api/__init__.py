"""Storefront API package."""

from storefront.api.routes import combo_router, cart_router, coupon_router, order_router, product_router

__all__ = ["cart_router", "combo_router", "coupon_router", "order_router", "product_router"]
