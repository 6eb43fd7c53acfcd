"""Checkout: cart to order in one unit of work."""

import json
import re
from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.items import AddCartItem
from storefront.cart.snapshot import cart_snapshot
from storefront.catalogue.management import AdjustProductStock, DeactivateProduct, UpdateProductPricing
from storefront.coupon.engine import find_coupon
from storefront.errors import CouponMinimumNotMetError, EmptyCartError, NotFoundError, OutOfStockError
from storefront.order.checkout import PlaceOrder
from storefront.order.order import Order


def add(owner_id, product_id, quantity=1, **kwargs):
    current_domain.process(
        AddCartItem(owner_id=owner_id, product_id=product_id, quantity=quantity, **kwargs),
        asynchronous=False,
    )


def checkout(owner_id, shipping_address, **kwargs):
    return current_domain.process(
        PlaceOrder(owner_id=owner_id, shipping_address=json.dumps(shipping_address), **kwargs),
        asynchronous=False,
    )


def order_count():
    return len(current_domain.repository_for(Order)._dao.query.all().items)


class TestSuccessfulCheckout:
    def test_order_totals(self, make_product, make_coupon, shipping_address):
        jacket = make_product(title="Dog Jacket", base_price="40.00")
        make_coupon(code="SAVE10", coupon_type="percentage", amount="10")
        add("cust-1", jacket.id, 2)

        order = checkout("cust-1", shipping_address, coupon_code="save10", payment_method="card")

        assert order.subtotal == Decimal("80.00")
        assert order.discount == Decimal("8.00")
        assert order.total == Decimal("72.00")
        assert order.coupon_code == "SAVE10"
        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert order.customer_id == "cust-1"
        assert order.currency == "USD"

    def test_order_number_format(self, make_product, shipping_address):
        add("cust-1", make_product().id)
        order = checkout("cust-1", shipping_address)
        assert re.fullmatch(r"ORD-\d{14}-[A-Z0-9]{6}", order.order_number)

    def test_items_copy_the_snapshot(self, make_product, make_variant, shipping_address):
        jacket = make_product(title="Dog Jacket", base_price="40.00", sku="JKT")
        variant = make_variant(jacket, price="45.00", sku="JKT-XL")
        add("cust-1", jacket.id, 1, variant_id=variant.id)

        order = checkout("cust-1", shipping_address)

        [item] = order.items
        assert item.title == "Dog Jacket"
        assert item.option == "Size: XL"
        assert item.sku == "JKT-XL"
        assert item.unit_price == Decimal("45.00")
        assert item.line_total == Decimal("45.00")

    def test_cart_is_emptied(self, make_product, shipping_address):
        add("cust-1", make_product().id, 2)
        checkout("cust-1", shipping_address)
        assert cart_snapshot("cust-1").is_empty

    def test_coupon_use_is_consumed(self, make_product, make_coupon, shipping_address):
        make_coupon(code="SAVE10", max_uses=5)
        add("cust-1", make_product().id)
        checkout("cust-1", shipping_address, coupon_code="SAVE10")
        assert find_coupon("SAVE10").used_count == 1

    def test_fixed_discount_larger_than_subtotal(self, make_product, make_coupon, shipping_address):
        make_coupon(code="BIGFIX", coupon_type="fixed", amount="100")
        add("cust-1", make_product(base_price="30.00").id)

        order = checkout("cust-1", shipping_address, coupon_code="BIGFIX")
        assert order.discount == Decimal("30.00")
        assert order.total == Decimal("0.00")

    def test_addresses_are_stored(self, make_product, shipping_address):
        add("cust-1", make_product().id)
        billing = dict(shipping_address, street="1 Billing Way")
        order = checkout("cust-1", shipping_address, billing_address=json.dumps(billing))

        assert order.shipping_address.city == "Portland"
        assert order.billing_address.street == "1 Billing Way"

    def test_prices_are_frozen_after_checkout(self, make_product, shipping_address):
        jacket = make_product(base_price="40.00")
        add("cust-1", jacket.id)
        order = checkout("cust-1", shipping_address)

        current_domain.process(
            UpdateProductPricing(product_id=jacket.id, base_price=Decimal("99.00")), asynchronous=False
        )

        stored = current_domain.repository_for(Order).get(order.id)
        assert stored.total == Decimal("40.00")
        assert stored.items[0].unit_price == Decimal("40.00")

    def test_each_checkout_gets_a_new_number(self, make_product, shipping_address):
        product = make_product(stock=10)
        numbers = set()
        for owner in ("a", "b", "c"):
            add(owner, product.id)
            numbers.add(checkout(owner, shipping_address).order_number)
        assert len(numbers) == 3


class TestGuestCheckout:
    def test_guest_order_has_no_customer(self, make_product, shipping_address):
        add("guest-xyz", make_product().id)
        order = checkout("guest-xyz", shipping_address, guest_email="guest@example.com")

        assert order.customer_id is None
        assert order.guest_email == "guest@example.com"
        assert order.contact_email == "guest@example.com"

    def test_invalid_guest_email(self, make_product, shipping_address):
        add("guest-xyz", make_product().id)
        with pytest.raises(ValidationError) as exc:
            checkout("guest-xyz", shipping_address, guest_email="not-an-email")
        assert "guest_email" in exc.value.messages
        assert order_count() == 0


class TestRejectedCheckout:
    def test_missing_cart(self, shipping_address):
        with pytest.raises(EmptyCartError):
            checkout("nobody", shipping_address)

    def test_empty_cart(self, make_product, shipping_address):
        add("cust-1", make_product().id)
        checkout("cust-1", shipping_address)
        with pytest.raises(EmptyCartError):
            checkout("cust-1", shipping_address)

    def test_coupon_failure_changes_nothing(self, make_product, make_coupon, shipping_address):
        make_coupon(code="BIG", min_cart_total=Decimal("500"))
        add("cust-1", make_product(base_price="40.00").id)

        with pytest.raises(CouponMinimumNotMetError):
            checkout("cust-1", shipping_address, coupon_code="BIG")

        assert order_count() == 0
        assert cart_snapshot("cust-1").count == 1
        assert find_coupon("BIG").used_count == 0

    def test_stock_drop_changes_nothing(self, make_product, make_coupon, shipping_address):
        make_coupon(code="SAVE10")
        product = make_product(stock=5)
        add("cust-1", product.id, 3)
        current_domain.process(AdjustProductStock(product_id=product.id, stock=1), asynchronous=False)

        with pytest.raises(OutOfStockError):
            checkout("cust-1", shipping_address, coupon_code="SAVE10")

        assert order_count() == 0
        assert cart_snapshot("cust-1").count == 3
        assert find_coupon("SAVE10").used_count == 0

    def test_withdrawn_product_blocks_checkout(self, make_product, shipping_address):
        product = make_product()
        add("cust-1", product.id)
        current_domain.process(DeactivateProduct(product_id=product.id), asynchronous=False)

        with pytest.raises(NotFoundError):
            checkout("cust-1", shipping_address)
        assert order_count() == 0
        assert cart_snapshot("cust-1").count == 1
