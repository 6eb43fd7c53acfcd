"""Shared BDD fixtures and step definitions for the storefront."""

import json
from decimal import Decimal

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then

from storefront.cart.items import AddCartItem
from storefront.cart.snapshot import cart_snapshot
from storefront.coupon.engine import find_coupon
from storefront.order.checkout import PlaceOrder
from storefront.order.order import Order


@pytest.fixture()
def products():
    """Product title -> product, for steps that name products."""
    return {}


@pytest.fixture()
def outcome():
    """What the last When step produced: an order or a captured error."""
    return {"order": None, "exc": None}


@pytest.fixture()
def checkout(shipping_address, outcome):
    """Run PlaceOrder for an owner, recording the order or the rejection in ``outcome``."""

    def _checkout(owner_id, coupon_code=None):
        try:
            outcome["order"] = current_domain.process(
                PlaceOrder(
                    owner_id=owner_id,
                    shipping_address=json.dumps(shipping_address),
                    coupon_code=coupon_code,
                ),
                asynchronous=False,
            )
        except (ObjectNotFoundError, ValidationError) as exc:
            outcome["exc"] = exc

    return _checkout


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{title}" priced at {price} with {stock:d} in stock'))
def product_in_catalogue(make_product, products, title, price, stock):
    products[title] = make_product(title=title, base_price=price, stock=stock)


@given(parsers.cfparse('a percentage coupon "{code}" worth {amount:d}'))
def percentage_coupon(make_coupon, code, amount):
    make_coupon(code=code, coupon_type="percentage", amount=amount)


@given(parsers.cfparse('a fixed coupon "{code}" worth {amount:d} for carts of at least {minimum}'))
def fixed_coupon_with_minimum(make_coupon, code, amount, minimum):
    make_coupon(code=code, coupon_type="fixed", amount=amount, min_cart_total=Decimal(minimum))


@given(parsers.cfparse('a fixed coupon "{code}" worth {amount:d}'))
def fixed_coupon(make_coupon, code, amount):
    make_coupon(code=code, coupon_type="fixed", amount=amount)


@given(parsers.cfparse('the cart of "{owner_id}" holds {quantity:d} "{title}"'))
def cart_holds(products, owner_id, quantity, title):
    current_domain.process(
        AddCartItem(owner_id=owner_id, product_id=products[title].id, quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('"{owner_id}" has checked out'))
def has_checked_out(checkout, outcome, owner_id):
    checkout(owner_id)
    assert outcome["order"] is not None


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(outcome, status):
    order = current_domain.repository_for(Order).get(outcome["order"].id)
    assert order.status == status


@then("no order exists")
def no_order_exists():
    assert current_domain.repository_for(Order)._dao.query.all().items == []


@then(parsers.cfparse('the cart of "{owner_id}" is empty'))
def cart_is_empty(owner_id):
    assert cart_snapshot(owner_id).is_empty


@then(parsers.re(r'the cart of "(?P<owner_id>[^"]+)" still holds (?P<count>\d+) items?'))
def cart_still_holds(owner_id, count):
    assert cart_snapshot(owner_id).count == int(count)


@then(parsers.re(r'coupon "(?P<code>[^"]+)" has been used (?P<count>\d+) times?'))
def coupon_used(code, count):
    assert find_coupon(code).used_count == int(count)
