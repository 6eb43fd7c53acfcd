from decimal import Decimal

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Catalogue builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Persist a product straight through the repository and return it."""
    from storefront.catalogue.product import Product

    def _make(title="Dog Jacket", base_price="40.00", stock=10, **kwargs):
        product = Product.create(title=title, base_price=Decimal(base_price), stock=stock, **kwargs)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def make_variant():
    from storefront.catalogue.product import Product

    def _make(product, option_name="Size", option_value="XL", price=None, stock=None, sku=None):
        repo = current_domain.repository_for(Product)
        product = repo.get(product.id)
        variant = product.add_variant(
            option_name,
            option_value,
            price=Decimal(price) if price is not None else None,
            stock=stock,
            sku=sku,
        )
        repo.add(product)
        return variant

    return _make


@pytest.fixture()
def make_combo():
    from storefront.catalogue.combo import ComboOffer

    def _make(products, combo_price="25.00", name="Bath Bundle", **kwargs):
        combo = ComboOffer.create(
            name=name,
            product_ids=[str(p.id) for p in products],
            combo_price=Decimal(combo_price),
            **kwargs,
        )
        current_domain.repository_for(ComboOffer).add(combo)
        return combo

    return _make


@pytest.fixture()
def make_coupon():
    from storefront.coupon.coupon import Coupon

    def _make(code="SAVE10", coupon_type="percentage", amount="10", **kwargs):
        coupon = Coupon.create(code=code, coupon_type=coupon_type, amount=Decimal(amount), **kwargs)
        current_domain.repository_for(Coupon).add(coupon)
        return coupon

    return _make


@pytest.fixture()
def shipping_address():
    return {
        "name": "Jane Doe",
        "street": "12 Harbour Road",
        "city": "Portland",
        "state": "OR",
        "postal_code": "97201",
        "country": "US",
    }
