from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import (
    AddCartItem,
    ClearCart,
    MergeGuestCart,
    RemoveCartItem,
    UpdateCartItemQuantity,
)
from storefront.cart.snapshot import cart_snapshot
from storefront.catalogue.management import DeactivateProduct, UpdateProductPricing
from storefront.errors import NotFoundError, OutOfStockError


def add(owner_id, product_id, quantity=1, **kwargs):
    return current_domain.process(
        AddCartItem(owner_id=owner_id, product_id=product_id, quantity=quantity, **kwargs),
        asynchronous=False,
    )


class TestAddItem:
    def test_creates_cart_on_first_add(self, make_product):
        product = make_product(base_price="40.00")
        snapshot = add("cust-1", product.id, 2)

        assert snapshot.owner_id == "cust-1"
        assert snapshot.count == 2
        assert snapshot.subtotal == Decimal("80.00")
        assert current_domain.repository_for(Cart).get("cust-1").item_count == 2

    def test_same_product_grows_the_line(self, make_product):
        product = make_product()
        add("cust-1", product.id, 1)
        snapshot = add("cust-1", product.id, 2)

        assert len(snapshot.lines) == 1
        assert snapshot.lines[0].quantity == 3

    def test_variants_are_separate_lines(self, make_product, make_variant):
        product = make_product(base_price="40.00")
        variant = make_variant(product, price="45.00")
        add("cust-1", product.id)
        snapshot = add("cust-1", product.id, variant_id=variant.id)

        assert len(snapshot.lines) == 2
        assert snapshot.subtotal == Decimal("85.00")
        variant_line = next(line for line in snapshot.lines if line.variant_id)
        assert variant_line.option == "Size: XL"

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, make_product, quantity):
        product = make_product()
        with pytest.raises(ValidationError):
            add("cust-1", product.id, quantity)

    def test_unknown_product(self):
        with pytest.raises(NotFoundError):
            add("cust-1", "missing-product")

    def test_out_of_stock(self, make_product):
        product = make_product(stock=2)
        with pytest.raises(OutOfStockError) as exc:
            add("cust-1", product.id, 3)
        assert exc.value.available == 2

    def test_stock_check_counts_what_is_already_in_the_cart(self, make_product):
        product = make_product(stock=3)
        add("cust-1", product.id, 2)
        with pytest.raises(OutOfStockError):
            add("cust-1", product.id, 2)
        assert cart_snapshot("cust-1").count == 2

    def test_backorder_ignores_stock(self, make_product):
        product = make_product(stock=0, allow_backorder=True)
        assert add("cust-1", product.id, 5).count == 5

    def test_variant_stock_overrides_product_stock(self, make_product, make_variant):
        product = make_product(stock=50)
        variant = make_variant(product, stock=1)
        with pytest.raises(OutOfStockError):
            add("cust-1", product.id, 2, variant_id=variant.id)

    def test_combo_needs_stock_of_every_product(self, make_product, make_combo):
        towel = make_product(title="Towel", stock=10)
        shampoo = make_product(title="Shampoo", stock=1)
        combo = make_combo([towel, shampoo], combo_price="25.00")

        with pytest.raises(OutOfStockError) as exc:
            add("cust-1", towel.id, 2, combo_offer_id=combo.id)
        assert exc.value.product_id == str(shampoo.id)

    def test_combo_line_priced_at_combo_price(self, make_product, make_combo):
        towel = make_product(title="Towel", base_price="15.00")
        shampoo = make_product(title="Shampoo", base_price="20.00")
        combo = make_combo([towel, shampoo], combo_price="25.00", name="Bath Bundle")

        snapshot = add("cust-1", towel.id, 2, combo_offer_id=combo.id)
        assert snapshot.lines[0].title == "Bath Bundle"
        assert snapshot.subtotal == Decimal("50.00")


class TestUpdateAndRemove:
    def test_update_quantity(self, make_product):
        product = make_product(base_price="10.00")
        line_id = add("cust-1", product.id).lines[0].line_id

        snapshot = current_domain.process(
            UpdateCartItemQuantity(owner_id="cust-1", line_id=line_id, quantity=4), asynchronous=False
        )
        assert snapshot.subtotal == Decimal("40.00")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_update_to_non_positive_quantity_is_rejected(self, make_product, quantity):
        product = make_product()
        line_id = add("cust-1", product.id, 3).lines[0].line_id
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateCartItemQuantity(owner_id="cust-1", line_id=line_id, quantity=quantity), asynchronous=False
            )
        assert cart_snapshot("cust-1").count == 3

    def test_update_line_of_another_owner(self, make_product):
        line_id = add("cust-1", make_product().id, 2).lines[0].line_id
        add("cust-2", make_product(title="Other").id)

        with pytest.raises(NotFoundError):
            current_domain.process(
                UpdateCartItemQuantity(owner_id="cust-2", line_id=line_id, quantity=5), asynchronous=False
            )
        assert cart_snapshot("cust-1").lines[0].quantity == 2

    def test_remove_line_of_another_owner_changes_nothing(self, make_product):
        line_id = add("cust-1", make_product().id, 2).lines[0].line_id
        add("cust-2", make_product(title="Other").id)

        snapshot = current_domain.process(RemoveCartItem(owner_id="cust-2", line_id=line_id), asynchronous=False)
        assert snapshot.count == 1
        assert cart_snapshot("cust-1").count == 2

    def test_update_beyond_stock(self, make_product):
        product = make_product(stock=2)
        line_id = add("cust-1", product.id).lines[0].line_id
        with pytest.raises(OutOfStockError):
            current_domain.process(
                UpdateCartItemQuantity(owner_id="cust-1", line_id=line_id, quantity=3), asynchronous=False
            )

    def test_update_unknown_line(self, make_product):
        add("cust-1", make_product().id)
        with pytest.raises(NotFoundError):
            current_domain.process(
                UpdateCartItemQuantity(owner_id="cust-1", line_id="nope", quantity=1), asynchronous=False
            )

    def test_remove_line(self, make_product):
        keep = make_product(title="Keep", base_price="5.00")
        drop = make_product(title="Drop")
        add("cust-1", keep.id)
        line_id = add("cust-1", drop.id).lines[-1].line_id

        snapshot = current_domain.process(RemoveCartItem(owner_id="cust-1", line_id=line_id), asynchronous=False)
        assert [line.product_id for line in snapshot.lines] == [str(keep.id)]

    def test_remove_missing_line_is_a_no_op(self, make_product):
        add("cust-1", make_product().id)
        snapshot = current_domain.process(RemoveCartItem(owner_id="cust-1", line_id="nope"), asynchronous=False)
        assert snapshot.count == 1

    def test_clear(self, make_product):
        add("cust-1", make_product(title="A").id)
        add("cust-1", make_product(title="B").id)

        snapshot = current_domain.process(ClearCart(owner_id="cust-1"), asynchronous=False)
        assert snapshot.is_empty
        assert snapshot.subtotal == Decimal("0.00")

    def test_clear_without_cart(self):
        snapshot = current_domain.process(ClearCart(owner_id="nobody"), asynchronous=False)
        assert snapshot.is_empty


class TestSnapshotFreshness:
    def test_price_change_shows_up_immediately(self, make_product):
        product = make_product(base_price="40.00")
        add("cust-1", product.id, 2)

        current_domain.process(
            UpdateProductPricing(product_id=product.id, base_price=Decimal("35.00")), asynchronous=False
        )
        assert cart_snapshot("cust-1").subtotal == Decimal("70.00")

    def test_withdrawn_product_is_reported_unavailable(self, make_product):
        kept = make_product(title="Kept", base_price="10.00")
        withdrawn = make_product(title="Withdrawn", base_price="99.00")
        add("cust-1", kept.id)
        add("cust-1", withdrawn.id)

        current_domain.process(DeactivateProduct(product_id=withdrawn.id), asynchronous=False)

        snapshot = cart_snapshot("cust-1")
        unavailable = [line for line in snapshot.lines if not line.available]
        assert [line.product_id for line in unavailable] == [str(withdrawn.id)]
        assert snapshot.subtotal == Decimal("10.00")
        assert snapshot.count == 2

    def test_owner_without_cart_gets_empty_snapshot(self):
        snapshot = cart_snapshot("nobody")
        assert snapshot.is_empty
        assert snapshot.count == 0


class TestMergeGuestCart:
    def test_merges_lines_and_empties_guest_cart(self, make_product):
        shared = make_product(title="Shared")
        guest_only = make_product(title="Guest only")
        add("cust-1", shared.id, 1)
        add("guest-abc", shared.id, 2)
        add("guest-abc", guest_only.id, 1)

        snapshot = current_domain.process(
            MergeGuestCart(owner_id="cust-1", guest_owner_id="guest-abc"), asynchronous=False
        )

        quantities = {line.product_id: line.quantity for line in snapshot.lines}
        assert quantities == {str(shared.id): 3, str(guest_only.id): 1}
        assert cart_snapshot("guest-abc").is_empty

    def test_merging_missing_guest_cart(self, make_product):
        add("cust-1", make_product().id)
        snapshot = current_domain.process(
            MergeGuestCart(owner_id="cust-1", guest_owner_id="guest-none"), asynchronous=False
        )
        assert snapshot.count == 1

    def test_merge_beyond_stock_is_rejected(self, make_product):
        product = make_product(stock=2)
        add("cust-1", product.id, 2)
        add("guest-abc", product.id, 2)

        with pytest.raises(OutOfStockError):
            current_domain.process(MergeGuestCart(owner_id="cust-1", guest_owner_id="guest-abc"), asynchronous=False)

        assert cart_snapshot("cust-1").count == 2
        assert cart_snapshot("guest-abc").count == 2

    def test_merge_with_withdrawn_product_is_rejected(self, make_product):
        product = make_product()
        add("guest-abc", product.id)
        current_domain.process(DeactivateProduct(product_id=product.id), asynchronous=False)

        with pytest.raises(NotFoundError):
            current_domain.process(MergeGuestCart(owner_id="cust-1", guest_owner_id="guest-abc"), asynchronous=False)

        assert cart_snapshot("cust-1").is_empty
        assert cart_snapshot("guest-abc").count == 1
