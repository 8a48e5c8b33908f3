"""Application tests for cart commands and the cart view."""

from decimal import Decimal

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from storefront.cart.view import get_or_create_cart, view_cart
from storefront.catalogue.management import RemoveProduct, UpdateProduct
from storefront.errors import InsufficientStock, InvalidQuantity

USER = "user-001"


def _cart():
    return current_domain.repository_for(Cart).for_user(USER)


class TestGetOrCreate:
    def test_creates_cart_lazily(self):
        assert _cart() is None
        cart = get_or_create_cart(USER)
        assert cart.user_id == USER
        assert _cart() is not None

    def test_returns_existing_cart(self):
        first = get_or_create_cart(USER)
        second = get_or_create_cart(USER)
        assert first.id == second.id


class TestAddToCart:
    def test_add_item_persists(self, add_product, fill_cart):
        product_id = add_product(price=10.0, stock=5)
        fill_cart(USER, (product_id, 2))
        cart = _cart()
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2

    def test_same_variant_twice_gives_one_line(self, add_product, fill_cart):
        product_id = add_product(stock=10)
        fill_cart(USER, (product_id, 2), size="M", color="red")
        fill_cart(USER, (product_id, 3), size="M", color="red")
        cart = _cart()
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_missing_product_fails(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(AddToCart(user_id=USER, product_id="missing", quantity=1), asynchronous=False)

    def test_quantity_below_one_fails(self, add_product):
        product_id = add_product()
        with pytest.raises(InvalidQuantity):
            current_domain.process(AddToCart(user_id=USER, product_id=product_id, quantity=0), asynchronous=False)

    def test_quantity_above_stock_fails(self, add_product):
        product_id = add_product(stock=2)
        with pytest.raises(InsufficientStock):
            current_domain.process(AddToCart(user_id=USER, product_id=product_id, quantity=3), asynchronous=False)
        assert _cart() is None


class TestUpdateCartItem:
    def test_update_quantity(self, add_product, fill_cart):
        product_id = add_product(stock=10)
        fill_cart(USER, (product_id, 1))
        item_id = str(_cart().items[0].id)

        current_domain.process(UpdateCartItem(user_id=USER, item_id=item_id, quantity=4), asynchronous=False)
        assert _cart().items[0].quantity == 4

    def test_quantity_above_current_stock_fails(self, add_product, fill_cart):
        product_id = add_product(stock=3)
        fill_cart(USER, (product_id, 1))
        item_id = str(_cart().items[0].id)

        with pytest.raises(InsufficientStock):
            current_domain.process(UpdateCartItem(user_id=USER, item_id=item_id, quantity=4), asynchronous=False)
        assert _cart().items[0].quantity == 1

    def test_zero_fails(self, add_product, fill_cart):
        product_id = add_product()
        fill_cart(USER, (product_id, 1))
        item_id = str(_cart().items[0].id)
        with pytest.raises(InvalidQuantity):
            current_domain.process(UpdateCartItem(user_id=USER, item_id=item_id, quantity=0), asynchronous=False)

    def test_line_in_someone_elses_cart_is_not_found(self, add_product, fill_cart):
        product_id = add_product()
        fill_cart("user-002", (product_id, 1))
        other_item = str(current_domain.repository_for(Cart).for_user("user-002").items[0].id)
        get_or_create_cart(USER)

        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateCartItem(user_id=USER, item_id=other_item, quantity=2), asynchronous=False)


class TestRemoveAndClear:
    def test_remove_item(self, add_product, fill_cart):
        product_id = add_product()
        fill_cart(USER, (product_id, 1))
        item_id = str(_cart().items[0].id)

        current_domain.process(RemoveCartItem(user_id=USER, item_id=item_id), asynchronous=False)
        assert _cart().is_empty

    def test_remove_twice_is_harmless(self, add_product, fill_cart):
        product_id = add_product()
        fill_cart(USER, (product_id, 1))
        item_id = str(_cart().items[0].id)

        current_domain.process(RemoveCartItem(user_id=USER, item_id=item_id), asynchronous=False)
        current_domain.process(RemoveCartItem(user_id=USER, item_id=item_id), asynchronous=False)
        assert _cart().is_empty

    def test_clear_keeps_the_cart(self, add_product, fill_cart):
        fill_cart(USER, (add_product(), 1), (add_product(), 2))
        cart_id = _cart().id

        current_domain.process(ClearCart(user_id=USER), asynchronous=False)
        cart = _cart()
        assert cart.id == cart_id
        assert cart.is_empty

    def test_clear_without_cart_is_harmless(self):
        current_domain.process(ClearCart(user_id=USER), asynchronous=False)
        assert _cart() is None


class TestCartView:
    def test_subtotal_and_item_count(self, add_product, fill_cart):
        mug = add_product(price=12.5, stock=10)
        plate = add_product(price=3.3, stock=10)
        fill_cart(USER, (mug, 2), (plate, 3))

        view = view_cart(USER)
        assert view.subtotal == Decimal("34.90")
        assert view.item_count == 2

    def test_item_count_counts_lines_not_units(self, add_product, fill_cart):
        fill_cart(USER, (add_product(stock=10), 7))
        assert view_cart(USER).item_count == 1

    def test_subtotal_follows_live_price(self, add_product, fill_cart):
        product_id = add_product(price=10.0, stock=10)
        fill_cart(USER, (product_id, 2))

        current_domain.process(UpdateProduct(product_id=product_id, price=15.0), asynchronous=False)
        assert view_cart(USER).subtotal == Decimal("30.00")

    def test_empty_cart_view(self):
        view = view_cart(USER)
        assert view.subtotal == Decimal("0.00")
        assert view.item_count == 0

    def test_removed_product_prices_at_zero(self, add_product, fill_cart):
        kept = add_product(price=4.0, stock=10)
        removed = add_product(price=10.0, stock=10)
        fill_cart(USER, (kept, 1), (removed, 2))

        current_domain.process(RemoveProduct(product_id=removed), asynchronous=False)

        view = view_cart(USER)
        assert view.item_count == 2
        assert view.subtotal == Decimal("4.00")
        gone = next(line for line in view.lines if line.product_id == removed)
        assert gone.unit_price == Decimal("0.00")
        assert gone.title is None
