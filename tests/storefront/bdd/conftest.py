"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from protean.exceptions import ProteanException
from pytest_bdd import given, parsers, then
from storefront.access import Requester, Role
from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.order.pricing import to_money


@pytest.fixture()
def shopper():
    return "user-001"


@pytest.fixture()
def admin():
    return Requester(id="admin-001", role=Role.ADMIN.value)


@pytest.fixture()
def shop():
    """Scenario state: product ids by name, the shopper's address, the order and the last failure."""
    return {"products": {}, "address_id": None, "order_id": None, "error": None}


@pytest.fixture()
def attempt(shop):
    """Run an action, capturing a storefront failure in ``shop["error"]`` instead of raising it."""

    def _attempt(action):
        try:
            return action()
        except ProteanException as exc:
            shop["error"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the shopper has a shipping address")
def _(shop, shopper, add_address):
    shop["address_id"] = add_address(shopper)


@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(shop, add_product, name, price, stock):
    shop["products"][name] = add_product(price=price, stock=stock, title=name)


@given(parsers.cfparse('the shopper\'s cart holds {quantity:d} of "{name}"'))
def _(shop, shopper, fill_cart, quantity, name):
    fill_cart(shopper, (shop["products"][name], quantity))


@given(parsers.cfparse('an administrator sets the stock of "{name}" to {stock:d}'))
def _(shop, workflow, name, stock):
    workflow.update_product(shop["products"][name], stock=stock)


@given("the shopper has placed an order")
def _(shop, shopper, workflow):
    shop["order_id"] = str(workflow.create_order(shopper, shop["address_id"]).id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(shop, name, stock):
    assert current_domain.repository_for(Product).get(shop["products"][name]).stock == stock


@then(parsers.cfparse('the order status is "{status}"'))
def _(shop, status):
    assert current_domain.repository_for(Order).get(shop["order_id"]).status == status


def _assert_money(shop, field_name, amount):
    order = current_domain.repository_for(Order).get(shop["order_id"])
    assert str(to_money(getattr(order, field_name))) == amount


@then(parsers.cfparse("the order subtotal is {amount}"))
def _(shop, amount):
    _assert_money(shop, "subtotal", amount)


@then(parsers.cfparse("the order shipping cost is {amount}"))
def _(shop, amount):
    _assert_money(shop, "shipping_cost", amount)


@then(parsers.cfparse("the order tax is {amount}"))
def _(shop, amount):
    _assert_money(shop, "tax", amount)


@then(parsers.cfparse("the order total is {amount}"))
def _(shop, amount):
    _assert_money(shop, "total", amount)


@then("the shopper's cart is empty")
def _(shopper):
    cart = current_domain.repository_for(Cart).for_user(shopper)
    assert cart is None or cart.is_empty


@then("no orders exist")
def _():
    assert current_domain.repository_for(Order).count_by_status() == 0
