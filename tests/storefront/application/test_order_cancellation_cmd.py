"""Application tests for order cancellation."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from storefront.access import Requester
from storefront.catalogue.product import Product
from storefront.errors import Forbidden, InvalidTransition
from storefront.order.order import Order, OrderStatus

USER = "user-001"
CUSTOMER = Requester(id=USER)
ADMIN = Requester(id="admin-001", role="ADMIN")


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).stock


@pytest.fixture()
def placed(workflow, add_product, add_address, fill_cart):
    """An order for 2 of A (stock 5) and 3 of B (stock 10)."""
    a = add_product(stock=5)
    b = add_product(stock=10)
    fill_cart(USER, (a, 2), (b, 3))
    order = workflow.create_order(USER, add_address(USER))
    return order, a, b


class TestCancelOrder:
    def test_restores_stock_and_cancels(self, workflow, placed):
        order, a, b = placed
        assert (_stock(a), _stock(b)) == (3, 7)

        cancelled = workflow.cancel_order(CUSTOMER, order.id)

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert cancelled.cancelled_by == USER
        assert (_stock(a), _stock(b)) == (5, 10)

    def test_from_confirmed(self, workflow, placed):
        order, a, _ = placed
        workflow.update_order_status(ADMIN, order.id, "CONFIRMED")
        workflow.cancel_order(CUSTOMER, order.id)
        assert _stock(a) == 5

    def test_admin_can_cancel_any_order(self, workflow, placed):
        order, a, _ = placed
        cancelled = workflow.cancel_order(ADMIN, order.id)
        assert cancelled.cancelled_by == "admin-001"
        assert _stock(a) == 5

    def test_shipped_order_cannot_be_cancelled(self, workflow, placed):
        order, a, b = placed
        workflow.update_order_status(ADMIN, order.id, "SHIPPED")

        with pytest.raises(InvalidTransition):
            workflow.cancel_order(CUSTOMER, order.id)

        assert current_domain.repository_for(Order).get(order.id).status == "SHIPPED"
        assert (_stock(a), _stock(b)) == (3, 7)

    def test_cancelling_twice_fails_and_restores_once(self, workflow, placed):
        order, a, _ = placed
        workflow.cancel_order(CUSTOMER, order.id)
        with pytest.raises(InvalidTransition):
            workflow.cancel_order(CUSTOMER, order.id)
        assert _stock(a) == 5

    def test_someone_elses_order(self, workflow, placed):
        order, a, _ = placed
        with pytest.raises(Forbidden):
            workflow.cancel_order(Requester(id="user-002"), order.id)
        assert _stock(a) == 3

    def test_missing_order(self, workflow):
        with pytest.raises(ObjectNotFoundError):
            workflow.cancel_order(CUSTOMER, "missing")

    def test_vanished_product_is_skipped(self, workflow, placed):
        order, a, b = placed
        workflow.remove_product(b)

        cancelled = workflow.cancel_order(CUSTOMER, order.id)

        assert cancelled.status == OrderStatus.CANCELLED.value
        assert _stock(a) == 5
