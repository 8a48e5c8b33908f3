"""BDD tests for order cancellation."""

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.access import Requester
from storefront.order.order import Order

scenarios("features/order_cancellation.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('an administrator marks the order "{status}"'))
def _(shop, workflow, admin, status):
    workflow.update_order_status(admin, shop["order_id"], status)


@given("the shopper cancelled the order")
def _(shop, shopper, workflow):
    workflow.cancel_order(Requester(id=shopper), shop["order_id"])


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the shopper cancels the order")
def _(shop, shopper, workflow, attempt):
    attempt(lambda: workflow.cancel_order(Requester(id=shopper), shop["order_id"]))


@when(parsers.cfparse('"{user_id}" cancels the order'))
def _(shop, workflow, attempt, user_id):
    attempt(lambda: workflow.cancel_order(Requester(id=user_id), shop["order_id"]))


@when("an administrator cancels the order")
def _(shop, workflow, admin, attempt):
    attempt(lambda: workflow.cancel_order(admin, shop["order_id"]))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('cancellation fails with "{kind}"'))
def _(shop, kind):
    assert type(shop["error"]).__name__ == kind


@then("the order was cancelled by the shopper")
def _(shop, shopper):
    order = current_domain.repository_for(Order).get(shop["order_id"])
    assert order.cancelled_by == shopper
    assert order.cancelled_at is not None
