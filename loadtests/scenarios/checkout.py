"""Checkout load test scenarios.

Shoppers fill a cart and check out against a catalogue seeded at test start.
``ContendedCheckoutUser`` keeps buying products with a handful of units in
stock, so concurrent checkouts race for the last unit. Losing that race is an
expected outcome (409 InsufficientStock); overselling is not.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import address_data, cart_item_data, checkout_data, shopper_id
from loadtests.helpers.response import error_kind, extract_error_detail
from loadtests.helpers.state import ShopperState, catalogue

# Outcomes of a checkout race that are not failures
EXPECTED_CHECKOUT_ERRORS = {"InsufficientStock", "EmptyCart", "TransactionFailure"}


class CheckoutJourney(SequentialTaskSet):
    """Add Address -> Add Items -> View Cart -> Checkout -> (sometimes) Cancel."""

    product_pool = "product_ids"

    def on_start(self):
        self.state = ShopperState(user_id=shopper_id())
        self.headers = {"X-User-Id": self.state.user_id, "X-User-Role": "CUSTOMER"}

    @task
    def add_address(self):
        with self.client.post(
            "/addresses",
            json=address_data(is_default=True),
            headers=self.headers,
            catch_response=True,
            name="POST /addresses",
        ) as resp:
            if resp.status_code == 201:
                self.state.address_id = resp.json()["id"]
            else:
                resp.failure(f"Add address failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def fill_cart(self):
        pool = getattr(catalogue, self.product_pool) or catalogue.product_ids
        if not pool:
            self.interrupt()
            return
        for product_id in random.sample(pool, k=min(len(pool), random.randint(1, 3))):
            with self.client.post(
                "/cart/items",
                json=cart_item_data(product_id, quantity=1),
                headers=self.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code == 201:
                    self.state.cart_lines = resp.json()["item_count"]
                elif error_kind(resp) == "InsufficientStock":
                    resp.success()
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        self.client.get("/cart", headers=self.headers, name="GET /cart")

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(self.state.address_id),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["id"])
            elif error_kind(resp) in EXPECTED_CHECKOUT_ERRORS:
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def maybe_cancel(self):
        if not self.state.order_ids or random.random() > 0.3:
            return
        order_id = self.state.order_ids.pop()
        with self.client.put(
            f"/orders/{order_id}/cancel",
            headers=self.headers,
            catch_response=True,
            name="PUT /orders/{id}/cancel",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ContendedCheckoutJourney(CheckoutJourney):
    product_pool = "scarce_product_ids"


class CheckoutUser(HttpUser):
    """Shoppers buying from a well-stocked catalogue."""

    tasks = [CheckoutJourney]
    wait_time = between(0.5, 2)


class ContendedCheckoutUser(HttpUser):
    """Shoppers racing for products with almost no stock left."""

    tasks = [ContendedCheckoutJourney]
    wait_time = between(0.1, 0.5)
