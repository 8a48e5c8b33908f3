"""Back-office load test scenarios: order search, stats and status overrides."""

import random

from locust import HttpUser, between, task

from loadtests.helpers.response import extract_error_detail

ADMIN_HEADERS = {"X-User-Id": "admin-loadtest", "X-User-Role": "ADMIN"}
FULFILLMENT_STATUSES = ["CONFIRMED", "PROCESSING", "SHIPPED", "DELIVERED"]


class AdminUser(HttpUser):
    wait_time = between(1, 3)

    @task(3)
    def order_stats(self):
        self.client.get("/admin/orders/stats", headers=ADMIN_HEADERS, name="GET /admin/orders/stats")

    @task(2)
    def list_pending(self):
        self.client.get(
            "/admin/orders",
            params={"status": "PENDING", "limit": 20},
            headers=ADMIN_HEADERS,
            name="GET /admin/orders?status",
        )

    @task(1)
    def advance_an_order(self):
        resp = self.client.get(
            "/admin/orders",
            params={"status": "PENDING", "limit": 5},
            headers=ADMIN_HEADERS,
            name="GET /admin/orders?status",
        )
        if resp.status_code != 200 or not resp.json()["orders"]:
            return
        order_id = random.choice(resp.json()["orders"])["id"]
        with self.client.put(
            f"/admin/orders/{order_id}/status",
            json={"status": random.choice(FULFILLMENT_STATUSES)},
            headers=ADMIN_HEADERS,
            catch_response=True,
            name="PUT /admin/orders/{id}/status",
        ) as put:
            if put.status_code != 200:
                put.failure(f"Status update failed: {put.status_code} — {extract_error_detail(put)}")


class BrowsingUser(HttpUser):
    """Anonymous catalogue reads."""

    wait_time = between(0.5, 2)

    @task(3)
    def list_products(self):
        self.client.get("/products", params={"limit": 20}, name="GET /products")

    @task(1)
    def list_categories(self):
        self.client.get("/categories", name="GET /categories")
