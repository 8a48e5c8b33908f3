"""Storefront Load Testing — Locust entry point.

Seeds a catalogue before the run and discovers all user classes from the
scenarios package. Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Checkout contention only:
    locust -f loadtests/locustfile.py ContendedCheckoutUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py CheckoutUser ContendedCheckoutUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.data_generators import product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import catalogue
from loadtests.scenarios.admin import AdminUser, BrowsingUser  # noqa: F401
from loadtests.scenarios.checkout import CheckoutUser, ContendedCheckoutUser  # noqa: F401

logger = logging.getLogger("loadtest")

ADMIN_HEADERS = {"X-User-Id": "admin-loadtest", "X-User-Role": "ADMIN"}
STOCKED_PRODUCTS = 20
SCARCE_PRODUCTS = 3
SCARCE_STOCK = 5


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Fires globally for all scenarios — no per-task wiring needed.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


def _seed_product(host, stock):
    resp = requests.post(f"{host}/products", json=product_data(stock=stock), headers=ADMIN_HEADERS, timeout=10)
    resp.raise_for_status()
    return resp.json()["id"]


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Seed a catalogue of well-stocked and scarce products."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    catalogue.product_ids = [_seed_product(environment.host, stock=10_000) for _ in range(STOCKED_PRODUCTS)]
    catalogue.scarce_product_ids = [_seed_product(environment.host, stock=SCARCE_STOCK) for _ in range(SCARCE_PRODUCTS)]
    print(f"[LOADTEST] Seeded {STOCKED_PRODUCTS} stocked and {SCARCE_PRODUCTS} scarce products\n")


def _units_sold(host):
    """Units per product on every order that still holds its stock (anything but CANCELLED)."""
    sold = {}
    page, total_pages = 1, 1
    while page <= total_pages:
        resp = requests.get(
            f"{host}/admin/orders", params={"page": page, "limit": 100}, headers=ADMIN_HEADERS, timeout=10
        )
        resp.raise_for_status()
        body = resp.json()
        for order in body["orders"]:
            if order["status"] == "CANCELLED":
                continue
            for item in order["items"]:
                sold[item["product_id"]] = sold.get(item["product_id"], 0) + item["quantity"]
        total_pages = body["pagination"]["total_pages"]
        page += 1
    return sold


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print order stats and verify the scarce products were not oversold."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        stats = requests.get(f"{environment.host}/admin/orders/stats", headers=ADMIN_HEADERS, timeout=5).json()
        print(f"[LOADTEST] Order stats: {stats}")
        sold = _units_sold(environment.host)
        for product_id in catalogue.scarce_product_ids:
            product = requests.get(f"{environment.host}/products/{product_id}", timeout=5).json()
            units = sold.get(product_id, 0)
            balanced = units <= SCARCE_STOCK and units + product["stock"] == SCARCE_STOCK
            marker = "OK" if balanced else "OVERSOLD"
            print(f"[LOADTEST] {product['sku']}: sold {units}, stock {product['stock']} of {SCARCE_STOCK} [{marker}]")
            if not balanced:
                environment.process_exit_code = 1
        print()
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch final stats: {e}\n")
