"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas and pass
the domain's validation rules.
"""

import random
import uuid

from faker import Faker

fake = Faker()

SIZES = ["S", "M", "L", "XL"]
COLORS = ["black", "white", "navy", "red"]


def shopper_id() -> str:
    """User ids as the upstream auth layer would hand them over."""
    return f"user-lt-{uuid.uuid4().hex[:12]}"


def product_data(stock: int | None = None, price: float | None = None) -> dict:
    """Product payload with a unique SKU (max 50 chars)."""
    return {
        "sku": f"LT-{uuid.uuid4().hex[:10].upper()}",
        "title": fake.catch_phrase()[:255],
        "description": fake.sentence(),
        "price": price if price is not None else round(random.uniform(5, 80), 2),
        "stock": stock if stock is not None else random.randint(50, 500),
    }


def category_data() -> dict:
    name = f"{fake.word().title()} {uuid.uuid4().hex[:6]}"
    return {"name": name, "description": fake.sentence()}


def address_data(is_default: bool = False) -> dict:
    return {
        "name": fake.name()[:255],
        "phone": f"555-{random.randint(1000, 9999)}",
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "zip_code": fake.postcode()[:20],
        "country": "USA",
        "is_default": is_default,
    }


def cart_item_data(product_id: str, quantity: int | None = None) -> dict:
    payload = {
        "product_id": product_id,
        "quantity": quantity if quantity is not None else random.randint(1, 3),
    }
    if random.random() < 0.5:
        payload["size"] = random.choice(SIZES)
        payload["color"] = random.choice(COLORS)
    return payload


def checkout_data(address_id: str) -> dict:
    return {
        "address_id": address_id,
        "payment_method": random.choice(["card", "paypal", "cod"]),
        "notes": fake.sentence() if random.random() < 0.3 else None,
    }
