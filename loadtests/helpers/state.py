"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, except for the catalogue
seeded at test start which every shopper draws from.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks state for a single simulated shopper."""

    user_id: str | None = None
    address_id: str | None = None
    cart_lines: int = 0
    order_ids: list[str] = field(default_factory=list)


@dataclass
class CatalogueState:
    """Products seeded at test start. ``scarce_product_ids`` have very little stock."""

    product_ids: list[str] = field(default_factory=list)
    scarce_product_ids: list[str] = field(default_factory=list)


catalogue = CatalogueState()
