"""Storefront runtime settings, read once from the environment.

Protean's own configuration (providers, processing modes) lives in
``domain.toml`` next to the domain module. The values here are the business
rules of checkout and the limits of the checkout transaction.
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class CheckoutPolicy:
    """Shipping and tax rules applied when an order is priced."""

    free_shipping_threshold: Decimal = Decimal("100.00")
    flat_shipping: Decimal = Decimal("9.99")
    tax_rate: Decimal = Decimal("0.10")


@dataclass(frozen=True)
class Settings:
    policy: CheckoutPolicy = field(default_factory=CheckoutPolicy)
    transaction_timeout: float = 30.0
    order_number_attempts: int = 5


def load_settings() -> Settings:
    """Build settings from ``STOREFRONT_*`` environment variables."""
    defaults = CheckoutPolicy()
    policy = CheckoutPolicy(
        free_shipping_threshold=Decimal(
            os.getenv("STOREFRONT_FREE_SHIPPING_THRESHOLD", str(defaults.free_shipping_threshold))
        ),
        flat_shipping=Decimal(os.getenv("STOREFRONT_FLAT_SHIPPING", str(defaults.flat_shipping))),
        tax_rate=Decimal(os.getenv("STOREFRONT_TAX_RATE", str(defaults.tax_rate))),
    )
    return Settings(
        policy=policy,
        transaction_timeout=float(os.getenv("STOREFRONT_TRANSACTION_TIMEOUT", "30")),
        order_number_attempts=int(os.getenv("STOREFRONT_ORDER_NUMBER_ATTEMPTS", "5")),
    )


settings = load_settings()
