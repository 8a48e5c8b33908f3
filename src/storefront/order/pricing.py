"""Order pricing and order numbers.

Money is carried as ``Decimal`` rounded half-up to cents while it is being
computed, and stored on the aggregates as floats of those rounded values.
"""

import random
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from storefront.config import CheckoutPolicy

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round ``value`` to cents. Floats go through ``str`` to avoid binary noise."""
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        amount = Decimal(value if value is not None else 0)
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal


def shipping_for(subtotal, policy: CheckoutPolicy) -> Decimal:
    """Flat shipping unless the subtotal is strictly above the free-shipping threshold."""
    if to_money(subtotal) > policy.free_shipping_threshold:
        return to_money(0)
    return to_money(policy.flat_shipping)


def price_order(subtotal, policy: CheckoutPolicy) -> OrderTotals:
    subtotal = to_money(subtotal)
    shipping_cost = shipping_for(subtotal, policy)
    tax = to_money(subtotal * policy.tax_rate)
    return OrderTotals(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        tax=tax,
        total=subtotal + shipping_cost + tax,
    )


def generate_order_number(today: date | None = None, rng: random.Random | None = None) -> str:
    """``ORD-YYMMDD-NNNN`` with a random zero-padded four digit suffix."""
    today = today or date.today()
    rng = rng or random
    return f"ORD-{today:%y%m%d}-{rng.randint(0, 9999):04d}"
