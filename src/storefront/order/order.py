"""Order aggregate — the immutable record of a checkout.

Once placed, only ``status`` and ``payment_status`` change. Money fields and
item prices are snapshots taken at checkout and are never recomputed.

Status lifecycle:
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
    CANCELLED (from PENDING or CONFIRMED, through cancellation only)

Administrators may set any of the six statuses directly, without the
transition check that cancellation applies.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.errors import InvalidStatus, InvalidTransition
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged, PaymentStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# States from which a cancellation is allowed
_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}


def parse_status(value, kind=OrderStatus):
    """Return the ``kind`` member named by ``value`` (case-insensitive), or raise ``InvalidStatus``."""
    if isinstance(value, kind):
        return value
    try:
        return kind(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in kind)
        raise InvalidStatus({"status": [f"Invalid status '{value}'. Expected one of: {allowed}"]}) from None


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    sku = String(max_length=50)
    title = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)  # Unit price at checkout
    size = String(max_length=50)
    color = String(max_length=50)


@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(required=True, min_value=0.0)
    tax = Float(required=True, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(max_length=50)
    notes = Text()
    cancelled_by = Identifier()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, user_id, address_id, lines, totals, payment_method=None, notes=None):
        """Create an order from priced lines.

        ``lines`` are dicts with product_id, sku, title, quantity, price, size
        and color. ``totals`` is an ``OrderTotals``.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            address_id=address_id,
            items=[OrderItem(**line) for line in lines],
            subtotal=float(totals.subtotal),
            shipping_cost=float(totals.shipping_cost),
            tax=float(totals.tax),
            total=float(totals.total),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payment_method,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                address_id=str(address_id),
                items=json.dumps(
                    [
                        {"product_id": str(line["product_id"]), "quantity": line["quantity"], "price": line["price"]}
                        for line in lines
                    ]
                ),
                subtotal=order.subtotal,
                shipping_cost=order.shipping_cost,
                tax=order.tax,
                total=order.total,
                item_count=len(lines),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def owned_by(self, user_id):
        return str(self.user_id) == str(user_id)

    @property
    def is_cancellable(self):
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    def quantities_by_product(self):
        """Total ordered quantity per product id."""
        quantities = {}
        for item in self.items:
            key = str(item.product_id)
            quantities[key] = quantities.get(key, 0) + item.quantity
        return quantities

    # -------------------------------------------------------------------
    # Status changes
    # -------------------------------------------------------------------
    def cancel(self, cancelled_by):
        current = OrderStatus(self.status)
        if current not in _CANCELLABLE_STATES:
            raise InvalidTransition(
                {
                    "status": [
                        f"Cannot cancel order in {current.value} state. "
                        f"Cancellation is only allowed from: "
                        f"{', '.join(sorted(s.value for s in _CANCELLABLE_STATES))}"
                    ]
                }
            )

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                cancelled_by=str(cancelled_by),
                cancelled_at=now,
            )
        )

    def set_status(self, new_status, changed_by=None):
        """Administrative override: any known status, no transition check."""
        target = parse_status(new_status, OrderStatus)
        previous = self.status
        self.status = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_by=changed_by,
            )
        )

    def set_payment_status(self, new_status, changed_by=None):
        target = parse_status(new_status, PaymentStatus)
        previous = self.payment_status
        self.payment_status = target.value
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                changed_by=changed_by,
            )
        )
