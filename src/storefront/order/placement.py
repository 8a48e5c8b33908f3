"""Order placement — command and handler.

Placing an order is one unit of work: the address and cart are resolved,
every cart line is re-checked against freshly loaded stock and decremented,
the order is priced and stored, and the cart is emptied. Any failure rolls
the whole unit back, leaving stock, orders and the cart untouched.

The handler expects to run while the caller holds the stock locks of every
product in the cart (see ``OrderWorkflow.create_order``). The locked product
ids and the transaction deadline travel on the command so the handler can
refuse to commit outside of them.
"""

import json
import time
from datetime import date
from decimal import Decimal

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.addresses.management import load_owned_address
from storefront.cart.cart import Cart, ClearReason
from storefront.catalogue.product import Product
from storefront.config import settings
from storefront.domain import storefront
from storefront.errors import EmptyCart, TransactionFailure
from storefront.order.order import Order
from storefront.order.pricing import generate_order_number, price_order, to_money
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    payment_method = String(max_length=50)
    notes = Text()
    locked_product_ids = Text()  # JSON list of product ids held by the caller
    deadline = Float()  # Epoch seconds after which the transaction must not commit


def allocate_order_number(repo, attempts: int) -> str:
    """Generate an order number not yet in use, retrying on collisions."""
    for attempt in range(1, attempts + 1):
        candidate = generate_order_number(date.today())
        if repo.by_order_number(candidate) is None:
            return candidate
        logger.warning("order_number_collision", order_number=candidate, attempt=attempt)
    raise TransactionFailure({"order_number": [f"Could not allocate a unique order number in {attempts} attempts"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        load_owned_address(command.user_id, command.address_id)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(command.user_id)
        if cart is None or cart.is_empty:
            raise EmptyCart({"cart": ["Cart is empty"]})

        if command.locked_product_ids is not None:
            locked = set(json.loads(command.locked_product_ids))
            unlocked = set(cart.product_ids()) - locked
            if unlocked:
                raise TransactionFailure(
                    {"cart": ["Cart changed while checkout was in progress, please retry"]}
                )

        # Stock is decremented line by line as each line is validated
        product_repo = current_domain.repository_for(Product)
        products = product_repo.many(cart.product_ids())
        subtotal = Decimal("0")
        lines = []
        for item in cart.items:
            product = products.get(str(item.product_id))
            if product is None:
                raise ObjectNotFoundError({"product": [f"Product {item.product_id} not found"]})
            product.withdraw_stock(item.quantity)

            unit_price = to_money(product.price)
            subtotal += unit_price * item.quantity
            lines.append(
                {
                    "product_id": str(product.id),
                    "sku": product.sku,
                    "title": product.title,
                    "quantity": item.quantity,
                    "price": float(unit_price),
                    "size": item.size,
                    "color": item.color,
                }
            )

        totals = price_order(subtotal, settings.policy)

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=allocate_order_number(order_repo, settings.order_number_attempts),
            user_id=command.user_id,
            address_id=command.address_id,
            lines=lines,
            totals=totals,
            payment_method=command.payment_method,
            notes=command.notes,
        )

        if command.deadline is not None and time.time() > command.deadline:
            raise TransactionFailure({"transaction": ["Checkout exceeded its deadline and was rolled back"]})

        order_repo.add(order)
        for product in products.values():
            product_repo.add(product)

        cart.clear(reason=ClearReason.CHECKOUT)
        cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            items=len(lines),
            total=str(totals.total),
        )
        return str(order.id)
