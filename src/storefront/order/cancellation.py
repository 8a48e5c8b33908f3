"""Order cancellation — command and handler.

The status change and the stock restoration happen in the same unit of work:
either the order is CANCELLED and every item's quantity is back on its
product, or nothing changed.
"""

import time

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.access import Requester
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import Forbidden, TransactionFailure
from storefront.order.order import Order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    requester_role = String(max_length=20, default="CUSTOMER")
    deadline = Float()


def load_visible_order(order_id, requester: Requester) -> Order:
    """Load an order the requester may see: their own, or any order for an admin."""
    order = current_domain.repository_for(Order).get(order_id)
    if not (requester.is_admin or order.owned_by(requester.id)):
        raise Forbidden({"order": [f"Order {order_id} does not belong to the requester"]})
    return order


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        requester = Requester(id=str(command.requester_id), role=command.requester_role)
        order = load_visible_order(command.order_id, requester)
        order.cancel(cancelled_by=requester.id)

        product_repo = current_domain.repository_for(Product)
        quantities = order.quantities_by_product()
        products = product_repo.many(quantities)
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                logger.warning(
                    "restock_skipped_missing_product",
                    order_id=str(order.id),
                    product_id=product_id,
                    quantity=quantity,
                )
                continue
            product.restore_stock(quantity)
            product_repo.add(product)

        if command.deadline is not None and time.time() > command.deadline:
            raise TransactionFailure({"transaction": ["Cancellation exceeded its deadline and was rolled back"]})

        current_domain.repository_for(Order).add(order)
        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            cancelled_by=requester.id,
            restocked=len(products),
        )
        return str(order.id)
