"""Administrative order updates — commands and handler.

Admins may set any known order or payment status. No transition rules apply
here and stock is not touched; use cancellation to give stock back.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True)
    changed_by = Identifier()


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True)
    changed_by = Identifier()


@storefront.command_handler(part_of=Order)
class AdministerOrderHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status
        order.set_status(command.status, changed_by=command.changed_by)
        repo.add(order)
        logger.info(
            "order_status_overridden",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            changed_by=command.changed_by,
        )

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_payment_status(command.payment_status, changed_by=command.changed_by)
        repo.add(order)
