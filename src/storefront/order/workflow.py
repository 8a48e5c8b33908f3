"""Order workflow service, the entry point for everything that touches orders.

``OrderWorkflow`` is built with the domain it operates on and the stock lock
registry it coordinates through. Checkout and cancellation hold the locks of
every product they touch for the whole unit of work, commit included, so two
checkouts racing for the last unit are serialized and the second one sees the
committed stock.
"""

import json
import math
import time
from dataclasses import dataclass, field

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ProteanException

from storefront.access import Requester
from storefront.addresses.address import Address
from storefront.cart.cart import Cart
from storefront.catalogue.management import RemoveProduct, UpdateProduct
from storefront.catalogue.stock_locks import StockLocks
from storefront.config import settings
from storefront.errors import Forbidden, TransactionFailure
from storefront.order.administration import UpdateOrderStatus, UpdatePaymentStatus
from storefront.order.cancellation import CancelOrder, load_visible_order
from storefront.order.order import Order, OrderStatus, PaymentStatus, parse_status
from storefront.order.placement import PlaceOrder
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class Page:
    items: list = field(default_factory=list)
    page: int = 1
    limit: int = 10
    total: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _paging(page, limit):
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or 1), 1), MAX_PAGE_SIZE)
    return page, limit, (page - 1) * limit


class OrderWorkflow:
    def __init__(self, domain, locks: StockLocks | None = None, timeout: float | None = None):
        self.domain = domain
        self.locks = locks if locks is not None else StockLocks()
        self.timeout = settings.transaction_timeout if timeout is None else timeout

    # -------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------
    def _run_locked(self, operation, product_ids, build_command):
        """Dispatch a command while holding the stock locks of ``product_ids``.

        ``build_command`` receives the transaction deadline (epoch seconds)
        and returns the command to process.
        """
        deadline = time.time() + self.timeout
        try:
            with self.locks.hold(product_ids, self.timeout):
                return self.domain.process(build_command(deadline), asynchronous=False)
        except ExpectedVersionError as exc:
            logger.warning("transaction_conflict", operation=operation, error=str(exc))
            raise TransactionFailure({"transaction": ["Concurrent update detected, please retry"]}) from exc
        except ProteanException as exc:
            logger.info("transaction_rolled_back", operation=operation, error=exc.__class__.__name__)
            raise

    def create_order(self, user_id, address_id, payment_method=None, notes=None) -> Order:
        """Convert the user's cart into an order, taking stock atomically."""
        with self.domain.domain_context():
            cart = self.domain.repository_for(Cart).for_user(user_id)
            product_ids = cart.product_ids() if cart is not None else []

            order_id = self._run_locked(
                "create_order",
                product_ids,
                lambda deadline: PlaceOrder(
                    user_id=str(user_id),
                    address_id=str(address_id),
                    payment_method=payment_method,
                    notes=notes,
                    locked_product_ids=json.dumps(product_ids),
                    deadline=deadline,
                ),
            )
            return self.domain.repository_for(Order).get(order_id)

    def cancel_order(self, requester: Requester, order_id) -> Order:
        """Cancel an order and give its stock back, as one unit of work."""
        with self.domain.domain_context():
            order = load_visible_order(order_id, requester)

            self._run_locked(
                "cancel_order",
                list(order.quantities_by_product()),
                lambda deadline: CancelOrder(
                    order_id=str(order_id),
                    requester_id=requester.id,
                    requester_role=requester.role,
                    deadline=deadline,
                ),
            )
            return self.domain.repository_for(Order).get(order_id)

    def update_product(self, product_id, **changes):
        """Admin product edit. Holds the product's stock lock while it commits."""
        with self.domain.domain_context():
            self._run_locked(
                "update_product",
                [str(product_id)],
                lambda deadline: UpdateProduct(product_id=str(product_id), **changes),
            )

    def remove_product(self, product_id):
        """Admin product removal. Waits for in-flight checkouts of the product to finish."""
        with self.domain.domain_context():
            self._run_locked(
                "remove_product",
                [str(product_id)],
                lambda deadline: RemoveProduct(product_id=str(product_id)),
            )

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def update_order_status(self, admin: Requester, order_id, new_status) -> Order:
        self._require_admin(admin)
        with self.domain.domain_context():
            self.domain.process(
                UpdateOrderStatus(order_id=str(order_id), status=str(new_status), changed_by=admin.id),
                asynchronous=False,
            )
            return self.domain.repository_for(Order).get(order_id)

    def update_payment_status(self, admin: Requester, order_id, new_status) -> Order:
        self._require_admin(admin)
        with self.domain.domain_context():
            self.domain.process(
                UpdatePaymentStatus(order_id=str(order_id), payment_status=str(new_status), changed_by=admin.id),
                asynchronous=False,
            )
            return self.domain.repository_for(Order).get(order_id)

    def get_order_stats(self) -> dict[str, int]:
        """Order counts overall and per status. Each count is its own query."""
        with self.domain.domain_context():
            repo = self.domain.repository_for(Order)
            stats = {"total": repo.count_by_status()}
            for status in OrderStatus:
                stats[status.value.lower()] = repo.count_by_status(status)
            return stats

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def get_order(self, requester: Requester, order_id) -> Order:
        with self.domain.domain_context():
            return load_visible_order(order_id, requester)

    def find_by_order_number(self, requester: Requester, order_number: str) -> Order:
        with self.domain.domain_context():
            order = self.domain.repository_for(Order).by_order_number(order_number)
            if order is None:
                raise ObjectNotFoundError({"order_number": [f"Order {order_number} not found"]})
            if not (requester.is_admin or order.owned_by(requester.id)):
                raise Forbidden({"order": [f"Order {order_number} does not belong to the requester"]})
            return order

    def list_orders_for_user(self, user_id, page=1, limit=10) -> Page:
        page, limit, offset = _paging(page, limit)
        with self.domain.domain_context():
            results = self.domain.repository_for(Order).for_user(user_id, offset=offset, limit=limit)
            return Page(items=list(results.items), page=page, limit=limit, total=results.total)

    def list_all_orders(self, status=None, payment_status=None, search=None, page=1, limit=20) -> Page:
        page, limit, offset = _paging(page, limit)
        status = parse_status(status, OrderStatus).value if status else None
        payment_status = parse_status(payment_status, PaymentStatus).value if payment_status else None
        with self.domain.domain_context():
            results = self.domain.repository_for(Order).search(
                status=status,
                payment_status=payment_status,
                search=search,
                offset=offset,
                limit=limit,
            )
            return Page(items=list(results.items), page=page, limit=limit, total=results.total)

    def shipping_address(self, order: Order) -> Address | None:
        """The address the order points at, as it reads today."""
        with self.domain.domain_context():
            try:
                return self.domain.repository_for(Address).get(order.address_id)
            except ObjectNotFoundError:
                logger.warning("order_address_missing", order_id=str(order.id), address_id=str(order.address_id))
                return None

    def shipping_addresses(self, orders) -> dict[str, Address]:
        """Addresses of several orders in one query, keyed by address id."""
        with self.domain.domain_context():
            return self.domain.repository_for(Address).many(order.address_id for order in orders)

    @staticmethod
    def _require_admin(requester: Requester):
        if not requester.is_admin:
            raise Forbidden({"role": ["Administrator role required"]})
