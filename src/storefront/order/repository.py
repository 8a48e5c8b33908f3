"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus


@storefront.repository(part_of=Order)
class OrderRepository:
    def by_order_number(self, order_number: str) -> Order | None:
        return self._dao.query.filter(order_number=order_number).all().first

    def for_user(self, user_id: str, offset: int = 0, limit: int = 10):
        """A page of the user's orders, newest first. Returns a Protean ``ResultSet``."""
        return (
            self._dao.query.filter(user_id=str(user_id))
            .order_by("-created_at")
            .offset(offset)
            .limit(limit)
            .all()
        )

    def search(
        self,
        status: str | None = None,
        payment_status: str | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int = 20,
    ):
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if payment_status:
            query = query.filter(payment_status=payment_status)
        if search:
            query = query.filter(order_number__icontains=search)
        return query.order_by("-created_at").offset(offset).limit(limit).all()

    def count_by_status(self, status: OrderStatus | None = None) -> int:
        query = self._dao.query
        if status is not None:
            query = query.filter(status=status.value)
        return query.all().total
