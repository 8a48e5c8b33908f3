"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_user(self, user_id: str) -> Cart | None:
        return self._dao.query.filter(user_id=str(user_id)).all().first

    def get_or_open(self, user_id: str) -> Cart:
        """Return the user's cart, opening (and persisting) one if needed."""
        cart = self.for_user(user_id)
        if cart is None:
            cart = Cart.create(user_id=str(user_id))
            self.add(cart)
        return cart
