"""Cart aggregate — one mutable cart per user, emptied at checkout.

A line is identified by (product, size, color). Adding a combination that is
already in the cart tops up that line instead of creating a second one.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityChanged, CartItemRemoved
from storefront.domain import storefront
from storefront.errors import InvalidQuantity


class ClearReason:
    CUSTOMER = "customer"
    CHECKOUT = "checkout"


def _variant(value):
    # Blank size/color means "no variant"
    return value or None


def _check_quantity(quantity):
    if quantity is None or quantity < 1:
        raise InvalidQuantity({"quantity": ["Quantity must be at least 1"]})


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    color = String(max_length=50)
    added_at = DateTime()

    def matches(self, product_id, size=None, color=None):
        return (
            str(self.product_id) == str(product_id)
            and _variant(self.size) == _variant(size)
            and _variant(self.color) == _variant(color)
        )


@storefront.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def is_empty(self):
        return not self.items

    def product_ids(self):
        return sorted({str(i.product_id) for i in self.items})

    def item(self, item_id):
        """Return the line with ``item_id``, or raise ``ObjectNotFoundError``."""
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError({"item_id": [f"Cart item {item_id} not found in cart"]})
        return item

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, size=None, color=None):
        """Add ``quantity`` of a product variant and return the line id."""
        _check_quantity(quantity)
        size, color = _variant(size), _variant(color)
        now = datetime.now(UTC)

        existing = next((i for i in self.items if i.matches(product_id, size, color)), None)
        if existing:
            existing.quantity += quantity
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                size=size,
                color=color,
                added_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                quantity=quantity,
                size=size,
                color=color,
            )
        )
        return item_id

    def update_item_quantity(self, item_id, quantity):
        _check_quantity(quantity)
        item = self.item(item_id)

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, item_id):
        """Remove a line. Removing a line that is not there is a no-op."""
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self, reason=ClearReason.CUSTOMER):
        if not self.items:
            return

        self.remove_items(list(self.items))
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), reason=reason))
