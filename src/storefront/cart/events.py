"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, as a new line or on top of an existing one."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    size = String(max_length=50)
    color = String(max_length=50)


@storefront.event(part_of="Cart")
class CartItemQuantityChanged:
    """The quantity of a cart line was set."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    """All lines were removed, either by the customer or at checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)
    reason = String(required=True, max_length=50)
