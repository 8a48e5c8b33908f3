"""Cart item management — commands and handler.

Carts are keyed by the owning user, so every command carries ``user_id``
rather than a cart id. A cart is opened on first use.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, ClearReason
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import InvalidQuantity


@storefront.command(part_of="Cart")
class OpenCart:
    user_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    size = String(max_length=50)
    color = String(max_length=50)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    user_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        cart = current_domain.repository_for(Cart).get_or_open(command.user_id)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        if command.quantity is None or command.quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1"]})
        product.ensure_available(command.quantity)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_open(command.user_id)
        item_id = cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            size=command.size,
            color=command.color,
        )
        repo.add(cart)
        return item_id

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        if command.quantity is None or command.quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1"]})

        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            raise ObjectNotFoundError({"item_id": [f"Cart item {command.item_id} not found in cart"]})
        item = cart.item(command.item_id)

        # Stock is only checked against products still in the catalogue
        product = current_domain.repository_for(Product).many([item.product_id]).get(str(item.product_id))
        if product is not None:
            product.ensure_available(command.quantity)

        cart.update_item_quantity(item_id=command.item_id, quantity=command.quantity)
        repo.add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return
        cart.remove_item(command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_user(command.user_id)
        if cart is None:
            return
        cart.clear(reason=ClearReason.CUSTOMER)
        repo.add(cart)
