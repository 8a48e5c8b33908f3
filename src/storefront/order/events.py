"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into an order and its stock was taken."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    address_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, price}
    subtotal = Float(required=True)
    shipping_cost = Float(required=True)
    tax = Float(required=True)
    total = Float(required=True)
    item_count = Integer(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled and its stock given back."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    cancelled_by = Identifier(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An administrator set the order status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier()


@storefront.event(part_of="Order")
class PaymentStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier()
