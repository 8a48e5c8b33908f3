"""Read side of the cart: lines priced against the live catalogue."""

from dataclasses import dataclass, field
from decimal import Decimal

from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import OpenCart
from storefront.catalogue.product import Product
from storefront.order.pricing import to_money


@dataclass(frozen=True)
class CartLine:
    item_id: str
    product_id: str
    title: str | None
    sku: str | None
    unit_price: Decimal
    quantity: int
    size: str | None
    color: str | None
    stock: int | None

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class CartView:
    cart_id: str
    user_id: str
    lines: list[CartLine] = field(default_factory=list)

    @property
    def subtotal(self) -> Decimal:
        return to_money(sum((line.line_total for line in self.lines), Decimal("0")))

    @property
    def item_count(self) -> int:
        return len(self.lines)


def get_or_create_cart(user_id: str) -> Cart:
    repo = current_domain.repository_for(Cart)
    cart = repo.for_user(user_id)
    if cart is None:
        current_domain.process(OpenCart(user_id=user_id), asynchronous=False)
        cart = repo.for_user(user_id)
    return cart


def summarize_cart(cart: Cart) -> CartView:
    """Price every line at the product's current price.

    The subtotal is recomputed on every read and never stored on the cart.
    """
    products = current_domain.repository_for(Product).many(i.product_id for i in cart.items)
    lines = []
    for item in cart.items:
        product = products.get(str(item.product_id))
        lines.append(
            CartLine(
                item_id=str(item.id),
                product_id=str(item.product_id),
                title=product.title if product else None,
                sku=product.sku if product else None,
                unit_price=to_money(product.price if product else 0),
                quantity=item.quantity,
                size=item.size,
                color=item.color,
                stock=product.stock if product else None,
            )
        )
    return CartView(cart_id=str(cart.id), user_id=str(cart.user_id), lines=lines)


def view_cart(user_id: str) -> CartView:
    return summarize_cart(get_or_create_cart(user_id))
