"""Product aggregate — price and stock as seen by carts and checkout.

Stock only moves through ``withdraw_stock`` (checkout), ``restore_stock``
(cancellation) and admin edits. It never drops below zero.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.catalogue.events import ProductAdded, ProductPriceChanged, StockLevelChanged
from storefront.domain import storefront
from storefront.errors import InsufficientStock, InvalidQuantity

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class StockMovement:
    CHECKOUT = "checkout"
    CANCELLATION = "cancellation"
    ADJUSTMENT = "admin_adjustment"


@storefront.aggregate
class Product:
    """A sellable catalogue item with a single list price and stock count."""

    sku: String(required=True, max_length=50, unique=True)
    title: String(required=True, max_length=255)
    description: Text()
    price: Float(required=True, min_value=0.0)
    stock: Integer(default=0, min_value=0)
    is_active: Boolean(default=True)
    category_id: Identifier()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

    @classmethod
    def create(cls, sku, title, price, stock=0, description=None, category_id=None, is_active=True):
        now = datetime.now(UTC)
        product = cls(
            sku=sku,
            title=title,
            price=price,
            stock=stock,
            description=description,
            category_id=category_id,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                sku=sku,
                title=title,
                price=price,
                stock=stock,
                category_id=category_id,
                added_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def ensure_available(self, quantity):
        """Fail unless ``quantity`` units are on hand right now."""
        if quantity is None or quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1"]})
        if self.stock < quantity:
            raise InsufficientStock(
                {"stock": [f"Insufficient stock for {self.sku}: {self.stock} available, {quantity} requested"]}
            )

    def withdraw_stock(self, quantity):
        """Take ``quantity`` units out of stock for an order."""
        self.ensure_available(quantity)
        self._move_stock(self.stock - quantity, StockMovement.CHECKOUT)

    def restore_stock(self, quantity):
        """Put ``quantity`` units back, e.g. when an order is cancelled."""
        if quantity is None or quantity < 1:
            raise InvalidQuantity({"quantity": ["Quantity must be at least 1"]})
        self._move_stock(self.stock + quantity, StockMovement.CANCELLATION)

    def _move_stock(self, new_stock, reason):
        previous = self.stock
        self.stock = new_stock
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockLevelChanged(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def update_details(
        self,
        title=_UNSET,
        description=_UNSET,
        price=_UNSET,
        stock=_UNSET,
        is_active=_UNSET,
        category_id=_UNSET,
    ):
        if title is not _UNSET:
            self.title = title
        if description is not _UNSET:
            self.description = description
        if category_id is not _UNSET:
            self.category_id = category_id
        if is_active is not _UNSET:
            self.is_active = is_active

        if price is not _UNSET and price != self.price:
            if price < 0:
                raise ValidationError({"price": ["Price cannot be negative"]})
            previous_price = self.price
            self.price = price
            self.raise_(
                ProductPriceChanged(
                    product_id=str(self.id),
                    previous_price=previous_price,
                    new_price=price,
                )
            )

        if stock is not _UNSET and stock != self.stock:
            if stock < 0:
                raise ValidationError({"stock": ["Stock cannot be negative"]})
            self._move_stock(stock, StockMovement.ADJUSTMENT)

        self.updated_at = datetime.now(UTC)
