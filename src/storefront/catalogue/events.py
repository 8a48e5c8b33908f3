"""Domain events for the Product and Category aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A new product was listed in the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    sku: String(required=True)
    title: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    category_id: Identifier()
    added_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    """The list price of a product changed. Existing orders keep their snapshot."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_price: Float(required=True)
    new_price: Float(required=True)


@storefront.event(part_of="Product")
class StockLevelChanged:
    """Stock moved because of checkout, cancellation or an admin edit."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    reason: String(required=True, max_length=50)


@storefront.event(part_of="Category")
class CategoryAdded:
    """A category was created."""

    __version__ = 1

    category_id: Identifier(required=True)
    name: String(required=True)
    slug: String(required=True)
