"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the Protean commands.
Money leaves the API as a string with exactly two decimals.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.order.pricing import to_money


def money(value) -> str:
    return str(to_money(value))


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CreateProductRequest(BaseModel):
    sku: str
    title: str
    description: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    category_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "sku": "TSHIRT-BLK-M",
                    "title": "Black T-Shirt",
                    "price": 19.99,
                    "stock": 25,
                }
            ]
        }
    }


class UpdateProductRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    price: float | None = Field(ge=0, default=None)
    stock: int | None = Field(ge=0, default=None)
    is_active: bool | None = None
    category_id: str | None = None


class ProductResponse(BaseModel):
    id: str
    sku: str
    title: str
    description: str | None = None
    price: str
    stock: int
    is_active: bool
    category_id: str | None = None

    @classmethod
    def from_product(cls, product):
        return cls(
            id=str(product.id),
            sku=product.sku,
            title=product.title,
            description=product.description,
            price=money(product.price),
            stock=product.stock,
            is_active=product.is_active,
            category_id=str(product.category_id) if product.category_id else None,
        )


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int


class CreateCategoryRequest(BaseModel):
    name: str
    slug: str | None = None
    description: str | None = None


class UpdateCategoryRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    is_active: bool | None = None


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    is_active: bool

    @classmethod
    def from_category(cls, category):
        return cls(
            id=str(category.id),
            name=category.name,
            slug=category.slug,
            description=category.description,
            is_active=category.is_active,
        )


class CategoryDetailResponse(CategoryResponse):
    products: list[ProductResponse]

    @classmethod
    def from_category_with_products(cls, category, products):
        return cls(
            **CategoryResponse.from_category(category).model_dump(),
            products=[ProductResponse.from_product(p) for p in products],
        )


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1
    size: str | None = None
    color: str | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    title: str | None = None
    sku: str | None = None
    unit_price: str
    quantity: int
    size: str | None = None
    color: str | None = None
    line_total: str


class CartResponse(BaseModel):
    id: str
    user_id: str
    items: list[CartItemResponse]
    subtotal: str
    item_count: int

    @classmethod
    def from_view(cls, view):
        return cls(
            id=view.cart_id,
            user_id=view.user_id,
            items=[
                CartItemResponse(
                    id=line.item_id,
                    product_id=line.product_id,
                    title=line.title,
                    sku=line.sku,
                    unit_price=money(line.unit_price),
                    quantity=line.quantity,
                    size=line.size,
                    color=line.color,
                    line_total=money(line.line_total),
                )
                for line in view.lines
            ],
            subtotal=money(view.subtotal),
            item_count=view.item_count,
        )


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------
class AddressRequest(BaseModel):
    name: str
    phone: str | None = None
    street: str
    city: str
    state: str | None = None
    zip_code: str
    country: str | None = None
    is_default: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "phone": "555-0100",
                    "street": "1 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "zip_code": "62701",
                    "country": "USA",
                    "is_default": True,
                }
            ]
        }
    }


class UpdateAddressRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    is_default: bool | None = None


class AddressResponse(BaseModel):
    id: str
    name: str
    phone: str | None = None
    street: str
    city: str
    state: str | None = None
    zip_code: str
    country: str
    is_default: bool

    @classmethod
    def from_address(cls, address):
        return cls(
            id=str(address.id),
            name=address.name,
            phone=address.phone,
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
            is_default=address.is_default,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    address_id: str
    payment_method: str | None = None
    notes: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    sku: str | None = None
    title: str | None = None
    quantity: int
    price: str
    size: str | None = None
    color: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str
    status: str
    payment_status: str
    payment_method: str | None = None
    notes: str | None = None
    subtotal: str
    shipping_cost: str
    tax: str
    total: str
    items: list[OrderItemResponse]
    address: AddressResponse | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order, address=None):
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            user_id=str(order.user_id),
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            notes=order.notes,
            subtotal=money(order.subtotal),
            shipping_cost=money(order.shipping_cost),
            tax=money(order.tax),
            total=money(order.total),
            items=[
                OrderItemResponse(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    sku=item.sku,
                    title=item.title,
                    quantity=item.quantity,
                    price=money(item.price),
                    size=item.size,
                    color=item.color,
                )
                for item in order.items
            ],
            address=AddressResponse.from_address(address) if address is not None else None,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class AdminProductPageResponse(BaseModel):
    products: list[ProductResponse]
    pagination: Pagination


class OrderPageResponse(BaseModel):
    orders: list[OrderResponse]
    pagination: Pagination

    @classmethod
    def from_page(cls, page, addresses=None):
        """``addresses`` maps address id to address; orders whose address is gone render without one."""
        addresses = addresses or {}
        return cls(
            orders=[OrderResponse.from_order(order, addresses.get(str(order.address_id))) for order in page.items],
            pagination=Pagination(
                page=page.page,
                limit=page.limit,
                total=page.total,
                total_pages=page.total_pages,
            ),
        )


class OrderStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    processing: int
    shipped: int
    delivered: int
    cancelled: int


class StatusResponse(BaseModel):
    status: str = "ok"
