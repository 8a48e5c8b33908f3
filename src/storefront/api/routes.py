"""FastAPI endpoints for the Storefront.

Cart, address book and catalogue endpoints dispatch commands straight to the
domain. Order endpoints and product edits go through ``OrderWorkflow``, which
coordinates the stock locks.
"""

import math

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.access import Requester
from storefront.addresses.address import Address
from storefront.addresses.management import (
    AddAddress,
    RemoveAddress,
    SetDefaultAddress,
    UpdateAddress,
    load_owned_address,
)
from storefront.api.dependencies import current_requester, get_workflow, require_admin
from storefront.api.schemas import (
    AddressRequest,
    AddressResponse,
    AddToCartRequest,
    AdminProductPageResponse,
    CartResponse,
    CategoryDetailResponse,
    CategoryResponse,
    CreateCategoryRequest,
    CreateOrderRequest,
    CreateProductRequest,
    OrderPageResponse,
    OrderResponse,
    OrderStatsResponse,
    Pagination,
    ProductListResponse,
    ProductResponse,
    StatusResponse,
    UpdateAddressRequest,
    UpdateCartItemRequest,
    UpdateCategoryRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdateProductRequest,
)
from storefront.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from storefront.cart.view import view_cart
from storefront.catalogue.category import Category
from storefront.catalogue.management import AddCategory, AddProduct, RemoveCategory, UpdateCategory
from storefront.catalogue.product import Product
from storefront.order.workflow import OrderWorkflow

cart_router = APIRouter(prefix="/cart", tags=["cart"])
address_router = APIRouter(prefix="/addresses", tags=["addresses"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])
product_router = APIRouter(prefix="/products", tags=["products"])
admin_product_router = APIRouter(prefix="/admin/products", tags=["admin"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


# --- Cart endpoints ---


@cart_router.get("", response_model=CartResponse)
async def get_cart(requester: Requester = Depends(current_requester)) -> CartResponse:
    return CartResponse.from_view(view_cart(requester.id))


@cart_router.post("/items", status_code=201, response_model=CartResponse)
async def add_to_cart(body: AddToCartRequest, requester: Requester = Depends(current_requester)) -> CartResponse:
    command = AddToCart(
        user_id=requester.id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
        color=body.color,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_view(view_cart(requester.id))


@cart_router.put("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, requester: Requester = Depends(current_requester)
) -> CartResponse:
    command = UpdateCartItem(user_id=requester.id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return CartResponse.from_view(view_cart(requester.id))


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(item_id: str, requester: Requester = Depends(current_requester)) -> CartResponse:
    current_domain.process(RemoveCartItem(user_id=requester.id, item_id=item_id), asynchronous=False)
    return CartResponse.from_view(view_cart(requester.id))


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(requester: Requester = Depends(current_requester)) -> CartResponse:
    current_domain.process(ClearCart(user_id=requester.id), asynchronous=False)
    return CartResponse.from_view(view_cart(requester.id))


# --- Address endpoints ---


@address_router.get("", response_model=list[AddressResponse])
async def list_addresses(requester: Requester = Depends(current_requester)) -> list[AddressResponse]:
    addresses = current_domain.repository_for(Address).for_user(requester.id)
    return [AddressResponse.from_address(a) for a in addresses]


@address_router.post("", status_code=201, response_model=AddressResponse)
async def add_address(body: AddressRequest, requester: Requester = Depends(current_requester)) -> AddressResponse:
    command = AddAddress(user_id=requester.id, **body.model_dump())
    address_id = current_domain.process(command, asynchronous=False)
    return AddressResponse.from_address(current_domain.repository_for(Address).get(address_id))


@address_router.put("/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: str, body: UpdateAddressRequest, requester: Requester = Depends(current_requester)
) -> AddressResponse:
    command = UpdateAddress(user_id=requester.id, address_id=address_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return AddressResponse.from_address(load_owned_address(requester.id, address_id))


@address_router.delete("/{address_id}", response_model=StatusResponse)
async def remove_address(address_id: str, requester: Requester = Depends(current_requester)) -> StatusResponse:
    current_domain.process(RemoveAddress(user_id=requester.id, address_id=address_id), asynchronous=False)
    return StatusResponse()


@address_router.put("/{address_id}/default", response_model=AddressResponse)
async def set_default_address(address_id: str, requester: Requester = Depends(current_requester)) -> AddressResponse:
    current_domain.process(SetDefaultAddress(user_id=requester.id, address_id=address_id), asynchronous=False)
    return AddressResponse.from_address(load_owned_address(requester.id, address_id))


# --- Order endpoints ---


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(
    body: CreateOrderRequest,
    requester: Requester = Depends(current_requester),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderResponse:
    order = workflow.create_order(
        user_id=requester.id,
        address_id=body.address_id,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    return OrderResponse.from_order(order, workflow.shipping_address(order))


@order_router.get("", response_model=OrderPageResponse)
async def list_orders(
    page: int = 1,
    limit: int = 10,
    requester: Requester = Depends(current_requester),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderPageResponse:
    result = workflow.list_orders_for_user(requester.id, page=page, limit=limit)
    return OrderPageResponse.from_page(result, workflow.shipping_addresses(result.items))


@order_router.get("/by-number/{order_number}", response_model=OrderResponse)
async def get_order_by_number(
    order_number: str,
    requester: Requester = Depends(current_requester),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderResponse:
    order = workflow.find_by_order_number(requester, order_number)
    return OrderResponse.from_order(order, workflow.shipping_address(order))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    requester: Requester = Depends(current_requester),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderResponse:
    order = workflow.get_order(requester, order_id)
    return OrderResponse.from_order(order, workflow.shipping_address(order))


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    requester: Requester = Depends(current_requester),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderResponse:
    order = workflow.cancel_order(requester, order_id)
    return OrderResponse.from_order(order, workflow.shipping_address(order))


# --- Admin endpoints ---


@admin_router.get("", response_model=OrderPageResponse)
async def list_all_orders(
    status: str | None = None,
    payment_status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
    admin: Requester = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderPageResponse:
    result = workflow.list_all_orders(
        status=status,
        payment_status=payment_status,
        search=search,
        page=page,
        limit=limit,
    )
    return OrderPageResponse.from_page(result, workflow.shipping_addresses(result.items))


@admin_router.get("/stats", response_model=OrderStatsResponse)
async def get_order_stats(
    admin: Requester = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderStatsResponse:
    return OrderStatsResponse(**workflow.get_order_stats())


@admin_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    admin: Requester = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderResponse:
    order = workflow.update_order_status(admin, order_id, body.status)
    return OrderResponse.from_order(order, workflow.shipping_address(order))


@admin_router.put("/{order_id}/payment-status", response_model=OrderResponse)
async def update_payment_status(
    order_id: str,
    body: UpdatePaymentStatusRequest,
    admin: Requester = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> OrderResponse:
    order = workflow.update_payment_status(admin, order_id, body.payment_status)
    return OrderResponse.from_order(order, workflow.shipping_address(order))


# --- Product endpoints ---


def _paging(page, limit):
    page = max(page, 1)
    limit = min(max(limit, 1), 100)
    return page, limit, (page - 1) * limit


@product_router.get("", response_model=ProductListResponse)
async def list_products(
    category_id: str | None = None,
    search: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    page: int = 1,
    limit: int = 20,
) -> ProductListResponse:
    page, limit, offset = _paging(page, limit)
    results = current_domain.repository_for(Product).active(
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        offset=offset,
        limit=limit,
    )
    return ProductListResponse(
        products=[ProductResponse.from_product(p) for p in results.items],
        total=results.total,
    )


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return ProductResponse.from_product(current_domain.repository_for(Product).get(product_id))


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(body: CreateProductRequest, admin: Requester = Depends(require_admin)) -> ProductResponse:
    product_id = current_domain.process(AddProduct(**body.model_dump()), asynchronous=False)
    return ProductResponse.from_product(current_domain.repository_for(Product).get(product_id))


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    admin: Requester = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> ProductResponse:
    workflow.update_product(product_id, **body.model_dump(exclude_none=True))
    with workflow.domain.domain_context():
        return ProductResponse.from_product(workflow.domain.repository_for(Product).get(product_id))


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(
    product_id: str,
    admin: Requester = Depends(require_admin),
    workflow: OrderWorkflow = Depends(get_workflow),
) -> StatusResponse:
    workflow.remove_product(product_id)
    return StatusResponse()


@admin_product_router.get("", response_model=AdminProductPageResponse)
async def list_all_products(
    category_id: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
    admin: Requester = Depends(require_admin),
) -> AdminProductPageResponse:
    page, limit, offset = _paging(page, limit)
    results = current_domain.repository_for(Product).for_admin(
        category_id=category_id, search=search, offset=offset, limit=limit
    )
    return AdminProductPageResponse(
        products=[ProductResponse.from_product(p) for p in results.items],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=results.total,
            total_pages=math.ceil(results.total / limit),
        ),
    )


# --- Category endpoints ---


@category_router.get("", response_model=list[CategoryResponse])
async def list_categories() -> list[CategoryResponse]:
    return [CategoryResponse.from_category(c) for c in current_domain.repository_for(Category).listed()]


@category_router.get("/{category_id}", response_model=CategoryDetailResponse)
async def get_category(category_id: str) -> CategoryDetailResponse:
    category = current_domain.repository_for(Category).get(category_id)
    products = current_domain.repository_for(Product).active(category_id=category_id, limit=100).items
    return CategoryDetailResponse.from_category_with_products(category, products)


@category_router.post("", status_code=201, response_model=CategoryResponse)
async def create_category(body: CreateCategoryRequest, admin: Requester = Depends(require_admin)) -> CategoryResponse:
    category_id = current_domain.process(AddCategory(**body.model_dump()), asynchronous=False)
    return CategoryResponse.from_category(current_domain.repository_for(Category).get(category_id))


@category_router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, admin: Requester = Depends(require_admin)
) -> CategoryResponse:
    command = UpdateCategory(category_id=category_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return CategoryResponse.from_category(current_domain.repository_for(Category).get(category_id))


@category_router.delete("/{category_id}", response_model=StatusResponse)
async def remove_category(category_id: str, admin: Requester = Depends(require_admin)) -> StatusResponse:
    current_domain.process(RemoveCategory(category_id=category_id), asynchronous=False)
    return StatusResponse()
