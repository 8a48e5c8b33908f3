"""Storefront API package."""

from storefront.api.routes import (
    address_router,
    admin_product_router,
    admin_router,
    cart_router,
    category_router,
    order_router,
    product_router,
)

__all__ = [
    "address_router",
    "admin_product_router",
    "admin_router",
    "cart_router",
    "category_router",
    "order_router",
    "product_router",
]
