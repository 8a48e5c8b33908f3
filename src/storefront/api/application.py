"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.errors import install_error_handlers
from storefront.api.routes import (
    address_router,
    admin_product_router,
    admin_router,
    cart_router,
    category_router,
    order_router,
    product_router,
)
from storefront.catalogue.stock_locks import StockLocks
from storefront.order.workflow import OrderWorkflow
from storefront.utils.logging import bind_request_context, clear_request_context


def create_app(domain, workflow: OrderWorkflow | None = None) -> FastAPI:
    """Build the API around ``domain``. The domain must already be initialized.

    Without an explicit ``workflow`` the app gets its own stock lock registry.
    """
    app = FastAPI(
        title="Storefront API",
        description="Catalogue, carts, address book and the order workflow",
    )
    app.state.workflow = workflow or OrderWorkflow(domain, locks=StockLocks())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the Protean domain context and the log context for each request."""
        bind_request_context(
            user_id=request.headers.get("x-user-id"),
            method=request.method,
            path=request.url.path,
        )
        try:
            with domain.domain_context():
                response = await call_next(request)
        finally:
            clear_request_context()
        return response

    install_error_handlers(app)

    app.include_router(cart_router)
    app.include_router(address_router)
    app.include_router(order_router)
    app.include_router(admin_router)
    app.include_router(admin_product_router)
    app.include_router(product_router)
    app.include_router(category_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": domain.name})

    return app
