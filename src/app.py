"""Storefront FastAPI application.

Web server that processes commands synchronously via HTTP. Every request is
wrapped in the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the domain.toml overlay.
from storefront.api.application import create_app
from storefront.domain import storefront

storefront.init()

app = create_app(storefront)
