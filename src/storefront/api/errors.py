"""Maps storefront failures to HTTP responses.

Every failure is rendered as
``{"error": <kind>, "message": <text>, "details": <field messages>, "retryable": <bool>}``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ProteanException, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    EmptyCart,
    Forbidden,
    InsufficientStock,
    InvalidQuantity,
    InvalidStatus,
    InvalidTransition,
    TransactionFailure,
    describe,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Ordered most specific first; the first matching class wins
ERROR_STATUS_CODES = [
    (ObjectNotFoundError, "NotFound", 404),
    (Forbidden, "Forbidden", 403),
    (InsufficientStock, "InsufficientStock", 409),
    (EmptyCart, "EmptyCart", 422),
    (InvalidQuantity, "InvalidQuantity", 422),
    (InvalidStatus, "InvalidStatus", 422),
    (InvalidTransition, "InvalidTransition", 409),
    (TransactionFailure, "TransactionFailure", 503),
    (ExpectedVersionError, "TransactionFailure", 503),
    (ValidationError, "ValidationError", 400),
]


def classify(exc: Exception) -> tuple[str, int]:
    for cls, kind, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, cls):
            return kind, status_code
    return exc.__class__.__name__, 500


def error_body(exc: Exception) -> tuple[int, dict]:
    kind, status_code = classify(exc)
    messages = getattr(exc, "messages", None)
    return status_code, {
        "error": kind,
        "message": describe(exc),
        "details": messages if isinstance(messages, dict) else {},
        "retryable": kind == "TransactionFailure",
    }


async def storefront_error_handler(request: Request, exc: ProteanException) -> JSONResponse:
    status_code, body = error_body(exc)
    if status_code >= 500:
        logger.warning("request_failed", path=request.url.path, error=body["error"], message=body["message"])
    else:
        logger.info("request_rejected", path=request.url.path, error=body["error"], status_code=status_code)
    return JSONResponse(status_code=status_code, content=body)


def install_error_handlers(app: FastAPI) -> None:
    """Register Protean's handlers, then override them with the storefront mapping."""
    register_exception_handlers(app)
    for cls, _, _ in ERROR_STATUS_CODES:
        app.add_exception_handler(cls, storefront_error_handler)
