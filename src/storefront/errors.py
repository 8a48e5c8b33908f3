"""Failure kinds raised by the storefront.

Business-rule failures are ``ValidationError`` subclasses so they carry the
same ``{field: [messages]}`` payload as any other Protean validation failure
and roll back the unit of work they are raised in. A missing entity is
Protean's own ``ObjectNotFoundError``.

``TransactionFailure`` is the only retryable kind: the transaction could not
complete (lock wait, deadline, write conflict) but the request itself was
valid.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError

NotFound = ObjectNotFoundError


class Forbidden(ProteanException):
    """The requester neither owns the resource nor holds the admin role."""


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the stock available at validation time."""


class EmptyCart(ValidationError):
    """Checkout attempted with no cart lines."""


class InvalidQuantity(ValidationError):
    """Quantity below one."""


class InvalidStatus(ValidationError):
    """Status value outside the recognised set."""


class InvalidTransition(ValidationError):
    """Status change not permitted from the current status."""


class TransactionFailure(ProteanException):
    """The atomic operation did not complete; retrying may succeed."""


def describe(exc: Exception) -> str:
    """Flatten an exception's field messages into one line."""
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        parts = []
        for key, value in messages.items():
            text = ", ".join(str(v) for v in value) if isinstance(value, list | tuple) else str(value)
            parts.append(f"{key}: {text}")
        return "; ".join(parts)
    if messages:
        return str(messages)
    return str(exc) or exc.__class__.__name__
