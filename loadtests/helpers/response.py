"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Handles these response shapes:

- Pydantic validation (422): {"detail": [{"loc": [...], "msg": "...", "type": "..."}]}
- Storefront errors: {"error": "<kind>", "message": "...", "details": {...}, "retryable": bool}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def error_kind(response: Response) -> str | None:
    """The storefront error kind of a failed response, if it carries one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    # Pydantic validation errors: {"detail": [{"loc": [...], "msg": "..."}]}
    if "detail" in body and isinstance(body["detail"], list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []))
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    if "error" in body:
        message = body.get("message") or ""
        suffix = " (retryable)" if body.get("retryable") else ""
        return f"{body['error']}: {message}{suffix}" if message else f"{body['error']}{suffix}"

    if "detail" in body:
        return str(body["detail"])

    # Unknown shape: stringify and truncate
    return str(body)[:300]
