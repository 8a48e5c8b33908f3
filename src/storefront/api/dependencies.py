"""Request-scoped dependencies: the caller's identity and the order workflow."""

from fastapi import Depends, Header, HTTPException, Request

from storefront.access import Requester, Role
from storefront.errors import Forbidden
from storefront.order.workflow import OrderWorkflow


def current_requester(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Requester:
    """The caller, as identified by the upstream authentication layer."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    role = (x_user_role or Role.CUSTOMER.value).upper()
    if role not in {r.value for r in Role}:
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_user_role}'")
    return Requester(id=x_user_id, role=role)


def require_admin(requester: Requester = Depends(current_requester)) -> Requester:
    if not requester.is_admin:
        raise Forbidden({"role": ["Administrator role required"]})
    return requester


def get_workflow(request: Request) -> OrderWorkflow:
    return request.app.state.workflow
