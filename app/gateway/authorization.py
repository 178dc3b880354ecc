"""Role gate

Static path-prefix -> roles table used by the API gateway in front of the stores.
The stores themselves trust X-UserId / X-Role; RoleGateMiddleware is only
enabled (ENFORCE_ROLE_GATE) for deployments running without that gateway.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.domain.enums import Role
from app.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN, BILLER, CUSTOMER = Role.ADMIN, Role.BILLER, Role.CUSTOMER

ROUTE_ROLES: list[tuple[str, frozenset[Role]]] = [
    # admin-biller-customer
    ("/bill/admin-biller-customer", frozenset({ADMIN, BILLER, CUSTOMER})),
    ("/invent/admin-biller-customer", frozenset({ADMIN, BILLER, CUSTOMER})),
    # admin-biller
    ("/bill/admin-biller", frozenset({ADMIN, BILLER})),
    # admin-customer
    ("/invent/admin-customer", frozenset({ADMIN, CUSTOMER})),
    ("/bill/admin-customer", frozenset({ADMIN, CUSTOMER})),
    # biller-customer
    ("/user/biller-customer", frozenset({BILLER, CUSTOMER})),
    ("/invent/biller-customer", frozenset({BILLER, CUSTOMER})),
    ("/cart/biller-customer", frozenset({BILLER, CUSTOMER})),
    ("/bill/biller-customer", frozenset({BILLER, CUSTOMER})),
    ("/payment/biller-customer", frozenset({BILLER, CUSTOMER})),
    # admin
    ("/user/admin", frozenset({ADMIN})),
    ("/invent/admin", frozenset({ADMIN})),
    ("/bill/admin", frozenset({ADMIN})),
    ("/payment/admin", frozenset({ADMIN})),
    ("/cart/admin", frozenset({ADMIN})),
    # biller
    ("/user/biller", frozenset({BILLER})),
    ("/invent/biller", frozenset({BILLER})),
    ("/cart/biller", frozenset({BILLER})),
    ("/bill/biller", frozenset({BILLER})),
    # customer
    ("/cart/customer", frozenset({CUSTOMER})),
    ("/invent/customer", frozenset({CUSTOMER})),
    ("/bill/customer", frozenset({CUSTOMER})),
    ("/payment/customer", frozenset({CUSTOMER})),
]


def _parse_role(role) -> Role | None:
    if role is None:
        return None
    if isinstance(role, Role):
        return role
    try:
        return Role(str(role).strip().upper())
    except ValueError:
        return None


def is_gated(path: str) -> bool:
    return any(path.startswith(prefix) for prefix, _ in ROUTE_ROLES)


def is_authorized(path: str, role) -> bool:
    """True if any prefix matching the path lets the role through."""
    parsed = _parse_role(role)
    if parsed is None:
        return False
    return any(path.startswith(prefix) and parsed in roles for prefix, roles in ROUTE_ROLES)


class RoleGateMiddleware(BaseHTTPMiddleware):
    """401 when X-Role is missing on a gated path, 403 when the role is not allowed there."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        # sciezki wewnetrzne (service-to-service) i /health nie sa w tabeli
        if not is_gated(path):
            return await call_next(request)

        role = request.headers.get("X-Role")
        if not role:
            logger.warning(f"Missing X-Role for {request.method} {path}")
            return JSONResponse(status_code=401, content={"message": "Missing role header"})

        if not is_authorized(path, role):
            logger.warning(f"Role {role} denied for {request.method} {path}")
            return JSONResponse(status_code=403, content={"message": f"Role {role} is not allowed here"})

        return await call_next(request)
