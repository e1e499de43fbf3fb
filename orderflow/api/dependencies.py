"""
Shared FastAPI dependencies: database session, DI container and caller identity.
"""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from orderflow.config.settings import Settings, get_settings
from orderflow.core.container import OrdersContainer, get_orders_container
from orderflow.domains.orders.domain.value_objects import ActorRole, RequestContext

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_container() -> OrdersContainer:
    """Get the orders DI container singleton."""
    return get_orders_container()


def decode_token(token: str, settings: Settings) -> dict:
    """Decode a bearer JWT, raising 401 when it is invalid or expired."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


async def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> RequestContext:
    """
    Build the caller's RequestContext from the bearer token.

    Claims: `sub` (user id) and `role` (customer, vendor or admin). Vendor
    tokens may carry `vendor_id`; otherwise `sub` is the vendor id.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials, settings)
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        role = ActorRole.from_string(str(payload.get("role", "")))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown role") from e

    user_id = str(payload.get("vendor_id") or subject) if role == ActorRole.VENDOR else str(subject)
    return RequestContext(user_id=user_id, role=role)


def require_roles(*roles: ActorRole):
    """Dependency factory restricting an endpoint to the given roles."""

    async def dependency(actor: RequestContext = Depends(get_request_context)) -> RequestContext:  # noqa: B008
        if actor.role not in roles:
            allowed = ", ".join(role.value for role in roles)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Requires role: {allowed}")
        return actor

    return dependency
