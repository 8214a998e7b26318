"""FastAPI dependencies for authentication and authorization.

Usage:
    @router.post("/checkout")
    async def checkout(identity: CurrentIdentity = Depends(get_current_identity)):
        ...

    @router.get("/audit/order-logs")
    async def logs(admin: CurrentIdentity = Depends(require_admin)):
        ...
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .jwt import decode_token

ADMIN_ROLE = "admin"
CUSTOMER_ROLE = "customer"

# auto_error=False so guest endpoints can accept anonymous callers
security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentIdentity:
    """Caller identity taken from a validated access token."""
    user_id: str
    role: str = CUSTOMER_ROLE
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _identity_from_token(token: str) -> CurrentIdentity:
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(str(e))

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: missing user ID claim")

    try:
        UUID(user_id)
    except ValueError:
        raise _unauthorized("Invalid token claims: user ID is not a UUID")

    return CurrentIdentity(
        user_id=user_id,
        role=payload.get("role", CUSTOMER_ROLE),
        email=payload.get("email"),
    )


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentIdentity:
    """Require a valid Bearer token.

    Raises:
        HTTPException 401: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return _identity_from_token(credentials.credentials)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[CurrentIdentity]:
    """Identity when a Bearer token is sent, None for anonymous callers.

    A token that is sent but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    return _identity_from_token(credentials.credentials)


def require_admin(identity: CurrentIdentity = Depends(get_current_identity)) -> CurrentIdentity:
    """Require the admin role.

    Raises:
        HTTPException 403: If the caller is not an admin
    """
    if not identity.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions. Required role: {ADMIN_ROLE}",
        )
    return identity
