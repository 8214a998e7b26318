"""Access tokens for storefront profiles.

Claims: ``sub`` (profile UUID), ``role`` ("customer" or "admin"), optional
``email``, and ``iat``/``exp`` as Unix timestamps. Validation checks the
signature, expiry and that ``sub`` and ``exp`` are present; it never touches
the database.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

import jwt

from ..config import get_settings

REQUIRED_CLAIMS = ["sub", "exp"]


def create_access_token(
    user_id: UUID,
    role: str = "customer",
    email: Optional[str] = None,
    expires_in: Optional[timedelta] = None,
) -> str:
    settings = get_settings()
    issued = datetime.now(timezone.utc)
    lifetime = expires_in or timedelta(minutes=settings.JWT_EXPIRY_MINUTES)

    claims: Dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": int(issued.timestamp()),
        "exp": int((issued + lifetime).timestamp()),
    }
    if email:
        claims["email"] = email

    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Return the token's claims.

    Raises:
        jwt.ExpiredSignatureError: expired token
        jwt.InvalidTokenError: bad signature, malformed token or missing claim
    """
    settings = get_settings()
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": REQUIRED_CLAIMS},
    )
