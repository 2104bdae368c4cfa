# Bearer tokens are issued by the platform's auth service; this module only
# signs (for service-to-service calls and tests) and verifies them.

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from invplatform.core.config import settings


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=settings.ACCESS_TOKEN_TTL_HOURS)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and verify a bearer token. Raises JWTError when invalid or expired."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    if not payload.get("sub"):
        raise JWTError("Token missing subject claim")
    return payload


def create_oauth_state(user_id: str, provider: str) -> str:
    """Short-lived signed state parameter for third-party OAuth redirects."""
    return create_access_token(
        {"sub": user_id, "purpose": f"oauth:{provider}"},
        expires_delta=timedelta(minutes=15),
    )


def verify_oauth_state(state: str, provider: str) -> str:
    """Return the user id carried by an OAuth state. Raises JWTError when invalid."""
    payload = decode_access_token(state)
    if payload.get("purpose") != f"oauth:{provider}":
        raise JWTError("OAuth state issued for a different provider")
    return payload["sub"]
