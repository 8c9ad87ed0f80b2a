"""
Bearer token verification.

Users sign up and log in with the identity provider, which issues HS256 JWTs
whose "sub" claim is the user's UUID. The same UUID is the primary key of the
profile row. This module validates those tokens; `create_access_token` exists
for local tooling and tests.

SECRET_KEY must be the identity provider's JWT secret (32+ characters) and
must never be committed to source control.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import JWTError, jwt

from core.config import settings

SECRET_KEY = settings.SECRET_KEY

if len(SECRET_KEY) < 32:
    raise ValueError(
        "SECRET_KEY must be at least 32 characters. "
        "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
    )

ALGORITHM = "HS256"


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token shaped like the identity provider's (sub, exp, optional aud)."""
    claims = data.copy()
    claims["exp"] = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    if settings.JWT_AUDIENCE and "aud" not in claims:
        claims["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid token, or None if the signature, expiry or audience is wrong."""
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options=options,
        )
    except JWTError:
        return None


def user_id_from_token(token: str) -> Optional[UUID]:
    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        return None
    try:
        return UUID(str(payload["sub"]))
    except ValueError:
        return None
