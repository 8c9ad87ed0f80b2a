"""
Authentication dependencies.

Provides FastAPI dependencies for:
- Resolving the caller's user ID from a bearer token
- Getting the current user's profile (required)
- Getting the current user's profile when a token happens to be present (optional)
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from core.database import get_db
from core.security import user_id_from_token
from models import Profile

# Use auto_error=False to handle missing credentials manually and return 401 (not 403)
security = HTTPBearer(auto_error=False)


def _user_id_from_credentials(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[UUID]:
    if not credentials:
        return None
    return user_id_from_token(credentials.credentials)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> UUID:
    """
    Get the authenticated user's ID from the JWT token.

    Raises HTTPException if the token is missing or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = _user_id_from_credentials(credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> Profile:
    """
    Get the current authenticated user's profile.

    Raises HTTPException if the profile has not been created yet.
    """
    user = db.query(Profile).filter(Profile.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[Profile]:
    """
    Get the caller's profile if a valid token was sent, otherwise None.

    Used by endpoints that personalize their answer but also serve anonymous callers.
    """
    user_id = _user_id_from_credentials(credentials)
    if user_id is None:
        return None
    return db.query(Profile).filter(Profile.id == user_id).first()
