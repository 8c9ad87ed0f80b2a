"""
Profile API Router

The profile row is keyed by the identity provider's user ID. PUT creates it on
first use (or renames it); totals are only ever changed by recorded activity
and savings.
"""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.auth import get_current_user, get_current_user_id
from core.database import get_db
from models import Badge, Profile
from schemas import BadgeResponse, ProfileResponse, ProfileUpsert

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/profile", tags=["profile"])


@router.get("/me", response_model=ProfileResponse)
def get_my_profile(current_user: Profile = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=ProfileResponse)
def upsert_my_profile(
    payload: ProfileUpsert,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        profile = Profile(
            id=user_id,
            username=payload.username,
            co2_emitted=0.0,
            total_data_used_mb=0.0,
            green_points=0,
        )
        db.add(profile)
        logger.info(f"Created profile for user {user_id}")
    else:
        profile.username = payload.username
    db.flush()
    db.refresh(profile)
    return profile


@router.get("/me/badges", response_model=List[BadgeResponse])
def list_my_badges(
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Badges earned so far, oldest first."""
    return (
        db.query(Badge)
        .filter(Badge.user_id == current_user.id)
        .order_by(Badge.earned_at.asc())
        .all()
    )
