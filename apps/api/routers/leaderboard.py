"""
Leaderboard API Router

Top users by green points, with their achievement tier.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.auth import get_optional_user
from core.database import get_db
from core.exceptions import UpstreamServiceError
from models import Profile
from schemas import BadgeTierResponse, LeaderboardEntry, LeaderboardResponse
from services.leaderboard import BADGE_TIERS, rank_users

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
def get_leaderboard(
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_optional_user),
    limit: int = Query(10, ge=1, le=100),
):
    try:
        # Ties keep profile creation order; rank_users preserves it
        profiles = (
            db.query(Profile)
            .order_by(Profile.green_points.desc(), Profile.created_at.asc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching leaderboard: {e}")
        raise UpstreamServiceError()

    current_id = current_user.id if current_user else None
    entries = [
        LeaderboardEntry(
            rank=ranked.rank,
            user_id=ranked.user_id,
            username=ranked.username,
            green_points=ranked.green_points,
            total_data_used_mb=ranked.total_data_used_mb,
            badge_name=ranked.badge.name,
            badge_icon=ranked.badge.icon,
            is_current_user=current_id is not None and ranked.user_id == current_id,
        )
        for ranked in rank_users(profiles)
    ]
    return LeaderboardResponse(
        entries=entries,
        tiers=[BadgeTierResponse(name=t.name, threshold=t.threshold, icon=t.icon) for t in BADGE_TIERS],
    )
