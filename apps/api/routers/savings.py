"""
Compression Savings API Router

The client compresses a photo or video locally and reports the before/after
sizes. Signed-in users earn green points for the megabytes they avoided
sending, which can unlock leaderboard badges.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from core.auth import get_optional_user
from core.config import settings
from core.exceptions import UpstreamServiceError, ValidationError
from models import Profile
from routers.activities import get_activity_store
from schemas import BadgeResponse, ImpactComparisonResponse, SavingsRequest, SavingsResponse
from services.activity_ledger import ActivityStore
from services.emission_estimator import InvalidSizeError, estimate_savings
from services.impact_comparisons import compare_savings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/savings", tags=["savings"])


def points_for_savings(saved_mb: float, points_per_mb: float) -> int:
    """Whole points only; fractions of a point are dropped."""
    return int(saved_mb * points_per_mb)


@router.post("", response_model=SavingsResponse)
def record_savings(
    payload: SavingsRequest,
    current_user: Optional[Profile] = Depends(get_optional_user),
    store: ActivityStore = Depends(get_activity_store),
):
    try:
        savings = estimate_savings(payload.original_bytes, payload.compressed_bytes, settings.CO2_GRAMS_PER_MB)
    except InvalidSizeError as e:
        raise ValidationError(str(e), field="original_bytes")

    response = SavingsResponse(
        original_mb=savings.original_mb,
        compressed_mb=savings.compressed_mb,
        saved_mb=savings.saved_mb,
        saved_percentage=savings.saved_percentage,
        co2_saved_grams=savings.co2_saved_grams,
        comparison=ImpactComparisonResponse.model_validate(compare_savings(savings.co2_saved_grams)),
    )

    if current_user is None:
        return response

    points = points_for_savings(savings.saved_mb, settings.GREEN_POINTS_PER_MB_SAVED)
    if points > 0:
        try:
            earned = store.award_green_points(current_user.id, points)
        except SQLAlchemyError as e:
            logger.error(f"Error awarding green points to user {current_user.id}: {e}")
            raise UpstreamServiceError()
        response.green_points_awarded = points
        response.badges_earned = [
            BadgeResponse(badge_name=t.name, badge_icon=t.icon) for t in earned
        ]
    response.green_points_total = current_user.green_points
    return response
