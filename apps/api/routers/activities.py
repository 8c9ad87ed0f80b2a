"""
Activities API Router

Log data-transfer activities and read them back with running totals.
"""
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.auth import get_current_user
from core.config import settings
from core.database import get_db
from core.exceptions import UpstreamServiceError, ValidationError
from models import Profile
from schemas import (
    ActivityBreakdownItem,
    ActivityBreakdownResponse,
    ActivityCreate,
    ActivityCreatedResponse,
    ActivityListResponse,
    ActivityResponse,
    ImpactComparisonResponse,
    ProfileResponse,
)
from services.activity_ledger import (
    ActivityLedger,
    ActivityStore,
    SqlActivityStore,
    new_activity_record,
)
from services.emission_estimator import InvalidSizeError, format_grams, validate_size_mb
from services.impact_comparisons import compare

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/activities", tags=["activities"])


def get_activity_store(db: Session = Depends(get_db)) -> ActivityStore:
    return SqlActivityStore(db)


@router.post("", response_model=ActivityCreatedResponse, status_code=status.HTTP_201_CREATED)
def record_activity(
    payload: ActivityCreate,
    current_user: Profile = Depends(get_current_user),
    store: ActivityStore = Depends(get_activity_store),
):
    """
    Record a photo, message or video transfer.

    CO2 is computed server-side from size_mb; the stored value is always
    size_mb * CO2_GRAMS_PER_MB (rounded to 3 decimals).
    """
    try:
        size_mb = validate_size_mb(payload.size_mb)
    except InvalidSizeError as e:
        raise ValidationError(str(e), field="size_mb")

    record = new_activity_record(payload.activity_type, size_mb, settings.CO2_GRAMS_PER_MB)
    try:
        saved = store.add_activity(current_user.id, record)
    except SQLAlchemyError as e:
        logger.error(f"Error saving activity for user {current_user.id}: {e}")
        raise UpstreamServiceError("Failed to save activity. Please try again.")

    return ActivityCreatedResponse(
        activity=ActivityResponse.model_validate(saved),
        co2_display=format_grams(saved.co2_grams),
        comparison=ImpactComparisonResponse.model_validate(compare(saved.co2_grams)),
        profile=ProfileResponse.model_validate(current_user),
    )


@router.get("", response_model=ActivityListResponse)
def list_activities(
    current_user: Profile = Depends(get_current_user),
    store: ActivityStore = Depends(get_activity_store),
    limit: int = Query(10, ge=1, le=100, description="Number of recent activities to return"),
):
    """Most recent activities, newest first, with totals over the returned list."""
    try:
        ledger = ActivityLedger(store.list_activities(current_user.id, limit=limit))
    except SQLAlchemyError as e:
        logger.error(f"Error fetching activities for user {current_user.id}: {e}")
        raise UpstreamServiceError()

    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(r) for r in ledger.records],
        count=ledger.count,
        total_co2_grams=ledger.total_co2_grams,
        total_co2_display=format_grams(ledger.total_co2_grams),
        total_size_mb=ledger.total_size_mb,
    )


@router.get("/breakdown", response_model=ActivityBreakdownResponse)
def activity_breakdown(
    current_user: Profile = Depends(get_current_user),
    store: ActivityStore = Depends(get_activity_store),
):
    """Grams of CO2 per activity type across all of the user's activities."""
    try:
        ledger = ActivityLedger(store.list_activities(current_user.id))
    except SQLAlchemyError as e:
        logger.error(f"Error fetching analytics for user {current_user.id}: {e}")
        raise UpstreamServiceError()

    by_type = ledger.co2_by_type()
    return ActivityBreakdownResponse(
        breakdown=[ActivityBreakdownItem(name=name.capitalize(), value=value) for name, value in by_type.items()],
        by_type=by_type,
    )
