"""
Weekly Summary API Router

Week-over-week emissions for the dashboard card and the analytics chart.
"""
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from core.auth import get_current_user
from core.exceptions import UpstreamServiceError
from models import Profile
from routers.activities import get_activity_store
from schemas import ImpactComparisonResponse, WeekEntry, WeeklySummaryResponse
from services.activity_ledger import ActivityStore
from services.impact_comparisons import compare, weekly_impact_message
from services.weekly_aggregator import summarize_history

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/weekly", tags=["weekly"])


@router.get("/summary", response_model=WeeklySummaryResponse)
def weekly_summary(
    current_user: Profile = Depends(get_current_user),
    store: ActivityStore = Depends(get_activity_store),
    weeks: int = Query(8, ge=2, le=52, description="Number of most recent weeks to include"),
):
    """
    Compare the latest tracked week with the one before it.

    A previous week of zero reports a 0% change (never a division error).
    """
    try:
        history = store.weekly_history(current_user.id, limit=weeks)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching weekly history for user {current_user.id}: {e}")
        raise UpstreamServiceError()

    summary = summarize_history(history)
    change = summary.change
    total_impact = None
    if summary.total_grams > 0:
        total_impact = ImpactComparisonResponse.model_validate(compare(summary.total_grams))
    return WeeklySummaryResponse(
        current_week_grams=change.current,
        previous_week_grams=change.previous,
        percent_change=change.percent_change,
        display_change=change.display_change,
        is_reduction=change.is_reduction,
        direction=change.direction,
        total_grams=summary.total_grams,
        total_kg=summary.total_kg,
        impact_message=weekly_impact_message(change.current),
        total_impact=total_impact,
        weeks=[
            WeekEntry(week_start=w.week_start, co2_emitted_grams=w.co2_emitted_grams, data_used_mb=w.data_used_mb)
            for w in summary.series
        ],
    )
