from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date
from uuid import UUID
from typing import Optional, List, Dict, Union

from services.activity_ledger import ActivityType


class ImpactComparisonResponse(BaseModel):
    category: str
    description: str
    emoji: str

    model_config = ConfigDict(from_attributes=True)


class ProfileUpsert(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)


class ProfileResponse(BaseModel):
    id: UUID
    username: str
    co2_emitted: float
    green_points: int
    total_data_used_mb: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EstimateRequest(BaseModel):
    """Either size_mb (number or numeric string) or size_bytes of an uploaded file."""
    size_mb: Optional[Union[float, str]] = None
    size_bytes: Optional[int] = Field(default=None, ge=0)


class EstimateResponse(BaseModel):
    size_mb: float
    co2_grams: float
    co2_display: str
    comparison: ImpactComparisonResponse


class ActivityCreate(BaseModel):
    activity_type: ActivityType
    size_mb: Union[float, str]


class ActivityResponse(BaseModel):
    id: Optional[UUID] = None
    activity_type: ActivityType
    size_mb: float
    co2_grams: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityCreatedResponse(BaseModel):
    activity: ActivityResponse
    co2_display: str
    comparison: ImpactComparisonResponse
    profile: ProfileResponse


class ActivityListResponse(BaseModel):
    activities: List[ActivityResponse]
    count: int
    total_co2_grams: float
    total_co2_display: str
    total_size_mb: float


class ActivityBreakdownItem(BaseModel):
    name: str
    value: float


class WeekEntry(BaseModel):
    week_start: date
    co2_emitted_grams: float
    data_used_mb: float


class WeeklySummaryResponse(BaseModel):
    current_week_grams: float
    previous_week_grams: float
    percent_change: float
    display_change: float
    is_reduction: bool
    direction: str
    total_grams: float
    total_kg: float
    impact_message: str
    # Comparison for the whole window; None when nothing was emitted
    total_impact: Optional[ImpactComparisonResponse] = None
    weeks: List[WeekEntry]


class SavingsRequest(BaseModel):
    original_bytes: int = Field(..., gt=0)
    compressed_bytes: int = Field(..., ge=0)


class BadgeResponse(BaseModel):
    badge_name: str
    badge_icon: str
    earned_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SavingsResponse(BaseModel):
    original_mb: float
    compressed_mb: float
    saved_mb: float
    saved_percentage: float
    co2_saved_grams: float
    comparison: ImpactComparisonResponse
    green_points_awarded: int = 0
    green_points_total: Optional[int] = None
    badges_earned: List[BadgeResponse] = []


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: Optional[UUID] = None
    username: str
    green_points: int
    total_data_used_mb: float
    badge_name: str
    badge_icon: str
    is_current_user: bool = False


class BadgeTierResponse(BaseModel):
    name: str
    threshold: int
    icon: str


class LeaderboardResponse(BaseModel):
    entries: List[LeaderboardEntry]
    tiers: List[BadgeTierResponse]


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=2000)


class ChatReply(BaseModel):
    reply: str


class ChatFailure(BaseModel):
    error: str
    fallback: str


class UsageSummaryResponse(BaseModel):
    summary: str


class CarbonIntensityRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class CarbonIntensityResponse(BaseModel):
    intensity: float
    units: str
    country: str
    fossilFuelPercentage: float
    source: str


class ActivityBreakdownResponse(BaseModel):
    breakdown: List[ActivityBreakdownItem]
    by_type: Dict[str, float]
