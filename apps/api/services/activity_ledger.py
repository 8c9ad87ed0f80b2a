"""
Activity Ledger

Typed activity records plus their running totals, and the store interface the
API persists them through.

`ActivityLedger` is plain in-memory bookkeeping: it holds records in display
order and sums them on demand, so the displayed total is always the exact sum
of the listed records. `ActivityStore` is the narrow persistence seam;
`SqlActivityStore` implements it on the SQLAlchemy session and also keeps the
profile totals and weekly rollup in step with each insert.
"""
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from core.logging import log_fields
from services.emission_estimator import CO2_GRAMS_PER_MB, estimate_rounded
from services.leaderboard import BadgeTier, newly_earned_tiers
from services.weekly_aggregator import week_start

logger = logging.getLogger(__name__)


class ActivityType(str, Enum):
    PHOTO = "photo"
    MESSAGE = "message"
    VIDEO = "video"


@dataclass(frozen=True)
class ActivityRecord:
    activity_type: ActivityType
    size_mb: float
    co2_grams: float
    created_at: datetime
    id: Optional[UUID] = None


def new_activity_record(
    activity_type: ActivityType,
    size_mb: float,
    grams_per_mb: float = CO2_GRAMS_PER_MB,
    now: Optional[datetime] = None,
) -> ActivityRecord:
    """Build a record with co2_grams fixed from size_mb. size_mb must already be validated."""
    return ActivityRecord(
        activity_type=ActivityType(activity_type),
        size_mb=size_mb,
        co2_grams=estimate_rounded(size_mb, grams_per_mb),
        created_at=now or datetime.now(timezone.utc),
    )


class ActivityLedger:
    """Records in display order (newest first) with derived totals."""

    def __init__(self, records: Iterable[ActivityRecord] = ()):
        self._records: List[ActivityRecord] = list(records)

    def append(self, record: ActivityRecord) -> None:
        """Add a freshly recorded activity to the top of the list."""
        self._records.insert(0, record)

    @property
    def records(self) -> Tuple[ActivityRecord, ...]:
        return tuple(self._records)

    @property
    def count(self) -> int:
        return len(self._records)

    @property
    def total_co2_grams(self) -> float:
        return sum(r.co2_grams for r in self._records)

    @property
    def total_size_mb(self) -> float:
        return sum(r.size_mb for r in self._records)

    def co2_by_type(self) -> Dict[str, float]:
        """Grams per activity type, in first-seen order."""
        breakdown: Dict[str, float] = OrderedDict()
        for record in self._records:
            key = ActivityType(record.activity_type).value
            breakdown[key] = breakdown.get(key, 0.0) + record.co2_grams
        return dict(breakdown)


class ActivityStore(ABC):
    """Persistence seam for activities and the per-user aggregates they drive."""

    @abstractmethod
    def add_activity(self, user_id: UUID, record: ActivityRecord) -> ActivityRecord:
        ...

    @abstractmethod
    def list_activities(self, user_id: UUID, limit: Optional[int] = None) -> List[ActivityRecord]:
        """Newest first."""

    @abstractmethod
    def weekly_history(self, user_id: UUID, limit: int) -> list:
        """Newest week first."""

    @abstractmethod
    def award_green_points(self, user_id: UUID, points: int) -> List[BadgeTier]:
        """Add points and return the tiers newly earned by the increase."""


class SqlActivityStore(ActivityStore):
    def __init__(self, db: Session):
        self.db = db

    def _profile(self, user_id: UUID):
        from models import Profile
        profile = self.db.query(Profile).filter(Profile.id == user_id).first()
        if profile is None:
            raise LookupError(f"Profile not found: {user_id}")
        return profile

    def add_activity(self, user_id: UUID, record: ActivityRecord) -> ActivityRecord:
        from models import Activity, WeeklyHistory

        profile = self._profile(user_id)
        row = Activity(
            user_id=user_id,
            activity_type=ActivityType(record.activity_type).value,
            size_mb=record.size_mb,
            co2_grams=record.co2_grams,
            created_at=record.created_at,
        )
        self.db.add(row)

        profile.co2_emitted = (profile.co2_emitted or 0.0) + record.co2_grams
        profile.total_data_used_mb = (profile.total_data_used_mb or 0.0) + record.size_mb

        week = week_start(record.created_at.date())
        entry = (
            self.db.query(WeeklyHistory)
            .filter(WeeklyHistory.user_id == user_id, WeeklyHistory.week_start == week)
            .first()
        )
        if entry is None:
            entry = WeeklyHistory(user_id=user_id, week_start=week, co2_emitted_grams=0.0, data_used_mb=0.0)
            self.db.add(entry)
        entry.co2_emitted_grams += record.co2_grams
        entry.data_used_mb += record.size_mb

        self.db.flush()
        logger.info(
            f"Recorded {row.activity_type} activity for user {user_id}",
            extra=log_fields(user_id=user_id, size_mb=record.size_mb, co2_grams=record.co2_grams),
        )
        return ActivityRecord(
            activity_type=ActivityType(row.activity_type),
            size_mb=row.size_mb,
            co2_grams=row.co2_grams,
            created_at=row.created_at,
            id=row.id,
        )

    def list_activities(self, user_id: UUID, limit: Optional[int] = None) -> List[ActivityRecord]:
        from models import Activity

        query = (
            self.db.query(Activity)
            .filter(Activity.user_id == user_id)
            .order_by(Activity.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        return [
            ActivityRecord(
                activity_type=ActivityType(a.activity_type),
                size_mb=a.size_mb,
                co2_grams=a.co2_grams,
                created_at=a.created_at,
                id=a.id,
            )
            for a in query.all()
        ]

    def weekly_history(self, user_id: UUID, limit: int) -> list:
        from models import WeeklyHistory

        return (
            self.db.query(WeeklyHistory)
            .filter(WeeklyHistory.user_id == user_id)
            .order_by(WeeklyHistory.week_start.desc())
            .limit(limit)
            .all()
        )

    def award_green_points(self, user_id: UUID, points: int) -> List[BadgeTier]:
        from models import Badge

        profile = self._profile(user_id)
        before = profile.green_points or 0
        profile.green_points = before + points

        owned = {b.badge_name for b in self.db.query(Badge).filter(Badge.user_id == user_id).all()}
        earned = [t for t in newly_earned_tiers(before, profile.green_points) if t.name not in owned]
        for tier in earned:
            self.db.add(Badge(
                user_id=user_id,
                badge_name=tier.name,
                badge_icon=tier.icon,
                earned_at=datetime.now(timezone.utc),
            ))
        self.db.flush()

        if earned:
            logger.info(f"User {user_id} earned badges: {[t.name for t in earned]}")
        return earned
