from sqlalchemy import Column, Integer, Float, Date, DateTime, ForeignKey, Text, Uuid, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import uuid


class Profile(Base):
    __tablename__ = "profile"

    # Same ID as the identity provider's user (JWT "sub")
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    username = Column(Text, nullable=False)

    # Running totals, accumulated on every recorded activity
    co2_emitted = Column(Float, default=0.0, nullable=False)  # grams
    total_data_used_mb = Column(Float, default=0.0, nullable=False)
    green_points = Column(Integer, default=0, nullable=False, index=True)

    activities = relationship("Activity", back_populates="profile", order_by="Activity.created_at")
    weekly_history = relationship("WeeklyHistory", back_populates="profile")
    badges = relationship("Badge", back_populates="profile", order_by="Badge.earned_at")


class Activity(Base):
    """
    One logged data transfer (photo, message or video).

    co2_grams is fixed at creation time from size_mb; rows are never updated.
    """
    __tablename__ = "activity"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profile.id"), nullable=False, index=True)
    activity_type = Column(Text, nullable=False)  # 'photo', 'message', 'video'
    size_mb = Column(Float, nullable=False)
    co2_grams = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="activities")

    __table_args__ = (
        CheckConstraint("size_mb > 0", name="ck_activity_size_positive"),
        CheckConstraint("co2_grams >= 0", name="ck_activity_co2_non_negative"),
        CheckConstraint("activity_type IN ('photo', 'message', 'video')", name="ck_activity_type"),
        Index("ix_activity_user_created", "user_id", "created_at"),
    )


class WeeklyHistory(Base):
    """Per-user weekly rollup. week_start is the Monday of the ISO week."""
    __tablename__ = "weekly_history"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profile.id"), nullable=False, index=True)
    week_start = Column(Date, nullable=False)
    co2_emitted_grams = Column(Float, default=0.0, nullable=False)
    data_used_mb = Column(Float, default=0.0, nullable=False)

    profile = relationship("Profile", back_populates="weekly_history")

    __table_args__ = (
        UniqueConstraint("user_id", "week_start", name="uq_weekly_history_user_week"),
    )


class Badge(Base):
    __tablename__ = "badge"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("profile.id"), nullable=False, index=True)
    badge_name = Column(Text, nullable=False)
    badge_icon = Column(Text, nullable=False)
    earned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    profile = relationship("Profile", back_populates="badges")

    __table_args__ = (
        UniqueConstraint("user_id", "badge_name", name="uq_badge_user_name"),
    )
