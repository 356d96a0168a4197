# models/itinerary/activity.py

from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Enum, Float, Boolean, JSON,
    CheckConstraint, Index,
)
from globetrotter.core.database import Base
from globetrotter.models.common import Visibility, utcnow
import enum


class ActivityType(str, enum.Enum):
    sightseeing = "sightseeing"
    food = "food"
    adventure = "adventure"
    other = "other"


class ActivityPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (
        CheckConstraint("cost >= 0", name="ck_activities_cost"),
        CheckConstraint("duration >= 1", name="ck_activities_duration"),
        Index("ix_activities_stop_scheduled", "stop_id", "scheduled_time"),
        Index("ix_activities_type_completed", "type", "completed"),
        Index("ix_activities_user_visibility", "user_id", "visibility"),
    )

    id = Column(Integer, primary_key=True, index=True)
    stop_id = Column(Integer, ForeignKey("stops.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    name = Column(String(200), nullable=False)
    type = Column(Enum(ActivityType), nullable=False)
    cost = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    description = Column(String(1000), nullable=True)
    scheduled_time = Column(DateTime, nullable=True)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    priority = Column(Enum(ActivityPriority), nullable=False, default=ActivityPriority.medium)
    completed = Column(Boolean, nullable=False, default=False)
    rating = Column(Integer, nullable=True)
    photos = Column(JSON, nullable=False, default=list)
    visibility = Column(Enum(Visibility), nullable=False, default=Visibility.private)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
