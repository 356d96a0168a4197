from sqlalchemy import (
    Column, Integer, String, Date, ForeignKey, Enum, DateTime, Float, Text, JSON,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from globetrotter.core.database import Base
from globetrotter.models.common import Visibility, utcnow


class Trip(Base):
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_trips_date_order"),
        CheckConstraint("participants >= 1", name="ck_trips_participants"),
        Index("ix_trips_user_start", "user_id", "start_date"),
        Index("ix_trips_visibility", "visibility"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Nullable: account deletion leaves the trip behind without an owner
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    owner = relationship("User", lazy="raise")

    name = Column(String(200), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)
    description = Column(Text, nullable=True)
    cover_photo = Column(String, nullable=True)
    participants = Column(Integer, nullable=False, default=1)

    suggestions = Column(JSON, nullable=False, default=list)
    sections = Column(JSON, nullable=False, default=list)

    computed_budget = Column(Float, nullable=False, default=0)
    planned_budget = Column(Float, nullable=False, default=0)
    budget = Column(Float, nullable=False, default=0)

    visibility = Column(Enum(Visibility), nullable=False, default=Visibility.private)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_dict(self):
        """Convert Trip instance to dictionary for caching"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "description": self.description,
            "cover_photo": self.cover_photo,
            "participants": self.participants,
            "suggestions": list(self.suggestions or []),
            "sections": list(self.sections or []),
            "computed_budget": self.computed_budget,
            "planned_budget": self.planned_budget,
            "budget": self.budget,
            "visibility": self.visibility.value if self.visibility else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
