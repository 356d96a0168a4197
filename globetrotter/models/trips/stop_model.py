from sqlalchemy import (
    Column, Integer, String, Date, ForeignKey, Enum, DateTime, Float,
    CheckConstraint, Index,
)
from globetrotter.core.database import Base
from globetrotter.models.common import Visibility, utcnow
import enum


class StopCategory(str, enum.Enum):
    accommodation = "accommodation"
    transport = "transport"
    sightseeing = "sightseeing"
    dining = "dining"
    shopping = "shopping"
    entertainment = "entertainment"
    other = "other"


class Stop(Base):
    __tablename__ = "stops"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_stops_date_order"),
        Index("ix_stops_trip_start", "trip_id", "start_date"),
        Index("ix_stops_category_visibility", "category", "visibility"),
        Index("ix_stops_user", "user_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    city = Column(String(100), nullable=False)
    category = Column(Enum(StopCategory), nullable=False, default=StopCategory.other)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)

    # GeoJSON point stored as two columns: [longitude, latitude]
    longitude = Column(Float, nullable=False, default=0)
    latitude = Column(Float, nullable=False, default=0)

    notes = Column(String(500), nullable=True)
    visibility = Column(Enum(Visibility), nullable=False, default=Visibility.private)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "trip_id": self.trip_id,
            "user_id": self.user_id,
            "city": self.city,
            "category": self.category.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "location": {
                "type": "Point",
                "coordinates": [self.longitude or 0, self.latitude or 0],
            },
            "notes": self.notes,
            "visibility": self.visibility.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
