from sqlalchemy import Column, String, Integer, DateTime, JSON
from globetrotter.core.database import Base
from globetrotter.models.common import utcnow
import enum


class BudgetPreference(str, enum.Enum):
    low = "low"
    moderate = "moderate"
    luxury = "luxury"


class TravelStyle(str, enum.Enum):
    adventure = "adventure"
    relaxation = "relaxation"
    cultural = "cultural"
    business = "business"
    family = "family"


def default_preferences() -> dict:
    return {
        "budget": BudgetPreference.moderate.value,
        "travel_style": TravelStyle.cultural.value,
        "preferred_activities": [],
    }


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    country = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    profile_picture = Column(String, nullable=True)
    preferences = Column(JSON, nullable=False, default=default_preferences)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def to_public(self) -> dict:
        """Short identity block returned by signup/login."""
        return {"id": self.id, "name": self.name, "email": self.email}
