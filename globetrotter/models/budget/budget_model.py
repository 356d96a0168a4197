from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Float
from globetrotter.core.database import Base
from globetrotter.models.common import utcnow


class Budget(Base):
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    trip_id = Column(Integer, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, unique=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    transport = Column(Float, nullable=False, default=0)
    stay = Column(Float, nullable=False, default=0)
    activities = Column(Float, nullable=False, default=0)
    meals = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="USD")
    start_time = Column(String(5), nullable=True)
    end_time = Column(String(5), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def recalculate_total(self) -> float:
        self.total = sum(float(part or 0) for part in (self.transport, self.stay, self.activities, self.meals))
        return self.total
