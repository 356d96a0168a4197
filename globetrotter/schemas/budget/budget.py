from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional
from globetrotter.schemas.common import check_time


class BudgetUpsert(BaseModel):
    trip_id: int
    transport: float = Field(0, ge=0, allow_inf_nan=False)
    stay: float = Field(0, ge=0, allow_inf_nan=False)
    activities: float = Field(0, ge=0, allow_inf_nan=False)
    meals: float = Field(0, ge=0, allow_inf_nan=False)
    # Accepted for compatibility; the stored total is always recomputed
    total: Optional[float] = Field(None, allow_inf_nan=False)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if value else value

    @model_validator(mode="after")
    def check_times(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        return self


class BudgetResponse(BaseModel):
    id: int
    trip_id: int
    user_id: Optional[int] = None
    transport: float
    stay: float
    activities: float
    meals: float
    total: float
    currency: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
