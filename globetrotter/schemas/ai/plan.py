from pydantic import BaseModel, Field, model_validator
from datetime import date
from typing import List, Literal, Optional
from globetrotter.schemas.common import check_time
from globetrotter.schemas.trip.trip_schema import TripSection

PlanStyle = Literal["budget", "balanced", "luxury"]


class AIPlanRequest(BaseModel):
    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: Optional[date] = None
    days: Optional[int] = Field(None, ge=1, le=365, description="Overrides the day count derived from the date range")
    suggestions: List[str] = []
    overall_budget: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    style: PlanStyle = "balanced"
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @model_validator(mode="after")
    def check_request(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        if self.end_date is None and self.days is None:
            raise ValueError("destination, start_date and end_date are required")
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("Invalid date range")
        return self


class AIPlanSummary(BaseModel):
    destination: str
    days: int
    start_date: date
    end_date: date
    activities_sampled: int
    style_applied: PlanStyle
    total_planned_budget: int
    budget_per_day: int
    generated_sections: int


class AIPlanResponse(BaseModel):
    sections: List[TripSection]
    summary: AIPlanSummary


class AIGenerateRequest(BaseModel):
    prompt: str = Field(..., min_length=1)
    destination: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    overall_budget: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    interests: List[str] = []
    participants: int = Field(1, ge=1)
    current_title: Optional[str] = None
    current_description: Optional[str] = None
    current_sections: List[TripSection] = []

    @model_validator(mode="after")
    def check_window(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("Invalid date range")
        return self


class AIGenerateResponse(BaseModel):
    trip_title: Optional[str] = None
    description: Optional[str] = None
    estimated_budget: Optional[float] = None
    sections: List[TripSection]
    parsed_with: Literal["json", "text"]
