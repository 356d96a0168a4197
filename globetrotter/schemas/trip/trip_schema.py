from pydantic import BaseModel, Field, computed_field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime
from globetrotter.schemas.common import Visibility, check_time
from globetrotter.utils.trip_status import TripStatus, compute_status


class TripSection(BaseModel):
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    date_range: str = ""
    budget: float = Field(0, ge=0, allow_inf_nan=False)
    all_day: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("budget", mode="before")
    @classmethod
    def blank_budget(cls, value):
        return 0 if value in (None, "") else value

    @model_validator(mode="after")
    def check_section(self):
        label = f"Section {self.title or self.id}"
        check_time(self.start_time, f"{label} start time")
        check_time(self.end_time, f"{label} end time")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError(f"{label}: end date must be after or equal to start date")
        return self


class TripBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = Field(None, max_length=2000)
    cover_photo: Optional[str] = None
    participants: int = Field(1, ge=1)
    suggestions: List[str] = []
    sections: List[TripSection] = []
    planned_budget: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    budget: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    visibility: Visibility = Visibility.private


class TripCreate(TripBase):
    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Trip name is required")
        return value

    @field_validator("planned_budget", "budget", mode="before")
    @classmethod
    def blank_amount(cls, value):
        return None if value == "" else value

    @model_validator(mode="after")
    def check_trip(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        if self.end_date < self.start_date:
            raise ValueError("End date must be after or equal to start date")
        return self


class TripUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = Field(None, max_length=2000)
    cover_photo: Optional[str] = None
    participants: Optional[int] = Field(None, ge=1)
    suggestions: Optional[List[str]] = None
    sections: Optional[List[TripSection]] = None
    planned_budget: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    budget: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    visibility: Optional[Visibility] = None

    @model_validator(mode="after")
    def check_partial(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be after or equal to start date")
        return self


class TripResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    name: str
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    description: Optional[str] = None
    cover_photo: Optional[str] = None
    participants: int = 1
    suggestions: List[str] = []
    sections: List[TripSection] = []
    computed_budget: float = 0
    planned_budget: float = 0
    budget: float = 0
    visibility: Visibility
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

    @computed_field
    @property
    def status(self) -> TripStatus:
        return compute_status(self.start_date, self.end_date)


class PublicTripResponse(TripResponse):
    is_anonymous: bool
    user_name: str


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total: int
    has_next_page: bool
    has_prev_page: bool


class PublicTripPage(BaseModel):
    trips: List[PublicTripResponse]
    pagination: Pagination


class TripDeleteResponse(BaseModel):
    message: str
    image_deleted: bool


class BudgetStats(BaseModel):
    total_trips: int = 0
    total_budget: float = 0
    avg_budget: float = 0
    min_budget: float = 0
    max_budget: float = 0
