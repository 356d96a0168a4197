from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional
from datetime import date, datetime
from globetrotter.models.trips.stop_model import StopCategory
from globetrotter.schemas.common import Visibility, check_time


class GeoPoint(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(default_factory=lambda: [0.0, 0.0], min_length=2, max_length=2)

    @field_validator("coordinates")
    @classmethod
    def check_range(cls, value: List[float]) -> List[float]:
        longitude, latitude = value
        if not -180 <= longitude <= 180 or not -90 <= latitude <= 90:
            raise ValueError("coordinates must be [longitude, latitude] within valid ranges")
        return value


class StopCreate(BaseModel):
    trip_id: int
    city: str = Field(..., max_length=100)
    category: StopCategory = StopCategory.other
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[GeoPoint] = None
    notes: Optional[str] = Field(None, max_length=500)
    visibility: Visibility = Visibility.private

    @field_validator("city")
    @classmethod
    def strip_city(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("City name is required")
        return value

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value else value

    @model_validator(mode="after")
    def check_stop(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        if self.end_date < self.start_date:
            raise ValueError("End date must be after or equal to start date")
        return self


class StopUpdate(BaseModel):
    city: Optional[str] = Field(None, max_length=100)
    category: Optional[StopCategory] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[GeoPoint] = None
    notes: Optional[str] = Field(None, max_length=500)
    visibility: Optional[Visibility] = None

    @field_validator("city", "notes")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value else value

    @model_validator(mode="after")
    def check_partial(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        return self


class StopResponse(BaseModel):
    id: int
    trip_id: int
    user_id: Optional[int] = None
    city: str
    category: StopCategory
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: GeoPoint
    notes: Optional[str] = None
    visibility: Visibility
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class StopEnvelope(BaseModel):
    success: bool = True
    message: str
    stop: StopResponse


class StopList(BaseModel):
    success: bool = True
    count: int
    stops: List[StopResponse]


class StopDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_activities_count: int


class StopCategories(BaseModel):
    categories: List[StopCategory]
