from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import List, Optional
from globetrotter.models.itinerary.activity import ActivityType, ActivityPriority
from globetrotter.schemas.common import Visibility, check_time


class ActivityCreate(BaseModel):
    stop_id: int
    name: str = Field(..., min_length=1, max_length=200)
    type: ActivityType
    cost: float = Field(..., ge=0, allow_inf_nan=False)
    duration: int = Field(..., ge=1, description="Duration in minutes")
    description: Optional[str] = Field(None, max_length=1000)
    scheduled_time: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    priority: ActivityPriority = ActivityPriority.medium
    photos: List[str] = []
    visibility: Visibility = Visibility.private

    @model_validator(mode="after")
    def check_times(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        return self


class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[ActivityType] = None
    cost: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    duration: Optional[int] = Field(None, ge=1)
    description: Optional[str] = Field(None, max_length=1000)
    scheduled_time: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    priority: Optional[ActivityPriority] = None
    completed: Optional[bool] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    photos: Optional[List[str]] = None
    visibility: Optional[Visibility] = None

    @model_validator(mode="after")
    def check_times(self):
        check_time(self.start_time, "Start time")
        check_time(self.end_time, "End time")
        return self


class ActivityResponse(BaseModel):
    id: int
    stop_id: int
    user_id: Optional[int] = None
    name: str
    type: ActivityType
    cost: float
    duration: int
    description: Optional[str] = None
    scheduled_time: Optional[datetime] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    priority: ActivityPriority
    completed: bool
    rating: Optional[int] = None
    photos: List[str] = []
    visibility: Visibility
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
