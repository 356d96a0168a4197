from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from globetrotter.models.user.user import BudgetPreference, TravelStyle
from globetrotter.models.itinerary.activity import ActivityType


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str
    country: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("name", "country", "phone")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class Preferences(BaseModel):
    budget: BudgetPreference = BudgetPreference.moderate
    travel_style: TravelStyle = TravelStyle.cultural
    preferred_activities: List[ActivityType] = []


class UserSummary(BaseModel):
    id: int
    name: str
    email: EmailStr

    class Config:
        from_attributes = True


class UserOut(UserSummary):
    country: str
    phone: str
    profile_picture: Optional[str] = None
    preferences: Preferences = Preferences()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    token: str
    user: UserSummary


class MeResponse(BaseModel):
    user: UserOut


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = None
    country: Optional[str] = None
    preferences: Optional[Preferences] = None


class ProfileResponse(BaseModel):
    message: str
    user: UserOut


class PasswordReset(BaseModel):
    old_password: str
    new_password: str


class AccountDeletionDetails(BaseModel):
    trips_preserved: int
    stops_updated: int
    activities_updated: int
    budgets_updated: int
    profile_picture_deleted: bool


class AccountDeletionResponse(BaseModel):
    message: str
    details: AccountDeletionDetails
