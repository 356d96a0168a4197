from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Tuple
from globetrotter.models.common import Visibility
from globetrotter.utils.trip_status import TripStatus, compute_status

SyncState = Literal["pending", "committed"]


class SectionView(BaseModel):
    id: Optional[int] = None
    title: str = ""
    description: str = ""
    date_range: str = ""
    budget: float = 0
    all_day: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class TripInput(BaseModel):
    """What the UI hands the store when creating a trip."""
    title: str = ""
    destination: str
    start_date: str
    end_date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    participants: int = 1
    suggestions: List[str] = []
    sections: List[SectionView] = []
    planned_budget: Optional[float] = None
    description: Optional[str] = None
    visibility: Visibility = Visibility.private
    cover_photo_file: Optional[Tuple[str, bytes]] = None


class TripView(BaseModel):
    id: str
    title: str
    destination: str
    start_date: str
    end_date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: TripStatus
    budget: float = 0
    planned_budget: Optional[float] = None
    participants: int = 1
    suggestions: List[str] = []
    sections: List[SectionView] = []
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    cover_photo: Optional[str] = None
    description: Optional[str] = None
    user_id: Optional[int] = None
    visibility: Optional[Visibility] = None
    sync_state: SyncState = Field("committed")


def _day(value) -> Optional[str]:
    return str(value)[:10] if value else None


def local_budget(trip_input: TripInput) -> float:
    """Planned budget when set, else the section total, else 0."""
    return trip_input.planned_budget or sum(s.budget or 0 for s in trip_input.sections) or 0


def map_backend_trip(data: dict, fallback_user_id: Optional[int] = None) -> TripView:
    """Reshape an API trip into the record the store keeps."""
    planned = data.get("planned_budget")
    budget = data.get("budget")
    return TripView(
        id=str(data["id"]),
        title=data.get("name") or "",
        destination=data.get("destination") or data.get("name") or "",
        start_date=_day(data["start_date"]),
        end_date=_day(data["end_date"]),
        start_time=data.get("start_time"),
        end_time=data.get("end_time"),
        status=compute_status(data["start_date"], data["end_date"]),
        budget=budget if budget is not None else (planned if planned is not None else 0),
        planned_budget=planned,
        participants=data.get("participants") or 1,
        suggestions=data.get("suggestions") or [],
        sections=[
            SectionView(
                id=s.get("id"),
                title=s.get("title") or "",
                description=s.get("description") or "",
                date_range=s.get("date_range") or "",
                budget=s.get("budget") or 0,
                all_day=bool(s.get("all_day")),
                start_time=s.get("start_time"),
                end_time=s.get("end_time"),
                start_date=_day(s.get("start_date")),
                end_date=_day(s.get("end_date")),
            )
            for s in data.get("sections") or []
        ],
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        cover_photo=data.get("cover_photo"),
        description=data.get("description"),
        user_id=data.get("user_id") or fallback_user_id,
        visibility=data.get("visibility"),
        sync_state="committed",
    )


def build_create_payload(trip_input: TripInput, budget: float) -> dict:
    return {
        "name": trip_input.title or trip_input.destination,
        "start_date": trip_input.start_date,
        "end_date": trip_input.end_date,
        "start_time": trip_input.start_time,
        "end_time": trip_input.end_time,
        "description": trip_input.description or "",
        "participants": trip_input.participants,
        "suggestions": trip_input.suggestions,
        "sections": [s.model_dump() for s in trip_input.sections],
        "planned_budget": trip_input.planned_budget or budget,
        "budget": budget,
        "visibility": trip_input.visibility.value,
    }


SECTION_FIELDS = (
    "id", "title", "description", "date_range", "budget", "all_day",
    "start_time", "end_time", "start_date", "end_date",
)

# Record field -> API field for fields sent as-is
UPDATE_FIELDS = {
    "title": "name",
    "start_date": "start_date",
    "end_date": "end_date",
    "start_time": "start_time",
    "end_time": "end_time",
    "description": "description",
    "suggestions": "suggestions",
    "planned_budget": "planned_budget",
}


def build_update_payload(partial: dict) -> dict:
    """Translate a partial store record into the API update body; unknown keys are dropped."""
    payload = {api_key: partial[key] for key, api_key in UPDATE_FIELDS.items() if key in partial}
    if "sections" in partial:
        payload["sections"] = [
            {field: _section_value(s, field) for field in SECTION_FIELDS}
            for s in partial["sections"] or []
        ]
    if partial.get("visibility"):
        visibility = partial["visibility"]
        payload["visibility"] = visibility.value if isinstance(visibility, Visibility) else visibility
    return payload


def _section_value(section, field: str):
    if isinstance(section, BaseModel):
        return getattr(section, field, None)
    return section.get(field)
