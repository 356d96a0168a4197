from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from globetrotter.core.database import get_db
from globetrotter.dependencies.auth import get_current_user
from globetrotter.models.user.user import User
from globetrotter.models.trips.stop_model import StopCategory
from globetrotter.schemas.trip.stop_schema import (
    StopCreate, StopUpdate, StopResponse, StopEnvelope, StopList, StopDeleteResponse, StopCategories,
)
from globetrotter.services.trips import stop_service

router = APIRouter(prefix="/stops", tags=["Stops"])


@router.get("/categories", response_model=StopCategories)
async def get_stop_categories(current_user: User = Depends(get_current_user)):
    return {"categories": list(StopCategory)}


@router.get("/category/{category}", response_model=List[StopResponse])
async def get_stops_by_category(
    category: StopCategory,
    trip_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stops = await stop_service.get_stops_by_category(db, category, current_user.id, trip_id)
    return [stop.to_dict() for stop in stops]


@router.post("/", response_model=StopEnvelope, status_code=status.HTTP_201_CREATED)
async def create_stop(
    data: StopCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stop = await stop_service.create_stop(db, data, current_user.id)
    return {"message": "Stop created successfully", "stop": stop.to_dict()}


@router.get("/trip/{trip_id}", response_model=StopList)
async def get_stops_for_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stops = await stop_service.get_stops_for_trip(db, trip_id, current_user.id)
    return {"count": len(stops), "stops": [stop.to_dict() for stop in stops]}


@router.put("/{stop_id}", response_model=StopEnvelope)
async def update_stop(
    stop_id: int,
    data: StopUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stop = await stop_service.update_stop(db, stop_id, data, current_user.id)
    return {"message": "Stop updated successfully", "stop": stop.to_dict()}


@router.delete("/{stop_id}", response_model=StopDeleteResponse)
async def delete_stop(
    stop_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    deleted = await stop_service.delete_stop(db, stop_id, current_user.id)
    return {
        "message": "Stop and associated activities deleted successfully",
        "deleted_activities_count": deleted,
    }
