from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from globetrotter.schemas.common import ImageUrlRequest
from globetrotter.schemas.trip.trip_schema import (
    TripCreate, TripUpdate, TripResponse, PublicTripPage, TripDeleteResponse, BudgetStats,
)
from globetrotter.models.user.user import User
from globetrotter.core.database import get_db
from globetrotter.core.errors import parse_model
from globetrotter.core.cache import get_cache
from globetrotter.dependencies.auth import get_current_user
from globetrotter.services.trips.trip_service import TripService
from globetrotter.utils.forms import read_payload
from globetrotter.utils.image_cdn import get_image_cdn
from globetrotter.utils.trip_status import TripStatus

router = APIRouter(prefix="/trips", tags=["Trips"])


async def get_trip_service(
    cache=Depends(get_cache),
    image_cdn=Depends(get_image_cdn)
) -> TripService:
    return TripService(cache, image_cdn)


# Public routes

@router.get("/public", response_model=PublicTripPage)
async def get_public_trips(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[TripStatus] = None,
    session: AsyncSession = Depends(get_db),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_public_trips(session, page, limit, status)


@router.get("/public/{trip_id}", response_model=TripResponse)
async def get_public_trip(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_public_trip(session, trip_id)


@router.get("/public/{trip_id}/with-stops")
async def get_public_trip_with_stops(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip_with_stops(session, trip_id, public_only=True)


# Owner routes

@router.post("/", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip_route(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    data, cover = await read_payload(
        request, file_fields=("cover_photo", "image"), json_fields=("sections", "suggestions")
    )
    trip = parse_model(TripCreate, data)
    return await trip_service.create_trip(db, trip, current_user.id, cover)


@router.get("/", response_model=List[TripResponse])
async def get_my_trips(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_user_trips(session, current_user.id)


@router.get("/budget-stats", response_model=BudgetStats)
async def get_budget_stats(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_budget_stats(session, current_user.id)


@router.get("/by-budget", response_model=List[TripResponse])
async def get_trips_by_budget(
    min_budget: Optional[float] = None,
    max_budget: Optional[float] = None,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    for label, value in (("min_budget", min_budget), ("max_budget", max_budget)):
        if value is not None and value < 0:
            raise HTTPException(status_code=400, detail=f"{label} must be a positive number")
    return await trip_service.get_trips_by_budget(session, current_user.id, min_budget, max_budget)


@router.post("/image/delete")
async def delete_trip_image(
    data: ImageUrlRequest,
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.delete_image(data.url)


@router.get("/{trip_id}/with-stops")
async def get_trip_with_stops(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip_with_stops(session, trip_id, current_user.id)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip(session, trip_id, current_user.id)


@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip_route(
    trip_id: int,
    trip_update: TripUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.update_trip(session, trip_id, trip_update, current_user.id)


@router.delete("/{trip_id}", response_model=TripDeleteResponse)
async def delete_trip_route(
    trip_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.delete_trip(session, trip_id, current_user.id)
