from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, or_
from fastapi import HTTPException, status
from typing import List, Optional
from globetrotter.core.logger import logger
from globetrotter.models.common import Visibility
from globetrotter.models.trips.trip_model import Trip
from globetrotter.models.trips.stop_model import Stop, StopCategory
from globetrotter.models.itinerary.activity import Activity
from globetrotter.schemas.trip.stop_schema import StopCreate, StopUpdate
from globetrotter.services.trips.trip_service import get_owned_trip, get_visible_trip


async def get_owned_stop(db: AsyncSession, stop_id: int, user_id: int, action: str = "modify") -> Stop:
    """Stops are writable by the owner of the trip they belong to."""
    stop = await db.get(Stop, stop_id)
    if stop is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stop not found")
    trip = await db.get(Trip, stop.trip_id)
    if trip is None or trip.user_id != user_id:
        logger.warning(f"User {user_id} denied {action} on stop {stop_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Access denied to {action} this stop")
    return stop


async def create_stop(db: AsyncSession, stop_data: StopCreate, user_id: int) -> Stop:
    await get_owned_trip(db, stop_data.trip_id, user_id, "add stops to")

    values = stop_data.model_dump(exclude={"location"})
    if stop_data.location is not None:
        values["longitude"], values["latitude"] = stop_data.location.coordinates

    stop = Stop(**values, user_id=user_id)
    db.add(stop)
    await db.commit()
    await db.refresh(stop)

    logger.info(f"Stop {stop.id} created on trip {stop.trip_id} by user {user_id}")
    return stop


async def get_stops_for_trip(db: AsyncSession, trip_id: int, user_id: int) -> List[Stop]:
    await get_visible_trip(db, trip_id, user_id)

    result = await db.execute(
        select(Stop)
        .where(Stop.trip_id == trip_id)
        .order_by(Stop.start_date.asc(), Stop.start_time.asc())
    )
    return result.scalars().all()


async def update_stop(db: AsyncSession, stop_id: int, stop_data: StopUpdate, user_id: int) -> Stop:
    stop = await get_owned_stop(db, stop_id, user_id, "modify")

    update_data = stop_data.model_dump(exclude_unset=True, exclude={"location"})
    for field in ("city", "category", "start_date", "end_date", "visibility"):
        if field in update_data and update_data[field] is None:
            update_data.pop(field)
    if "city" in update_data and not update_data["city"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="City name is required")

    start = update_data.get("start_date", stop.start_date)
    end = update_data.get("end_date", stop.end_date)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End date must be after or equal to start date"
        )

    if stop_data.location is not None:
        update_data["longitude"], update_data["latitude"] = stop_data.location.coordinates

    for key, value in update_data.items():
        setattr(stop, key, value)

    await db.commit()
    await db.refresh(stop)

    logger.info(f"Stop {stop_id} updated by user {user_id}")
    return stop


async def delete_stop(db: AsyncSession, stop_id: int, user_id: int) -> int:
    """Delete a stop and its activities; returns how many activities went with it."""
    stop = await get_owned_stop(db, stop_id, user_id, "delete")

    result = await db.execute(delete(Activity).where(Activity.stop_id == stop_id))
    await db.delete(stop)
    await db.commit()

    logger.info(f"Stop {stop_id} deleted with {result.rowcount} activities by user {user_id}")
    return result.rowcount


async def get_stops_by_category(
    db: AsyncSession,
    category: StopCategory,
    user_id: int,
    trip_id: Optional[int] = None,
) -> List[Stop]:
    query = (
        select(Stop)
        .join(Trip, Stop.trip_id == Trip.id)
        .where(
            Stop.category == category,
            or_(Trip.user_id == user_id, Trip.visibility == Visibility.public),
        )
    )
    if trip_id is not None:
        query = query.where(Stop.trip_id == trip_id)

    result = await db.execute(query.order_by(Stop.start_date.asc()))
    return result.scalars().all()
