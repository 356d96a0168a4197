from datetime import date
from math import ceil
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, func
from starlette.datastructures import UploadFile
from fastapi import HTTPException, status
from typing import Iterable, List, Optional
from globetrotter.core.logger import logger
from globetrotter.core.cache import RedisCache, trip_key, user_trips_key, user_trips_pattern
from globetrotter.models.common import Visibility
from globetrotter.models.trips.trip_model import Trip
from globetrotter.models.trips.stop_model import Stop
from globetrotter.models.itinerary.activity import Activity
from globetrotter.models.budget.budget_model import Budget
from globetrotter.models.user.user import User
from globetrotter.schemas.trip.trip_schema import TripCreate, TripResponse, TripUpdate
from globetrotter.utils.forms import read_upload
from globetrotter.utils.image_cdn import ImageKitClient, ImageCDNError, build_file_name
from globetrotter.utils.trip_status import TripStatus


def sections_budget(sections: Iterable[dict]) -> float:
    return float(sum(float(s.get("budget") or 0) for s in sections))


def status_filter(trip_status: TripStatus, today: Optional[date] = None):
    """SQL condition matching trips whose derived status equals ``trip_status``."""
    today = today or date.today()
    if trip_status == TripStatus.upcoming:
        return Trip.start_date > today
    if trip_status == TripStatus.completed:
        return Trip.end_date < today
    return (Trip.start_date <= today) & (Trip.end_date >= today)


async def get_owned_trip(db: AsyncSession, trip_id: int, user_id: int, action: str = "modify") -> Trip:
    """Load a trip the caller owns: 404 when it does not exist, 403 when it is someone else's."""
    trip = await db.get(Trip, trip_id)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    if trip.user_id != user_id:
        logger.warning(f"User {user_id} denied {action} on trip {trip_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Access denied to {action} this trip")
    return trip


async def get_visible_trip(db: AsyncSession, trip_id: int, user_id: Optional[int]) -> Trip:
    """Load a trip the caller owns or that is public; anything else reads as missing."""
    trip = await db.get(Trip, trip_id)
    if trip is None or (trip.user_id != user_id and trip.visibility != Visibility.public):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return trip


class TripService:
    def __init__(self, cache: RedisCache, image_cdn: Optional[ImageKitClient] = None):
        self.cache = cache
        self.image_cdn = image_cdn

    async def _invalidate_trip_caches(self, trip_id: int, user_id: Optional[int] = None):
        patterns = [trip_key(trip_id)]
        if user_id:
            patterns.append(user_trips_pattern(user_id))
        await self.cache.invalidate(patterns)

    async def _upload_cover(self, upload: UploadFile) -> str:
        content = await read_upload(upload)
        try:
            return await self.image_cdn.upload(content, build_file_name(upload.filename), "/trips/")
        except ImageCDNError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    async def create_trip(
        self,
        db: AsyncSession,
        trip_data: TripCreate,
        user_id: int,
        cover_file: Optional[UploadFile] = None,
    ) -> TripResponse:
        values = trip_data.model_dump(mode="json", exclude={"start_date", "end_date", "visibility"})
        if cover_file is not None:
            values["cover_photo"] = await self._upload_cover(cover_file)

        new_trip = Trip(
            **values,
            start_date=trip_data.start_date,
            end_date=trip_data.end_date,
            visibility=trip_data.visibility,
            user_id=user_id,
        )
        new_trip.planned_budget = trip_data.planned_budget or 0
        new_trip.budget = trip_data.budget or 0
        new_trip.computed_budget = sections_budget(new_trip.sections)

        db.add(new_trip)
        await db.commit()
        await db.refresh(new_trip)

        await self._invalidate_trip_caches(new_trip.id, user_id)

        logger.info(f"Trip {new_trip.id} created by user {user_id}")
        return TripResponse.model_validate(new_trip)

    async def get_user_trips(self, db: AsyncSession, user_id: int) -> List[TripResponse]:
        cache_key = user_trips_key(user_id)
        cached_trips = await self.cache.get(cache_key)

        if cached_trips is not None:
            logger.info(f"Retrieved {len(cached_trips)} trips for user {user_id} from cache")
            return [TripResponse.model_validate(trip) for trip in cached_trips]

        result = await db.execute(
            select(Trip)
            .where(Trip.user_id == user_id)
            .order_by(Trip.start_date.asc(), Trip.id.asc())
        )
        trips = result.scalars().all()

        await self.cache.set(cache_key, [trip.to_dict() for trip in trips])

        logger.info(f"Retrieved {len(trips)} trips for user {user_id} from database")
        return [TripResponse.model_validate(trip) for trip in trips]

    async def get_trip(self, db: AsyncSession, trip_id: int, user_id: Optional[int]) -> TripResponse:
        cache_key = trip_key(trip_id)
        cached_trip = await self.cache.get(cache_key)

        if cached_trip:
            trip = TripResponse.model_validate(cached_trip)
            if trip.user_id != user_id and trip.visibility != Visibility.public:
                logger.warning(f"Unauthorized access attempt: trip {trip_id} for user {user_id}")
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
            logger.info(f"Trip {trip_id} retrieved from cache")
            return trip

        trip = await get_visible_trip(db, trip_id, user_id)

        await self.cache.set(cache_key, trip.to_dict())

        logger.info(f"Trip {trip_id} retrieved from database")
        return TripResponse.model_validate(trip)

    async def get_public_trip(self, db: AsyncSession, trip_id: int) -> TripResponse:
        trip = await db.get(Trip, trip_id)
        if trip is None or trip.visibility != Visibility.public:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
        return TripResponse.model_validate(trip)

    async def get_public_trips(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        trip_status: Optional[TripStatus] = None,
    ) -> dict:
        conditions = [Trip.visibility == Visibility.public]
        if trip_status is not None:
            conditions.append(status_filter(trip_status))

        total = await db.scalar(select(func.count(Trip.id)).where(*conditions))

        result = await db.execute(
            select(Trip, User.name)
            .outerjoin(User, Trip.user_id == User.id)
            .where(*conditions)
            .order_by(Trip.created_at.desc(), Trip.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        trips = []
        for trip, owner_name in result.all():
            item = TripResponse.model_validate(trip).model_dump()
            item["is_anonymous"] = trip.user_id is None
            item["user_name"] = owner_name if trip.user_id is not None else "Anonymous User"
            trips.append(item)

        total_pages = ceil(total / limit) if total else 0
        return {
            "trips": trips,
            "pagination": {
                "current_page": page,
                "total_pages": total_pages,
                "total": total,
                "has_next_page": page < total_pages,
                "has_prev_page": page > 1,
            },
        }

    async def update_trip(self, db: AsyncSession, trip_id: int, trip_data: TripUpdate, user_id: int) -> TripResponse:
        trip = await get_owned_trip(db, trip_id, user_id, "modify")

        update_data = trip_data.model_dump(exclude_unset=True)

        # Partial updates are checked against the stored values they merge with
        start = update_data.get("start_date") or trip.start_date
        end = update_data.get("end_date") or trip.end_date
        if end < start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="End date must be after or equal to start date"
            )

        if "sections" in update_data:
            update_data["sections"] = [
                s.model_dump(mode="json") for s in (trip_data.sections or [])
            ]
            update_data["computed_budget"] = sections_budget(update_data["sections"])
        for field in ("planned_budget", "budget", "participants", "name", "start_date", "end_date", "visibility"):
            if field in update_data and update_data[field] is None:
                update_data.pop(field)
        if "suggestions" in update_data and update_data["suggestions"] is None:
            update_data["suggestions"] = []

        for key, value in update_data.items():
            setattr(trip, key, value)

        await db.commit()
        await db.refresh(trip)

        await self._invalidate_trip_caches(trip_id, user_id)

        logger.info(f"Trip {trip_id} updated by user {user_id}")
        return TripResponse.model_validate(trip)

    async def delete_trip(self, db: AsyncSession, trip_id: int, user_id: int) -> dict:
        trip = await get_owned_trip(db, trip_id, user_id, "delete")
        cover_photo = trip.cover_photo

        # Children go in the same transaction as the trip
        stop_ids = select(Stop.id).where(Stop.trip_id == trip_id)
        await db.execute(delete(Activity).where(Activity.stop_id.in_(stop_ids)))
        await db.execute(delete(Stop).where(Stop.trip_id == trip_id))
        await db.execute(delete(Budget).where(Budget.trip_id == trip_id))
        await db.delete(trip)
        await db.commit()

        await self._invalidate_trip_caches(trip_id, user_id)

        image_deleted = False
        if self.image_cdn is not None:
            image_deleted = await self.image_cdn.try_delete(cover_photo)

        logger.info(f"Trip {trip_id} deleted by user {user_id}")
        return {"message": "Trip deleted", "image_deleted": image_deleted}

    async def delete_image(self, url: Optional[str]) -> dict:
        if not url:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="url is required")
        try:
            result = await self.image_cdn.delete_by_url(url)
        except ImageCDNError as e:
            logger.error(f"Delete image by URL failed: {e}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Image delete by URL failed")
        return {"message": "Image deleted", **result}

    async def get_budget_stats(self, db: AsyncSession, user_id: int) -> dict:
        result = await db.execute(
            select(
                func.count(Trip.id),
                func.sum(Trip.planned_budget),
                func.avg(Trip.planned_budget),
                func.min(Trip.planned_budget),
                func.max(Trip.planned_budget),
            ).where(Trip.user_id == user_id, Trip.planned_budget > 0)
        )
        total_trips, total, avg, low, high = result.one()
        return {
            "total_trips": total_trips or 0,
            "total_budget": float(total or 0),
            "avg_budget": float(avg or 0),
            "min_budget": float(low or 0),
            "max_budget": float(high or 0),
        }

    async def get_trips_by_budget(
        self,
        db: AsyncSession,
        user_id: int,
        min_budget: Optional[float] = None,
        max_budget: Optional[float] = None,
    ) -> List[TripResponse]:
        query = select(Trip).where(Trip.user_id == user_id)
        if min_budget is not None:
            query = query.where(Trip.planned_budget >= min_budget)
        if max_budget is not None:
            query = query.where(Trip.planned_budget <= max_budget)

        result = await db.execute(query.order_by(Trip.start_date.asc()))
        return [TripResponse.model_validate(trip) for trip in result.scalars().all()]

    async def get_trip_with_stops(
        self,
        db: AsyncSession,
        trip_id: int,
        user_id: Optional[int] = None,
        public_only: bool = False,
    ) -> dict:
        if public_only:
            trip = await self.get_public_trip(db, trip_id)
        else:
            trip = TripResponse.model_validate(await get_visible_trip(db, trip_id, user_id))

        result = await db.execute(
            select(Stop)
            .where(Stop.trip_id == trip_id)
            .order_by(Stop.start_date.asc(), Stop.start_time.asc())
        )
        return {"trip": trip, "stops": [stop.to_dict() for stop in result.scalars().all()]}
