from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from fastapi import HTTPException, status
from typing import List
from globetrotter.core.logger import logger
from globetrotter.models.trips.stop_model import Stop
from globetrotter.models.itinerary.activity import Activity
from globetrotter.schemas.itineraries.activity import ActivityCreate, ActivityUpdate
from globetrotter.services.trips.stop_service import get_owned_stop
from globetrotter.services.trips.trip_service import get_visible_trip

# Columns that cannot be cleared once set
REQUIRED_FIELDS = ("name", "type", "cost", "duration", "priority", "completed", "visibility")


class ActivityService:
    @staticmethod
    async def _get_owned_activity(db: AsyncSession, activity_id: int, user_id: int, action: str) -> Activity:
        activity = await db.get(Activity, activity_id)
        if activity is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
        await get_owned_stop(db, activity.stop_id, user_id, action)
        return activity

    @staticmethod
    async def create_activity(db: AsyncSession, data: ActivityCreate, user_id: int) -> Activity:
        await get_owned_stop(db, data.stop_id, user_id, "add activities to")

        activity = Activity(**data.model_dump(), user_id=user_id)
        db.add(activity)
        await db.commit()
        await db.refresh(activity)

        logger.info(f"Activity {activity.id} created on stop {data.stop_id} by user {user_id}")
        return activity

    @staticmethod
    async def get_activities_for_stop(db: AsyncSession, stop_id: int, user_id: int) -> List[Activity]:
        stop = await db.get(Stop, stop_id)
        if stop is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stop not found")
        await get_visible_trip(db, stop.trip_id, user_id)

        result = await db.execute(
            select(Activity)
            .where(Activity.stop_id == stop_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
        )
        return result.scalars().all()

    @staticmethod
    async def update_activity(db: AsyncSession, activity_id: int, data: ActivityUpdate, user_id: int) -> Activity:
        activity = await ActivityService._get_owned_activity(db, activity_id, user_id, "modify")

        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in REQUIRED_FIELDS:
                continue
            setattr(activity, key, value)

        await db.commit()
        await db.refresh(activity)
        logger.info(f"Activity {activity_id} updated by user {user_id}")
        return activity

    @staticmethod
    async def delete_activity(db: AsyncSession, activity_id: int, user_id: int) -> dict:
        activity = await ActivityService._get_owned_activity(db, activity_id, user_id, "delete")
        await db.delete(activity)
        await db.commit()
        logger.info(f"Activity {activity_id} deleted by user {user_id}")
        return {"message": "Activity deleted"}
