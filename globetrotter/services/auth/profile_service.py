from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update, delete
from starlette.datastructures import UploadFile
from fastapi import HTTPException, status
from typing import Optional
from globetrotter.models.user.user import User
from globetrotter.models.trips.trip_model import Trip
from globetrotter.models.trips.stop_model import Stop
from globetrotter.models.itinerary.activity import Activity
from globetrotter.models.budget.budget_model import Budget
from globetrotter.schemas.user.user import ProfileUpdate
from globetrotter.core.cache import RedisCache, trip_key, user_trips_pattern
from globetrotter.core.logger import logger
from globetrotter.utils.forms import read_upload
from globetrotter.utils.image_cdn import ImageKitClient, ImageCDNError, build_file_name


class ProfileService:
    @staticmethod
    async def get_user_by_id(user_id: int, db: AsyncSession) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return user

    @staticmethod
    async def update_profile(
        user_id: int,
        update_data: ProfileUpdate,
        db: AsyncSession,
        image_cdn: ImageKitClient,
        picture: Optional[UploadFile] = None,
    ) -> User:
        user = await ProfileService.get_user_by_id(user_id, db)

        # Blank values leave the stored field untouched
        update_fields = {k: v for k, v in update_data.model_dump(exclude_unset=True).items() if v}

        replaced_picture = None
        if picture is not None:
            content = await read_upload(picture)
            try:
                update_fields["profile_picture"] = await image_cdn.upload(
                    content, build_file_name(picture.filename), "/profiles/"
                )
            except ImageCDNError as e:
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
            replaced_picture = user.profile_picture

        if "preferences" in update_fields:
            update_fields["preferences"] = update_data.preferences.model_dump(mode="json")

        for key, value in update_fields.items():
            setattr(user, key, value)

        await db.commit()
        await db.refresh(user)

        # Old file goes only once the new URL is stored
        if replaced_picture and replaced_picture != user.profile_picture:
            await image_cdn.try_delete(replaced_picture)

        logger.info(f"Profile updated for user {user_id}")
        return user

    @staticmethod
    async def delete_profile_picture(user_id: int, db: AsyncSession, image_cdn: ImageKitClient) -> dict:
        user = await ProfileService.get_user_by_id(user_id, db)
        image_deleted = await image_cdn.try_delete(user.profile_picture)

        user.profile_picture = None
        await db.commit()
        return {"message": "Profile picture deleted", "image_deleted": image_deleted}

    @staticmethod
    async def delete_picture_by_url(url: Optional[str], image_cdn: ImageKitClient) -> dict:
        if not url:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="url is required")
        try:
            result = await image_cdn.delete_by_url(url)
        except ImageCDNError as e:
            logger.error(f"Delete profile picture by URL failed: {e}")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Profile picture delete by URL failed")
        return {"message": "Profile picture deleted", **result}

    @staticmethod
    async def delete_account(
        user_id: int,
        db: AsyncSession,
        image_cdn: ImageKitClient,
        cache: Optional[RedisCache] = None,
    ) -> dict:
        """
        Remove the user row but keep everything they created.

        Trips, stops, activities and budgets owned by the user stay in place
        with ``user_id`` cleared, so public trips remain visible to the
        community as anonymous.
        """
        user = await ProfileService.get_user_by_id(user_id, db)
        image_deleted = await image_cdn.try_delete(user.profile_picture)

        trips = await db.execute(update(Trip).where(Trip.user_id == user_id).values(user_id=None))
        stops = await db.execute(update(Stop).where(Stop.user_id == user_id).values(user_id=None))
        activities = await db.execute(update(Activity).where(Activity.user_id == user_id).values(user_id=None))
        budgets = await db.execute(update(Budget).where(Budget.user_id == user_id).values(user_id=None))

        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()

        if cache is not None:
            await cache.invalidate([user_trips_pattern(user_id), trip_key("*")])

        details = {
            "trips_preserved": trips.rowcount,
            "stops_updated": stops.rowcount,
            "activities_updated": activities.rowcount,
            "budgets_updated": budgets.rowcount,
            "profile_picture_deleted": image_deleted,
        }
        logger.info(f"Account {user_id} deleted; cleanup results: {details}")
        return {"message": "Account deleted successfully", "details": details}
