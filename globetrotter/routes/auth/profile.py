from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from globetrotter.core.cache import RedisCache, get_cache
from globetrotter.core.database import get_db
from globetrotter.core.errors import parse_model
from globetrotter.dependencies.auth import get_current_user
from globetrotter.models.user.user import User
from globetrotter.schemas.common import ImageUrlRequest
from globetrotter.schemas.user.user import ProfileUpdate, ProfileResponse, AccountDeletionResponse
from globetrotter.services.auth.profile_service import ProfileService
from globetrotter.utils.forms import read_payload
from globetrotter.utils.image_cdn import ImageKitClient, get_image_cdn

router = APIRouter(prefix="/auth", tags=["Profile"])


async def _update_profile(request: Request, current_user: User, db: AsyncSession, image_cdn: ImageKitClient):
    data, picture = await read_payload(
        request, file_fields=("profile_picture", "image"), json_fields=("preferences",)
    )
    update = parse_model(ProfileUpdate, data)
    user = await ProfileService.update_profile(current_user.id, update, db, image_cdn, picture)
    return {"message": "Profile updated successfully", "user": user}


@router.put("/profile", response_model=ProfileResponse)
async def update_my_profile(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    image_cdn: ImageKitClient = Depends(get_image_cdn)
):
    return await _update_profile(request, current_user, db, image_cdn)


@router.post("/profile/picture", response_model=ProfileResponse)
async def upload_profile_picture(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    image_cdn: ImageKitClient = Depends(get_image_cdn)
):
    return await _update_profile(request, current_user, db, image_cdn)


@router.delete("/profile/picture")
async def delete_profile_picture(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    image_cdn: ImageKitClient = Depends(get_image_cdn)
):
    return await ProfileService.delete_profile_picture(current_user.id, db, image_cdn)


@router.post("/profile/picture/delete")
async def delete_profile_picture_by_url(
    data: ImageUrlRequest,
    current_user: User = Depends(get_current_user),
    image_cdn: ImageKitClient = Depends(get_image_cdn)
):
    return await ProfileService.delete_picture_by_url(data.url, image_cdn)


@router.delete("/account", response_model=AccountDeletionResponse)
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    image_cdn: ImageKitClient = Depends(get_image_cdn),
    cache: RedisCache = Depends(get_cache)
):
    return await ProfileService.delete_account(current_user.id, db, image_cdn, cache)
