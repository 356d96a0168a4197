from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from globetrotter.core.database import get_db
from globetrotter.dependencies.auth import get_current_user
from globetrotter.models.user.user import User
from globetrotter.schemas.common import MessageResponse
from globetrotter.schemas.itineraries.activity import ActivityCreate, ActivityUpdate, ActivityResponse
from globetrotter.services.itineraries.activity_service import ActivityService

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.post("/", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    data: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ActivityService.create_activity(db, data, current_user.id)


@router.get("/stop/{stop_id}", response_model=List[ActivityResponse])
async def get_activities_for_stop(
    stop_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ActivityService.get_activities_for_stop(db, stop_id, current_user.id)


@router.put("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: int,
    data: ActivityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ActivityService.update_activity(db, activity_id, data, current_user.id)


@router.delete("/{activity_id}", response_model=MessageResponse)
async def delete_activity(
    activity_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await ActivityService.delete_activity(db, activity_id, current_user.id)
