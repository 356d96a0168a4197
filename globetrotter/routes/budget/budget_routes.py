from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from globetrotter.core.database import get_db
from globetrotter.dependencies.auth import get_current_user
from globetrotter.models.user.user import User
from globetrotter.schemas.budget.budget import BudgetUpsert, BudgetResponse
from globetrotter.services.budget import budget_service

router = APIRouter(prefix="/budgets", tags=["Budgets"])


@router.post("/", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_or_update_budget(
    data: BudgetUpsert,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await budget_service.create_or_update_budget(db, data, current_user.id)


@router.get("/trip/{trip_id}", response_model=BudgetResponse)
async def get_budget_for_trip(
    trip_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return await budget_service.get_budget_for_trip(db, trip_id, current_user.id)
