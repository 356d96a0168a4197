from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from fastapi import HTTPException, status
from globetrotter.core.logger import logger
from globetrotter.models.budget.budget_model import Budget
from globetrotter.schemas.budget.budget import BudgetUpsert
from globetrotter.services.trips.trip_service import get_owned_trip, get_visible_trip


async def create_or_update_budget(db: AsyncSession, data: BudgetUpsert, user_id: int) -> Budget:
    """One budget per trip: the first call creates it, later calls overwrite the parts."""
    await get_owned_trip(db, data.trip_id, user_id, "budget")

    result = await db.execute(select(Budget).where(Budget.trip_id == data.trip_id))
    budget = result.scalar_one_or_none()

    if budget is None:
        budget = Budget(trip_id=data.trip_id, user_id=user_id)
        db.add(budget)

    budget.transport = data.transport
    budget.stay = data.stay
    budget.activities = data.activities
    budget.meals = data.meals
    if data.currency:
        budget.currency = data.currency
    if "start_time" in data.model_fields_set:
        budget.start_time = data.start_time or None
    if "end_time" in data.model_fields_set:
        budget.end_time = data.end_time or None
    budget.recalculate_total()

    await db.commit()
    await db.refresh(budget)

    logger.info(f"Budget for trip {data.trip_id} saved with total {budget.total}")
    return budget


async def get_budget_for_trip(db: AsyncSession, trip_id: int, user_id: int) -> Budget:
    await get_visible_trip(db, trip_id, user_id)

    result = await db.execute(select(Budget).where(Budget.trip_id == trip_id))
    budget = result.scalar_one_or_none()
    if budget is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return budget
