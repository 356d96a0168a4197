from fastapi import APIRouter, Depends
from globetrotter.dependencies.auth import get_current_user
from globetrotter.models.user.user import User
from globetrotter.schemas.ai.plan import AIPlanRequest, AIPlanResponse, AIGenerateRequest, AIGenerateResponse
from globetrotter.services.ai.planner_service import generate_plan
from globetrotter.services.ai.llm_planner import generate_with_llm

router = APIRouter(prefix="/ai", tags=["AI Planner"])


@router.post("/plan", response_model=AIPlanResponse)
async def plan_itinerary(
    data: AIPlanRequest,
    current_user: User = Depends(get_current_user)
):
    return generate_plan(data)


@router.post("/plan/generate", response_model=AIGenerateResponse)
async def generate_itinerary(
    data: AIGenerateRequest,
    current_user: User = Depends(get_current_user)
):
    return await generate_with_llm(data)
