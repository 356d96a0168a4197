from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from globetrotter.schemas.user.user import UserCreate, UserLogin, AuthResponse, MeResponse, PasswordReset
from globetrotter.schemas.common import MessageResponse
from globetrotter.services.auth import auth as auth_service
from globetrotter.core.database import get_db
from globetrotter.models.user.user import User
from globetrotter.dependencies.auth import get_current_user
from globetrotter.utils.forms import read_payload

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    return await auth_service.register_user(user, db)


@router.post("/login", response_model=AuthResponse)
async def login_route(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    return await auth_service.login_user(user_data, db)


@router.get("/me", response_model=MeResponse)
async def me(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
):
    token = auth_service.resolve_token(authorization)
    user = await auth_service.get_me(token, db)
    return {"user": user}


@router.post("/verify")
async def verify(
    request: Request,
    authorization: Optional[str] = Header(None)
):
    body, _ = await read_payload(request, file_fields=())
    token = auth_service.resolve_token(authorization, body.get("token"))
    return auth_service.verify_token(token)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    data: PasswordReset,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await auth_service.reset_password(current_user, data, db)
