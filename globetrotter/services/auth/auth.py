from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException, status
from jose import JWTError
from typing import Optional
from globetrotter.models.user.user import User
from globetrotter.schemas.user.user import UserCreate, UserLogin, PasswordReset
from globetrotter.core.security import hash_password, verify_password, create_access_token, decode_access_token
from globetrotter.core.config import settings
from globetrotter.core.logger import logger


def _issue_token(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"token": token, "user": user.to_public()}


def _check_password_length(password: str, label: str = "Password"):
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} must be at least {settings.PASSWORD_MIN_LENGTH} characters"
        )


async def register_user(user_data: UserCreate, db: AsyncSession) -> dict:
    _check_password_length(user_data.password)

    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")

    new_user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        country=user_data.country,
        phone=user_data.phone,
    )

    db.add(new_user)
    try:
        await db.commit()
        await db.refresh(new_user)
    except IntegrityError:
        # Two signups raced past the lookup above
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")

    logger.info(f"User {new_user.id} registered")
    return _issue_token(new_user)


async def login_user(credentials: UserLogin, db: AsyncSession) -> dict:
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _issue_token(user)


def resolve_token(authorization: Optional[str], body_token: Optional[str] = None) -> Optional[str]:
    """Bearer header first, then a ``token`` field from the body."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer "):].strip() or None
    return body_token or None


async def get_me(token: Optional[str], db: AsyncSession) -> User:
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token missing")
    try:
        user_id = int(decode_access_token(token).get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token user")
    return user


def verify_token(token: Optional[str]) -> dict:
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token missing")
    try:
        decode_access_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    return {"valid": True}


async def reset_password(user: User, data: PasswordReset, db: AsyncSession) -> dict:
    if not data.old_password or not data.new_password:
        raise HTTPException(status_code=400, detail="old_password and new_password are required")
    _check_password_length(data.new_password, "New password")

    if not verify_password(data.old_password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid old password")

    user.hashed_password = hash_password(data.new_password)
    await db.commit()
    logger.info(f"Password updated for user {user.id}")
    return {"message": "Password updated successfully"}
