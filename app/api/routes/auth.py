# app/api/routes/auth.py

from typing import List
from fastapi import APIRouter, Depends, Request, Query, status
from fastapi_users import FastAPIUsers
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from models.registered_user import RegisteredUser
from schemas.user_schema import (
    UserRead,
    UserCreate,
    UserUpdate,
    PlayerSummary,
    ProfileRead,
    ProfileUpdate,
    RegisterResponse,
)
from services.user_manager import get_user_manager, UserManager
from services.profile_service import ProfileService
from infrastructure.auth_config import auth_backend, get_jwt_strategy
from infrastructure.postgres_connection import get_db_session


fastapi_users = FastAPIUsers[RegisteredUser, int](get_user_manager, [auth_backend])

current_active_user = fastapi_users.current_user(active=True)

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])
auth_router.include_router(fastapi_users.get_auth_router(auth_backend))

users_router = APIRouter(prefix="/users", tags=["Users"])


@auth_router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    payload: UserCreate,
    user_manager: UserManager = Depends(get_user_manager),
):
    """Create an account and log it in straight away"""
    user = await user_manager.create(payload, safe=True, request=request)
    return RegisterResponse(
        user=UserRead.model_validate(user),
        access_token=await get_jwt_strategy().write_token(user),
    )


@users_router.get("/me/profile", response_model=ProfileRead)
async def read_own_profile(
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    return await ProfileService.get_profile(session, current_user.id)


@users_router.patch("/me/profile", response_model=ProfileRead)
async def update_own_profile(
    changes: ProfileUpdate,
    current_user: RegisteredUser = Depends(current_active_user),
    session: AsyncSession = Depends(get_db_session),
):
    """
    Change any of **name**, **battle_bonus**, **level_reward**, **rating**.
    At least one of them must be sent.
    """
    return await ProfileService.update_profile(session, current_user.id, **changes.model_dump())


@users_router.get("/leaderboard", response_model=List[PlayerSummary])
async def leaderboard(
    n: int = Query(10, ge=1, le=100, description="How many players to return"),
    session: AsyncSession = Depends(get_db_session),
):
    """Highest-rated active players"""
    result = await session.execute(
        select(RegisteredUser)
        .where(RegisteredUser.is_active == True)
        .order_by(RegisteredUser.rating.desc(), RegisteredUser.id)
        .limit(n)
    )
    return result.scalars().all()


# Registered last so /users/{id} does not shadow the routes above
users_router.include_router(fastapi_users.get_users_router(UserRead, UserUpdate))
