from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vatbook.auth.models import User
from vatbook.auth.schemas import (
    TokenRefreshRequest,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from vatbook.auth.service import (
    authenticate_user,
    refresh_tokens,
    register_user,
    revoke_refresh_token,
)
from vatbook.auth.utils import hash_password
from vatbook.config import Settings
from vatbook.dependencies import get_current_user, get_db, get_settings

router = APIRouter()


@router.post("/register", status_code=201)
async def register(
    user_data: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    user = await register_user(db, user_data, settings)
    return {"data": UserResponse.model_validate(user)}


@router.post("/login")
async def login(
    credentials: UserLogin,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    tokens = await authenticate_user(db, credentials.username, credentials.password, settings)
    return {"data": tokens}


@router.post("/refresh")
async def refresh(
    body: TokenRefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict:
    tokens = await refresh_tokens(db, body.refresh_token, settings)
    return {"data": tokens}


@router.post("/logout")
async def logout(
    body: TokenRefreshRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(get_current_user)],
) -> dict:
    await revoke_refresh_token(db, body.refresh_token)
    return {"data": {"message": "Logged out successfully"}}


@router.get("/me")
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return {"data": UserResponse.model_validate(current_user)}


@router.put("/me")
async def update_me(
    updates: UserUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    if updates.company_name is not None:
        current_user.company_name = updates.company_name
    if updates.password is not None:
        current_user.hashed_password = hash_password(updates.password)
    await db.commit()
    await db.refresh(current_user)
    return {"data": UserResponse.model_validate(current_user)}
