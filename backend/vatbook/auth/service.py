from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vatbook.auth.models import RefreshToken, User
from vatbook.auth.schemas import TokenResponse, UserCreate
from vatbook.auth.utils import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from vatbook.config import Settings
from vatbook.core.exceptions import ConflictError, ValidationError


async def register_user(
    db: AsyncSession,
    user_data: UserCreate,
    settings: Settings,
) -> User:
    result = await db.execute(select(User).where(User.username == user_data.username))
    if result.scalar_one_or_none() is not None:
        raise ConflictError(f"A user with username {user_data.username} already exists.")

    user = User(
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        company_name=user_data.company_name,
        vat_number=user_data.vat_number,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def _issue_tokens(db: AsyncSession, user: User, settings: Settings) -> TokenResponse:
    access_token = create_access_token(user.id, settings)
    refresh_token = create_refresh_token(user.id, settings)

    db.add(
        RefreshToken(
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            expires_at=datetime.now(timezone.utc)
            + timedelta(days=settings.refresh_token_expire_days),
        )
    )
    await db.commit()
    return TokenResponse(access_token=access_token, refresh_token=refresh_token)


async def authenticate_user(
    db: AsyncSession,
    username: str,
    password: str,
    settings: Settings,
) -> TokenResponse:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.hashed_password):
        raise ValidationError("Invalid username or password.")

    if not user.is_active:
        raise ValidationError("Account is deactivated.")

    return await _issue_tokens(db, user, settings)


async def refresh_tokens(
    db: AsyncSession,
    refresh_token: str,
    settings: Settings,
) -> TokenResponse:
    token_data = decode_token(refresh_token, settings)
    if token_data is None or token_data.type != "refresh":
        raise ValidationError("Invalid or expired refresh token.")

    result = await db.execute(
        select(RefreshToken).where(
            RefreshToken.token_hash == hash_token(refresh_token),
            RefreshToken.revoked == False,  # noqa: E712
        )
    )
    stored_token = result.scalar_one_or_none()
    if stored_token is None:
        raise ValidationError("Refresh token not found or already revoked.")

    expires_at = stored_token.expires_at
    if expires_at.tzinfo is None:
        # SQLite drops the offset on the way back
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at < datetime.now(timezone.utc):
        raise ValidationError("Refresh token has expired.")

    stored_token.revoked = True

    result = await db.execute(select(User).where(User.id == token_data.sub))
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise ValidationError("User not found or inactive.")

    return await _issue_tokens(db, user, settings)


async def revoke_refresh_token(db: AsyncSession, refresh_token: str) -> None:
    result = await db.execute(
        select(RefreshToken).where(RefreshToken.token_hash == hash_token(refresh_token))
    )
    stored_token = result.scalar_one_or_none()
    if stored_token:
        stored_token.revoked = True
        await db.commit()
