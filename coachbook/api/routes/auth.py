import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.api.deps import get_current_user, get_storage, refresh_header
from coachbook.api.schemas.auth import LoginRequest, LogoutOut, RefreshRequest, TokenPair
from coachbook.core.db import get_session
from coachbook.core.exceptions import AuthFailed
from coachbook.core.security import decode_refresh_token
from coachbook.models.user import User, UserPublic
from coachbook.scheduling.storage import ScheduleStorage
from coachbook.services.auth_service import (
    login_user,
    refresh_tokens,
    revoke_refresh_token,
    user_to_public,
)
from coachbook.services.coach_service import get_coach_by_slug

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _presented_refresh_token(header: str | None, body: RefreshRequest | None) -> str | None:
    # The header wins when a client sends both
    return header or (body.refresh_token if body else None)


@router.post("/login", response_model=TokenPair)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
    storage: ScheduleStorage = Depends(get_storage),
) -> TokenPair:
    """Email/password sign-in. With ``coach_slug`` the account must own that coach page."""
    coach = await get_coach_by_slug(storage, body.coach_slug) if body.coach_slug else None
    user, *tokens = await login_user(session, body.email, body.password, coach)
    logger.info("User %s signed in%s", user.id, f" for coach {coach.slug}" if coach else "")
    return TokenPair.issued(*tokens)


@router.post("/refresh", response_model=TokenPair)
async def refresh(
    body: RefreshRequest | None = None,
    session: AsyncSession = Depends(get_session),
    header_token: str | None = Depends(refresh_header),
) -> TokenPair:
    token = _presented_refresh_token(header_token, body)
    if not token:
        raise AuthFailed("Refresh token required (X-Refresh-Token header or refresh_token in body)")
    _, *tokens = await refresh_tokens(session, token)
    return TokenPair.issued(*tokens)


@router.post("/logout", response_model=LogoutOut)
async def logout(
    body: RefreshRequest | None = None,
    session: AsyncSession = Depends(get_session),
    header_token: str | None = Depends(refresh_header),
) -> LogoutOut:
    """Revoke the presented refresh token. Signing out twice is not an error."""
    token = _presented_refresh_token(header_token, body)
    jti = decode_refresh_token(token)[1] if token else None
    if jti:
        await revoke_refresh_token(session, jti)
    return LogoutOut()


@router.get("/me", response_model=UserPublic)
async def me(current_user: User = Depends(get_current_user)) -> UserPublic:
    return user_to_public(current_user)
