from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.core.db import async_session_maker, get_session
from coachbook.core.security import decode_access_token
from coachbook.models.coach import Coach
from coachbook.models.user import User
from coachbook.scheduling.storage import ScheduleStorage
from coachbook.scheduling.viewer import Viewer, resolve_viewer
from coachbook.services.coach_service import get_coach_by_slug
from coachbook.services.schedule_service import ScheduleService
from coachbook.services.storage import SqlScheduleStorage

security = HTTPBearer(auto_error=False)


def refresh_header(x_refresh_token: str | None = Header(default=None, alias="X-Refresh-Token")) -> str | None:
    """Extract X-Refresh-Token header for logout/refresh endpoints."""
    return x_refresh_token


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Invalid or expired token")
    user = await session.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")
    return user


async def get_optional_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User | None:
    """Signed-in user, or None for anonymous and invalid tokens (public view)."""
    if not credentials or credentials.scheme.lower() != "bearer":
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None
    return await session.get(User, user_id)


def get_storage() -> ScheduleStorage:
    return SqlScheduleStorage(async_session_maker)


def get_schedule_service(storage: ScheduleStorage = Depends(get_storage)) -> ScheduleService:
    return ScheduleService(storage)


async def get_coach(slug: str, storage: ScheduleStorage = Depends(get_storage)) -> Coach:
    return await get_coach_by_slug(storage, slug)


async def get_viewer(
    coach: Coach = Depends(get_coach),
    user: User | None = Depends(get_optional_user),
) -> Viewer:
    return resolve_viewer(user.id if user else None, coach)
