"""Coach sign-in: email/password check, JWT pairs, refresh-token rotation.

Refresh tokens are tracked by their ``jti`` claim so sign-out and rotation can
revoke them server side; access tokens are stateless.
"""
from datetime import timedelta

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from coachbook.core.config import settings
from coachbook.core.exceptions import AuthFailed
from coachbook.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)
from coachbook.models.coach import Coach
from coachbook.models.refresh_token import RefreshToken, utc_naive_now
from coachbook.models.user import User, UserPublic

# (user, access token, refresh token, access lifetime in seconds)
IssuedTokens = tuple[User, str, str, int]

INVALID_REFRESH = "Invalid or expired refresh token"


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    statement = select(User).where(func.lower(User.email) == email.strip().lower())
    return (await session.execute(statement)).scalar_one_or_none()


def user_to_public(user: User) -> UserPublic:
    return UserPublic(id=user.id, email=user.email, full_name=user.full_name)


async def _issue(session: AsyncSession, user: User) -> IssuedTokens:
    refresh = create_refresh_token(user.id)
    _, jti = decode_refresh_token(refresh)
    session.add(
        RefreshToken(
            user_id=user.id,
            jti=jti,
            expires_at=utc_naive_now() + timedelta(days=settings.refresh_token_expire_days),
        )
    )
    await session.flush()
    return user, create_access_token(user.id), refresh, settings.access_token_expire_minutes * 60


async def login_user(
    session: AsyncSession, email: str, password: str, coach: Coach | None = None
) -> IssuedTokens:
    """Sign in with email and password.

    When ``coach`` is given (signing in from a coach page), the account must
    own that coach; any other account is rejected even with a valid password.
    """
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthFailed("Invalid email or password")
    if coach is not None and coach.user_id != user.id:
        raise AuthFailed("This account is not authorized for this coach link.")
    return await _issue(session, user)


async def revoke_refresh_token(session: AsyncSession, jti: str) -> None:
    await session.execute(
        update(RefreshToken).where(RefreshToken.jti == jti).values(revoked=True)
    )


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> IssuedTokens:
    """Rotate a refresh token: the presented one is revoked and a new pair issued."""
    user_id, jti = decode_refresh_token(refresh_token)
    if user_id is None:
        raise AuthFailed(INVALID_REFRESH)
    active = select(RefreshToken).where(
        RefreshToken.jti == jti,
        RefreshToken.revoked.is_(False),
        RefreshToken.expires_at > utc_naive_now(),
    )
    stored = (await session.execute(active)).scalar_one_or_none()
    user = await session.get(User, user_id) if stored is not None else None
    if user is None:
        raise AuthFailed(INVALID_REFRESH)
    stored.revoked = True
    session.add(stored)
    return await _issue(session, user)
