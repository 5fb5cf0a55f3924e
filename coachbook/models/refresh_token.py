from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


def utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class RefreshToken(SQLModel, table=True):
    """One issued refresh token; revoked on sign-out or when rotated."""

    __tablename__ = "refresh_tokens"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    jti: str = Field(unique=True, index=True)
    issued_at: datetime = Field(default_factory=utc_naive_now)
    expires_at: datetime = Field(index=True)  # naive UTC
    revoked: bool = False
