from collections.abc import AsyncGenerator
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from coachbook.core.config import settings

# libpq-only query params that asyncpg rejects; SSL is passed via connect_args
_LIBPQ_ONLY_PARAMS = ("sslmode", "channel_binding")


def to_driver_url(database_url: str, driver: str) -> str:
    """Point a ``postgresql://`` URL at ``driver`` and drop libpq-only params.

    URLs that already name a driver keep their scheme untouched.
    """
    parsed = urlparse(database_url)
    scheme = parsed.scheme
    if scheme in ("postgres", "postgresql"):
        scheme = f"postgresql+{driver}"
    query = parse_qs(parsed.query, keep_blank_values=True)
    if driver == "asyncpg":
        for name in _LIBPQ_ONLY_PARAMS:
            query.pop(name, None)
    return urlunparse(parsed._replace(scheme=scheme, query=urlencode(query, doseq=True)))


engine = create_async_engine(
    to_driver_url(settings.database_url, "asyncpg"),
    echo=settings.db_echo,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    connect_args={"ssl": True} if settings.database_ssl else {},
)

# expire_on_commit=False: rows handed back to the engine stay readable after commit
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session for the auth routes; commits on success."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
