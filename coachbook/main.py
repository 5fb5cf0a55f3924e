import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coachbook.api.errors import ALLOWED_HEADERS, ALLOWED_METHODS, register_exception_handlers
from coachbook.api.routes import appointments, auth, coaches, slots
from coachbook.core.config import ENV_FILE, settings
from coachbook.scheduling.time_normalizer import DISPLAY_OFFSET, DISPLAY_TZ_LABEL

JSON_LOG_FORMAT = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'


def configure_logging() -> None:
    """Verbose plain logs in development, one JSON object per line in production."""
    if settings.is_production:
        logging.basicConfig(level=logging.INFO, format=JSON_LOG_FORMAT)
    else:
        logging.basicConfig(level=logging.DEBUG)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Settings from %s (exists: %s), env=%s", ENV_FILE, ENV_FILE.exists(), settings.env)
    logger.info(
        "All times shown in %s (UTC%+d, no daylight saving)",
        DISPLAY_TZ_LABEL,
        int(DISPLAY_OFFSET.total_seconds() // 3600),
    )
    yield


app = FastAPI(
    title="Coachbook API",
    description="Public coach availability calendars and the coach's own schedule dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=ALLOWED_METHODS,
    allow_headers=ALLOWED_HEADERS,
)
register_exception_handlers(app)

for router in (auth.router, coaches.router, slots.router, appointments.router):
    app.include_router(router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
