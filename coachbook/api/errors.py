import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from coachbook.core.config import settings
from coachbook.core.exceptions import MutationFailed, SchedulingError

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Refresh-Token"]


def cors_error_headers(origin: str | None) -> dict[str, str]:
    """CORS headers for responses built by exception handlers.

    Those responses bypass CORSMiddleware, and without the headers the browser
    hides the error body from the frontend.
    """
    allowed = settings.cors_origins_list
    headers = {
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
        "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
    }
    if allowed:
        headers["Access-Control-Allow-Origin"] = origin if origin in allowed else allowed[0]
    return headers


def _error_response(request: Request, status_code: int, content: dict) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=cors_error_headers(request.headers.get("origin")),
    )


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(
            "%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail
        )
    content = {"detail": exc.detail, "error": type(exc).__name__}
    if isinstance(exc, MutationFailed):
        content["written"] = exc.written
    return _error_response(request, exc.status_code, content)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if isinstance(exc, HTTPException):
        return _error_response(request, exc.status_code, {"detail": exc.detail})
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(request, 500, {"detail": f"{type(exc).__name__}: {exc}"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SchedulingError, scheduling_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
