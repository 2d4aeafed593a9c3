"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from backend.routers import get_api_router
from backend.services.calendar import get_calendar_client
from backend.utils.config import get_settings
from calendar_service.errors import CalendarError, ValidationError

LOGGER = logging.getLogger(__name__)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the calendar adapter before serving so bad settings abort startup."""

    build_client = app.dependency_overrides.get(get_calendar_client, get_calendar_client)
    build_client()
    yield


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(get_api_router())


@app.exception_handler(ValidationError)
def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    """Report incomplete client input as a 400."""

    LOGGER.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc)},
    )


@app.exception_handler(CalendarError)
def handle_calendar_error(request: Request, exc: CalendarError) -> JSONResponse:
    """Report provider and configuration failures as a 500."""

    LOGGER.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


@app.get("/health", response_class=PlainTextResponse)
def health_check() -> str:
    """Return service liveness."""

    return "ok"


@app.get("/version")
def version() -> dict[str, str]:
    """Return application version metadata."""

    return {"version": settings.app_version}


def run() -> None:
    """Serve the application with uvicorn on the configured port."""

    LOGGER.info("Backend listening on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
