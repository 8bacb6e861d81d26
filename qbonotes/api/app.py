"""FastAPI server for qbonotes transaction notes"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qbonotes.api.dependencies import AppServices, build_services
from qbonotes.api.middleware.rate_limit import RateLimitMiddleware
from qbonotes.api.routes.extract import router as extract_router
from qbonotes.api.routes.health import router as health_router
from qbonotes.api.routes.notes import router as notes_router
from qbonotes.api.routes.reports import router as reports_router
from qbonotes.config import (
    API_HOST,
    API_PORT,
    APP_VERSION,
    LOG_LEVEL,
    RATE_LIMIT_RPH,
    RATE_LIMIT_RPM,
    Settings,
    load_settings,
)
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter, log_event

# Load environment variables from .env file
load_dotenv()

logger = get_logger(__name__)

# Accounting app pages and the browser extension, any id
PRODUCTION_ORIGIN_REGEX = r"https://([a-z0-9-]+\.)*intuit\.com|chrome-extension://[a-z]+"
DEVELOPMENT_ORIGIN_REGEX = r"http://(localhost|127\.0\.0\.1)(:\d+)?"


def _origin_regex(settings: Settings) -> str:
    if settings.env == "development":
        return f"{PRODUCTION_ORIGIN_REGEX}|{DEVELOPMENT_ORIGIN_REGEX}"
    return PRODUCTION_ORIGIN_REGEX


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid fields by name only."""
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    counter("api.validation_errors")

    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        fields.append(".".join(loc) or "body")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": fields},
    )


def create_app(services: AppServices | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        services: Pre-built services (tests); built from settings when omitted
        settings: Configuration; read from the environment when omitted
    """
    if services is None:
        services = build_services(settings or load_settings())
    settings = services.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log_event("api.startup", service="qbonotes", version=APP_VERSION, env=settings.env)
        services.scheduler.init_from_settings(settings)
        try:
            yield
        finally:
            if services.scheduler.is_running:
                services.scheduler.stop()
            log_event("api.shutdown", service="qbonotes")

    app = FastAPI(title="qbonotes API", version=APP_VERSION, lifespan=lifespan)
    app.state.services = services

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=_origin_regex(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=RATE_LIMIT_RPM,
        requests_per_hour=RATE_LIMIT_RPH,
    )

    app.include_router(health_router)
    app.include_router(notes_router)
    app.include_router(extract_router)
    app.include_router(reports_router)
    return app


def main() -> None:
    import uvicorn

    uvicorn.run(
        "qbonotes.api.app:create_app",
        factory=True,
        host=API_HOST,
        port=API_PORT,
        log_level=LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
