"""FastAPI server for Historian timeline and learning records"""

from __future__ import annotations

import os
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from historian.api.middleware.route_gate import RouteGateMiddleware
from historian.api.routes.access import router as access_router
from historian.api.routes.enrichment import router as enrichment_router
from historian.api.routes.health import router as health_router
from historian.api.routes.learning import router as learning_router
from historian.api.routes.timeline import router as timeline_router
from historian.config import ACCESS_PAGE_PATH, APP_VERSION
from historian.errors import HistorianError, NotFound, ValidationError
from historian.infrastructure import settings
from historian.infrastructure.database import init_database
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter
from historian.utils.error_sanitizer import sanitize_error_message

logger = get_logger(__name__)

ALLOWED_ORIGINS = [
    origin for origin in os.getenv("HISTORIAN_ALLOWED_ORIGINS", "").split(",") if origin
]

# Allow localhost in development only
if settings.HISTORIAN_ENV == "development":
    ALLOWED_ORIGINS.extend(
        [
            "http://localhost:3000",
            "http://localhost:8000",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:8000",
        ]
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Initialize database schema (idempotent - safe to run on every startup)
    try:
        logger.info("Initializing database schema...")
        init_database()
    except sqlite3.OperationalError as e:
        logger.critical("Database schema error: %s", e)
        raise RuntimeError(f"Database initialization failed: {e}") from e

    if not settings.HISTORIAN_ACCESS_KEY:
        logger.warning(
            "HISTORIAN_ACCESS_KEY not set; every request will be redirected to %s",
            ACCESS_PAGE_PATH,
        )
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="Historian API", version=APP_VERSION, lifespan=lifespan)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        counter("api.domain_validation_errors")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": sanitize_error_message(str(exc), 400)},
        )

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        logger.info("Not found on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": sanitize_error_message(str(exc), 404)},
        )

    @app.exception_handler(HistorianError)
    async def historian_error_handler(request: Request, exc: HistorianError) -> JSONResponse:
        logger.error("Unhandled domain error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": sanitize_error_message(str(exc), 500)},
        )

    # Custom validation error handler to prevent information leakage
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        counter("api.validation_errors")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "detail": "Invalid request format. Please check your request and try again.",
                "error_count": len(exc.errors()),
                # Only expose field names, not validation logic
                "invalid_fields": [str(err["loc"][-1]) for err in exc.errors()],
            },
        )

    app.add_middleware(RouteGateMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    app.include_router(health_router)
    app.include_router(access_router)
    app.include_router(timeline_router)
    app.include_router(learning_router)
    app.include_router(enrichment_router)

    return app


app = create_app()


def main() -> None:
    """Run the API with uvicorn (console script ``historian-api``)."""
    import uvicorn

    uvicorn.run(
        "historian.api.app:app",
        host=os.getenv("HISTORIAN_HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
