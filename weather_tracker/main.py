"""
Main FastAPI application for the Weather Tracker API.

This module contains the application factory, the lifespan handler that
owns the database engine and provider HTTP clients, and the exception
handlers that turn every failure into a JSON ``{"error": ...}`` body.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from weather_tracker import __version__
from weather_tracker.config import Settings, get_settings
from weather_tracker.core.exceptions import AuthenticationError, WeatherTrackerError
from weather_tracker.database import Database
from weather_tracker.routers import auth, cities, health, weather
from weather_tracker.services.geocoding import GeocodingService
from weather_tracker.services.nws import NWSService
from weather_tracker.utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI application.

    Creates the database handle and provider clients on startup and
    releases them on shutdown.
    """
    settings: Settings = app.state.settings

    logger.info("=" * 60)
    logger.info("Weather Tracker API - Application starting up")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Database: {settings.SQLALCHEMY_DATABASE_URI.split('://')[0]}")
    logger.info("=" * 60)

    database = Database(settings.SQLALCHEMY_DATABASE_URI, echo=settings.DEBUG)
    database.connect()
    if settings.CREATE_TABLES_ON_STARTUP:
        await database.create_tables()
        logger.info("Database tables created")
    else:
        logger.warning("Remember to run 'alembic upgrade head' to apply database migrations")

    nws_client = NWSService.build_client(
        settings.NWS_BASE_URL, settings.NWS_USER_AGENT, timeout=settings.NWS_TIMEOUT
    )
    geocoding_client = GeocodingService.build_client(
        settings.GEOCODING_BASE_URL,
        settings.GEOCODING_USER_AGENT,
        timeout=settings.GEOCODING_TIMEOUT,
    )

    app.state.db = database
    app.state.weather_service = NWSService(nws_client)
    app.state.geocoding_service = GeocodingService(geocoding_client)

    try:
        yield
    finally:
        logger.info("=" * 60)
        logger.info("Weather Tracker API - Application shutting down")
        logger.info("=" * 60)
        await nws_client.aclose()
        await geocoding_client.aclose()
        await database.disconnect()


async def weather_tracker_error_handler(request: Request, exc: WeatherTrackerError):
    """Render application errors with their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as 400 with field-level details."""
    details = [
        {
            "path": [part for part in error.get("loc", ()) if part != "body"],
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": "Validation error", "details": details}),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP exceptions (404, 405, ...) as ``{"error": detail}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: log the cause, return a safe message."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; defaults to the cached environment settings

    Returns:
        Configured FastAPI instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Weather Tracker API",
        description="Track US cities and fetch National Weather Service forecasts",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    app.add_exception_handler(WeatherTrackerError, weather_tracker_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Set up CORS; credentials are required for the session cookie
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint returning API information."""
        return {
            "message": "Welcome to Weather Tracker API",
            "version": __version__,
            "docs": "/docs",
        }

    app.include_router(health.router)
    app.include_router(auth.router, prefix="/api")
    app.include_router(cities.router, prefix="/api")
    app.include_router(weather.router, prefix="/api")

    return app
