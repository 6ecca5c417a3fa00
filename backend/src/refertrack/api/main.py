"""Main FastAPI application for the refertrack API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from refertrack import __version__
from refertrack.api.users import router as users_router
from refertrack.auth.passwords import PasswordHasher
from refertrack.errors import InternalError, RefertrackError
from refertrack.logging_config import get_logger
from refertrack.referral.service import RegistrationService
from refertrack.settings import settings
from refertrack.storage.db import Database
from refertrack.storage.repo import SqlUserStore, UserStore

logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Turn the first schema error into a short message."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if first.get("type") == "json_invalid" or not field:
        return "Invalid request body"
    return f"Invalid value for '{field}': {first.get('msg', 'invalid')}"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("app_starting", env=settings.env)

    app.state.store.initialize()
    logger.info("store_initialized", store=type(app.state.store).__name__)

    yield

    # Shutdown
    logger.info("app_shutting_down")
    app.state.store.close()


def create_app(
    store: UserStore | None = None,
    hasher: PasswordHasher | None = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store: User store (defaults to the SQL store on settings.database_url)
        hasher: Password hasher (defaults to bcrypt with settings rounds)

    Returns:
        Configured FastAPI app
    """
    # Hide API docs in production
    is_production = settings.env == "production"

    app = FastAPI(
        title="refertrack API",
        description="Referral tracking: signup, referral codes and points",
        version=__version__,
        docs_url=None if is_production else "/api/docs",
        redoc_url=None if is_production else "/api/redoc",
        openapi_url=None if is_production else "/api/openapi.json",
        lifespan=lifespan,
    )

    if store is None:
        store = SqlUserStore(Database(settings.database_url))
    app.state.store = store
    app.state.registration_service = RegistrationService(store, hasher=hasher)

    # Security Headers middleware (must be added before CORS)
    app.add_middleware(SecurityHeadersMiddleware)

    allowed_origins = [
        origin.strip()
        for origin in settings.allowed_origins.split(",")
        if origin.strip()
    ]

    # Block wildcard in production
    if is_production and "*" in allowed_origins:
        logger.error("cors_wildcard_blocked", message="Wildcard CORS not allowed in production")
        allowed_origins = []

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
        max_age=3600,
    )

    @app.exception_handler(RefertrackError)
    async def refertrack_error_handler(request: Request, exc: RefertrackError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.info("request_rejected", path=request.url.path, reason=message)
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("unhandled_error", path=request.url.path, exc_info=exc)
        error = InternalError()
        return JSONResponse(
            status_code=error.status_code,
            content={"error": error.message},
        )

    app.include_router(users_router)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": __version__,
            "env": settings.env,
        }

    return app


# Create app instance
app = create_app()
