"""
FastAPI Application Entry Point

Restaurant Ordering API - accounts, menu, orders and contact inbox.

Endpoints:
    - /api/auth/*: Registration, login, current identity
    - /api/menu: Public menu
    - /api/orders: Order placement and status polling
    - /api/contact: Contact form
    - /api/admin/*: Menu, order and inbox management (admin role)
    - /uploads/*: Menu images
    - GET /health: System health check

Run:
    uvicorn restaurant_api.main:create_app --factory --port 5000

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import logging
from datetime import datetime
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Windows-specific event loop policy (psycopg async needs the selector loop)
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from restaurant_api.core.config import Settings, get_settings, setup_logging
from restaurant_api.core.errors import AppError, InternalError
from restaurant_api.database import Database
from restaurant_api.routers import auth, contact, menu, orders
from restaurant_api.schemas import HealthResponse
from restaurant_api.services import Services

logger = logging.getLogger(__name__)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map every failure onto the {success: false, message} envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(p) for p in err.get("loc", ())[1:]) or None,
                "message": err.get("msg"),
            }
            for err in exc.errors()
        ]
        summary = "; ".join(
            f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors
        )
        return _error(400, summary or "Invalid request", errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception(f"Storage error on {request.method} {request.url.path}: {exc}")
        error = InternalError()
        return _error(error.status_code, error.message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all exception handler."""
        logger.exception(f"Unhandled exception: {exc}")
        return _error(500, str(exc) if settings.debug else "Internal server error")


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration (defaults to the cached environment settings)
        database: Storage handle (defaults to one built from settings and
            disposed on shutdown; a handle passed in is left to the caller)
    """
    settings = settings or get_settings()
    setup_logging(settings)

    owns_database = database is None
    database = database or Database.from_settings(settings)
    services = Services.build(database, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application startup and shutdown events.
        """
        # Startup
        logger.info("=" * 60)
        logger.info(f"🚀 Starting {settings.app_name}")
        logger.info(f"   Version: {settings.app_version}")
        logger.info(f"   Environment: {settings.env_mode.value}")
        logger.info(f"   Debug: {settings.debug}")
        logger.info("=" * 60)

        await database.create_all()
        logger.info("✅ Database initialized")
        logger.info(f"✅ Image Store: {services.images.provider_name} ({settings.upload_directory})")
        logger.info("✅ Application ready!")

        yield  # Application runs

        # Shutdown
        logger.info("Shutting down...")
        if owns_database:
            await database.dispose()
        logger.info("✅ Cleanup complete")

    app = FastAPI(
        title=settings.app_name,
        description="Restaurant ordering backend: accounts, menu, orders and contact inbox.",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.database = database
    app.state.services = services

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    app.include_router(auth.router)
    app.include_router(menu.router)
    app.include_router(orders.router)
    app.include_router(contact.router)

    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_directory, check_dir=False),
        name="uploads",
    )

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """API root with navigation links."""
        return {
            "message": f"🍽️ Welcome to {settings.app_name}",
            "version": settings.app_version,
            "documentation": "/docs",
            "health": "/health",
        }

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["Health"],
        summary="System Health Check",
    )
    async def health_check() -> HealthResponse:
        """Verify the database is reachable."""
        db_ok = await database.ping()
        return HealthResponse(
            status="operational" if db_ok else "degraded",
            database="healthy" if db_ok else "unhealthy",
            version=settings.app_version,
            timestamp=datetime.now(),
        )

    return app


def run() -> None:
    """Console entry point: serve with uvicorn using configured host/port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "restaurant_api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development and settings.debug,
    )


if __name__ == "__main__":
    run()
