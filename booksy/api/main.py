"""
Booksy API

FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from fastapi import Depends, FastAPI
from sqlalchemy import text

from booksy import __version__
from booksy.exceptions import ConfigurationError

from .dependencies import (
    ServiceContainer,
    Settings,
    get_service_container,
    get_settings,
    init_services,
)
from .middleware import (
    LoggingConfig,
    get_cors_config,
    setup_cors,
    setup_exception_handlers,
    setup_logging,
)
from .routes import auth, books
from .schemas import HealthResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifespan
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Creates tables on startup, reports missing signing configuration, and
    releases the connection pool on shutdown.
    """
    services = get_service_container()
    settings = services.settings
    logger.info(f"Starting Booksy in {settings.environment} mode")

    try:
        services.database.create_tables()

        try:
            _ = services.token_service
        except ConfigurationError as e:
            # Token-issuing and protected requests will fail until this is set
            logger.error(f"{e.message}; set JWT_SECRET")

        app.state.services = services
        app.state.settings = settings

        logger.info("Booksy started successfully")

        yield

    finally:
        logger.info("Shutting down Booksy...")
        services.close()
        logger.info("Shutdown complete")


# =============================================================================
# Application Factory
# =============================================================================

def create_app(settings: Settings = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings. If None, loads from environment.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()
    else:
        init_services(settings)

    app = FastAPI(
        title="Booksy",
        description="Used-book marketplace API.",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Middleware (first added = innermost)
    setup_cors(app, config=get_cors_config(settings.environment))
    setup_exception_handlers(app)
    setup_logging(
        app,
        config=LoggingConfig(enabled=True),
        structured=settings.environment not in ("development", "test"),
    )

    app.include_router(auth.router)
    app.include_router(books.router)

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Booksy API",
            "version": __version__,
            "status": "running",
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    def health_check(services: ServiceContainer = Depends(get_service_container)) -> HealthResponse:
        """Report database reachability and signing configuration."""
        components = {}
        overall_healthy = True

        try:
            with services.database.session() as session:
                session.execute(text("SELECT 1"))
            components["database"] = "healthy"
        except Exception as e:
            components["database"] = f"unhealthy: {type(e).__name__}"
            overall_healthy = False

        components["auth"] = "configured" if services.settings.jwt_secret else "not_configured"

        return HealthResponse(
            status="healthy" if overall_healthy else "degraded",
            version=__version__,
            components=components,
        )

    return app


# =============================================================================
# CLI Entry Point
# =============================================================================

def main():
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "booksy.api.main:app",
        host="0.0.0.0",
        port=4000,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


app = create_app()


if __name__ == "__main__":
    main()
