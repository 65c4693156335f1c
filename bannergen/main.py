"""FastAPI application entry point.

Main application setup with middleware, routing, static file serving and
lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from bannergen.api.banners import router as banners_router
from bannergen.api.schemas import ErrorResponse
from bannergen.core.config import Settings, get_settings
from bannergen.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Makes sure the storage directories exist before serving requests.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting banner generator API...")
    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info(
        f"Sessions stored in {settings.output_dir}; "
        f"measurer={settings.measurer_type}, renderer={settings.renderer_type}"
    )

    yield

    # Shutdown
    logger.info("Shutting down banner generator API...")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title="Banner Generator",
        description="Batch SVG banner generation from tabular data",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Store settings in app state
    app.state.settings = settings

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(banners_router)
    logger.info("Registered banners router")

    # Generated images: /temp/<session>/<file>
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/temp", StaticFiles(directory=settings.output_dir), name="temp")

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "service": "banner-generator-api",
            "version": "0.1.0",
        }

    # Exception handlers
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Handle Pydantic validation errors."""
        logger.warning(f"Validation error: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ErrorResponse(
                detail="Validation error",
                error_code="VALIDATION_ERROR",
                extra={"errors": jsonable_errors(exc.errors())},
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                detail="Internal server error",
                error_code="INTERNAL_ERROR",
            ).model_dump(),
        )

    logger.info("FastAPI application created successfully")
    return app


def jsonable_errors(errors) -> list[dict]:
    """Drop values that JSON cannot carry (such as raw upload objects) from validation errors."""
    cleaned = []
    for error in errors:
        cleaned.append({k: v for k, v in error.items() if k in ("type", "loc", "msg")})
    return cleaned


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings)
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "bannergen.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
