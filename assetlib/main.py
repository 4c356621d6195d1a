"""
Godot Asset Library API - Main Application Entry Point.

Serves the catalog of add-ons and projects browsed by the Godot editor's
AssetLib tab and Project Manager.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assetlib import __version__
from assetlib.api.v1.router import api_router
from assetlib.config import get_settings
from assetlib.core.exceptions import AssetLibException

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Starting %s", settings.PROJECT_NAME)
    logger.info("Debug mode: %s", settings.DEBUG)
    logger.info("Dev mode (anonymous requests act as %r): %s", settings.DEV_USER_NAME, settings.DEV_MODE)

    from assetlib.db.session import engine, is_using_sqlite_fallback

    if is_using_sqlite_fallback():
        logger.warning("[DEV MODE] Using SQLite fallback database")
        from assetlib.db.base import Base
        # Import all models to register them
        from assetlib.models import Asset, AssetPreview, AssetReview, AssetVersion, User  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Development database ready")
    else:
        logger.info("Database: PostgreSQL")

    # Shared by the repository icon probes
    app.state.http_client = httpx.AsyncClient(
        timeout=settings.ICON_PROBE_TIMEOUT,
        follow_redirects=True,
    )

    yield

    # Shutdown
    await app.state.http_client.aclose()
    logger.info("Shutting down %s", settings.PROJECT_NAME)


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
## Godot Asset Library API

Catalog of add-ons, templates, demos and projects for the Godot engine.

### Features
- **Listing**: Filter by type, category, author, search string and Godot version
- **Submission**: Submit assets with versions and previews
- **Reviews**: Positive or negative reviews, summed into the asset's score
- **Icons**: Inferred from the repository when not set explicitly
    """,
    version=__version__,
    openapi_tags=[
        {"name": "assets", "description": "Asset listing, submission and edition"},
        {"name": "configure", "description": "Categories and licenses"},
        {"name": "health", "description": "Service health checks"},
    ],
    lifespan=lifespan,
)

# CORS middleware for cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AssetLibException)
async def assetlib_exception_handler(request: Request, exc: AssetLibException) -> JSONResponse:
    """Render API exceptions as standardized error responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors.
    Logs the full error but returns a sanitized response.
    """
    logger.exception("Unexpected error: %s", exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
        },
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint pointing to the API documentation."""
    return {
        "name": settings.PROJECT_NAME,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "api": settings.API_V1_PREFIX,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "assetlib.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
