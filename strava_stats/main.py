"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from strava_stats.api.routes import router as api_router
from strava_stats.config import settings
from strava_stats.services.strava_session import StravaSession

# Set up logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=settings.log_level.upper()
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    status = app.state.strava_session.status()
    logger.info(
        f"Starting Strava Stats (client credentials: {status.has_client_credentials}, "
        f"authenticated: {status.authenticated})"
    )
    yield
    logger.info("Shutting down Strava Stats")


# Create FastAPI app
app = FastAPI(
    title="Strava Stats",
    description="Yearly per-sport distance and time statistics from your Strava activities",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# One session per application
app.state.strava_session = StravaSession.from_settings(settings)

# Include API routes
app.include_router(api_router, prefix="/api/v1", tags=["Strava Stats"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "Strava Stats",
        "version": "0.1.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "strava_stats.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug
    )
