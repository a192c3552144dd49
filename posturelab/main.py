# =============================================================================
# POSTURELAB BACKEND - FASTAPI APPLICATION
# =============================================================================
"""
Main FastAPI application for the PostureLab API.
Serves posture analysis, assessment history and the exercise catalog.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from posturelab import __version__
from posturelab.config import get_settings
from posturelab.database.connection import init_database, close_database
from posturelab.database.history import reset_history_store
from posturelab.routes import analysis, assessments, exercises
from posturelab.tasks.janitor import start_scheduler, shutdown_scheduler

# Configure logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup/shutdown events for database and scheduler.
    """
    settings = get_settings()
    logger.info("Starting PostureLab backend...")

    # Initialize database
    await init_database()
    logger.info("✓ Database initialized")

    # Start background scheduler for Janitor task
    if settings.janitor_enabled:
        start_scheduler()
        logger.info("✓ Background scheduler started")

    logger.info(f"✓ History limit: {settings.history_limit} assessments")
    logger.info(f"✓ Landmark detector: {settings.detector_url}")

    yield

    # Cleanup
    logger.info("Shutting down PostureLab backend...")
    shutdown_scheduler()
    reset_history_store()
    await close_database()
    logger.info("✓ Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="PostureLab API",
    description="Side-view posture analysis with muscle imbalance and exercise recommendations",
    version=__version__,
    lifespan=lifespan
)

# Configure CORS for frontend communication
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(analysis.router, prefix="/api", tags=["Analysis"])
app.include_router(assessments.router, prefix="/api", tags=["Assessments"])
app.include_router(exercises.router, prefix="/api", tags=["Exercises"])


@app.get("/health")
async def health_check():
    """
    Health check endpoint for container orchestration.
    Returns service status and configuration info.
    """
    settings = get_settings()
    return {
        "status": "ok",
        "service": "posturelab-backend",
        "version": __version__,
        "history_limit": settings.history_limit,
        "max_recommendations": settings.max_recommendations
    }


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "PostureLab API",
        "docs": "/docs",
        "health": "/health"
    }


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
