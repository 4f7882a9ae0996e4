"""
FastAPI Travel Recommendation Service - Main Application
Personalized destination and trip recommendations
"""
import logging
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.database import init_db
from app.core.logging import configure_logging
from app.routers import recommendations
from app.services import recommendations_service
from app.services.recommendations import ContextValidationError

# Import models to ensure they're registered with SQLAlchemy
from app.models import models  # noqa: F401

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Scheduler instance
scheduler = AsyncIOScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager
    Handles startup and shutdown events
    """
    logger.info("Starting %s", settings.APP_NAME)

    await init_db()
    app.state.profile_cache = recommendations_service.create_profile_cache()

    # Hourly purge of expired cached recommendations
    if settings.ENABLE_CRON:
        scheduler.add_job(
            recommendations_service.purge_expired_recommendations,
            trigger=IntervalTrigger(hours=1),
            id="purge_expired_recommendations",
            name="Purge expired cached recommendations",
            replace_existing=True
        )
        scheduler.start()
        logger.info("Scheduled hourly purge of expired cached recommendations")

    yield

    logger.info("Shutting down")
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")


# Create FastAPI application
app = FastAPI(
    title="Travel Recommendation Service",
    description="Personalized travel recommendations: content-based, collaborative and trending",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint - health check"""
    return {
        "message": "Travel Recommendation Service API",
        "status": "running",
        "version": "1.0.0",
        "timestamp": datetime.now().isoformat()
    }


app.include_router(recommendations.router, prefix="/recommendations", tags=["recommendations"])


@app.exception_handler(ContextValidationError)
async def context_validation_handler(request: Request, exc: ContextValidationError):
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request context", "details": exc.to_dict()}
    )


@app.exception_handler(404)
async def not_found_handler(request, exc):
    return JSONResponse(
        status_code=404,
        content={"success": False, "message": getattr(exc, "detail", None) or "Not found"}
    )


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting HTTP server on port %s", settings.PORT)
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG
    )
