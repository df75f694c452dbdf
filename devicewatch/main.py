"""
DeviceWatch - FastAPI Application
Main entry point for the API server
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import structlog
from contextlib import asynccontextmanager

from devicewatch.api.routes import devices, health, insights
from devicewatch.collectors.feed_synchronizer import FeedSynchronizer
from devicewatch.core.config import Settings, settings as default_settings
from devicewatch.core.errors import StorageUnavailable
from devicewatch.core.logging import configure_logging
from devicewatch.database.connection import Database
from devicewatch.database.reading_store import ReadingStore
from devicewatch.services.insights import InsightClient

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build every component once; tear them down in reverse order"""
    settings: Settings = app.state.settings
    logger.info("Starting DeviceWatch API")

    database = Database(settings.database_url, echo=settings.sql_echo)
    database.create_all()
    store = ReadingStore(database)
    insight_client = InsightClient.from_settings(settings)

    app.state.database = database
    app.state.store = store
    app.state.insight_client = insight_client

    synchronizer = None
    if settings.sync_enabled and settings.thingspeak_channel_id:
        synchronizer = FeedSynchronizer(
            store,
            settings.feed_url,
            device_id=settings.sync_device_id,
            interval=settings.sync_interval,
            timeout=settings.sync_timeout,
        )
        await synchronizer.start()
    else:
        logger.info("Feed synchronizer disabled")

    yield

    logger.info("Shutting down DeviceWatch API")
    if synchronizer is not None:
        await synchronizer.stop()
    await insight_client.close()
    database.close()


def create_app(settings: Settings = default_settings) -> FastAPI:
    """Create the FastAPI application"""
    app = FastAPI(
        title="DeviceWatch API",
        description="Industrial IoT telemetry ingestion, analytics and AI insights",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(devices.router, prefix="/api", tags=["devices"])
    app.include_router(insights.router, prefix="/api", tags=["insights"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "DeviceWatch API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/api/health",
        }

    @app.exception_handler(StorageUnavailable)
    async def storage_exception_handler(request, exc):
        logger.error("Storage unavailable", error=str(exc), path=request.url.path)
        return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """Global exception handler"""
        logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app


configure_logging(default_settings.log_level, default_settings.log_json)
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "devicewatch.main:app",
        host=default_settings.api_host,
        port=default_settings.api_port,
        reload=default_settings.debug,
        log_level=default_settings.log_level.lower(),
    )
