"""
MVE Resource Server - Main Application

This is the entry point for the FastAPI application.
It handles:
- REST API endpoints for concert sessions (/api/concert)
- Health checks reporting Redis reachability
- Redis client and concert coordinator lifecycle
"""
from contextlib import asynccontextmanager
import logging
from datetime import datetime, UTC

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resource_server import __version__
from resource_server.api import router as api_router
from resource_server.api.errors import register_error_handlers
from resource_server.config.settings import settings
from resource_server.config.redis import create_redis, close_redis
from resource_server.services.concert import ConcertService, RedisSessionStore, SessionStoreUnavailableError
from resource_server.services.metrics import start_metrics_server

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Creates the Redis client and the concert coordinator on startup and
    closes the client on shutdown. A coordinator already present on
    app.state (tests) is left untouched.
    """
    # === STARTUP ===
    logger.info("🚀 Starting MVE Resource Server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    client = None
    if getattr(app.state, "concert_service", None) is None:
        client = create_redis()
        store = RedisSessionStore(client)
        try:
            await store.ping()
            logger.info(f"✅ Redis connected ({settings.REDIS_HOST}:{settings.REDIS_PORT})")
        except SessionStoreUnavailableError as e:
            logger.error(f"❌ Redis unavailable at startup: {e}")
        app.state.concert_service = ConcertService(store, production=settings.is_production)

    if settings.METRICS_ENABLED:
        start_metrics_server(port=settings.METRICS_PORT)

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("🛑 Shutting down...")
    await close_redis(client)


app = FastAPI(
    title="MVE Resource Server",
    description="Concert session coordination for live virtual events",
    version=__version__,
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Include REST API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "MVE Resource Server",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "health": "GET /health/resource",
            "concert_create": "POST /api/concert/create",
            "concert_list": "GET /api/concert/list",
            "concert_join": "POST /api/concert/{roomId}/join",
            "concert_leave": "POST /api/concert/{roomId}/leave",
            "concert_info": "GET /api/concert/{roomId}/info",
            "concert_current_song": "GET /api/concert/{roomId}/current-song (audience)",
            "concert_add_song": "POST /api/concert/{roomId}/songs/add (studio only)",
            "concert_remove_song": "DELETE /api/concert/{roomId}/songs/{songNum} (studio only)",
            "concert_change_song": "POST /api/concert/{roomId}/songs/change (studio only)",
            "concert_add_accessory": "POST /api/concert/{roomId}/accessories/add (studio only)",
            "concert_remove_accessory": "DELETE /api/concert/{roomId}/accessories/{index} (studio only)",
            "concert_update_accessories": "PUT /api/concert/{roomId}/accessories (studio only)",
            "concert_update_listen_server": "POST /api/concert/{roomId}/listen-server (studio only)",
            "concert_toggle_open": "POST /api/concert/{roomId}/toggle-open (studio only)",
            "concert_destroy": "DELETE /api/concert/{roomId} (studio only)",
            "concert_expire_all": "POST /api/concert/expire-all (non-production only)",
        },
    }


@app.get("/health/resource")
async def health():
    """Health check endpoint."""
    try:
        redis_ok = await app.state.concert_service.store.ping()
    except SessionStoreUnavailableError:
        redis_ok = False
    return {
        "success": redis_ok,
        "server": "mve-resource-server",
        "redis": "connected" if redis_ok else "disconnected",
        "timestamp": datetime.now(UTC).isoformat(),
    }
