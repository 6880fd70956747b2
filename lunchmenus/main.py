import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lunchmenus.api.routes import router
from lunchmenus.cache import db as cache_db
from lunchmenus.core.log import configure_logging
from lunchmenus.services.housekeeping import DailyCacheCleanup
from lunchmenus.services.menu_processor import MenuProcessor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Initialize resources on startup, cleanup on shutdown.
    """
    configure_logging()
    logger.info("Initializing Lunch Menus...")
    cache_db.init_db()
    logger.info("Database initialized at %s", cache_db.DATABASE_PATH)

    app.state.processor = MenuProcessor()
    app.state.cleanup = DailyCacheCleanup()

    yield

    logger.info("Shutting down Lunch Menus...")

app = FastAPI(
    title="Lunch Menus",
    description="Daily lunch menus from Pitäjänmäki restaurants, cached per day and language",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(router)

@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "service": "Lunch Menus",
        "version": "1.0.0",
        "endpoints": {
            "menus": "GET /menus?language=en|fi&fresh=true&day=tue",
            "menu": "GET /menus/{restaurant_id}",
            "items": "GET /menus/{restaurant_id}/items",
            "restaurants": "GET /restaurants",
            "cache": "GET|DELETE /cache",
            "cache_cleanup": "POST /cache/cleanup",
            "cache_stats": "GET /cache/stats",
            "health": "GET /health"
        }
    }
