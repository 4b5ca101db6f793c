"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .api.routes import game, levels, endless, stats
from .core.session_store import get_session_store

# Get settings
settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Spot-the-odd-tile color perception game: level generation, game sessions and player statistics",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(game.router)
app.include_router(levels.router)
app.include_router(endless.router)
app.include_router(stats.router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Odd Tile Out game API",
        "endpoints": {
            "start": "/api/game/start",
            "select": "/api/game/select",
            "state": "/api/game/state",
            "quit": "/api/game/quit",
            "level_preview": "/api/levels/{level}",
            "curve": "/api/levels/curve",
            "profiles": "/api/levels/profiles",
            "endless": "/api/endless/level",
            "aggregate_stats": "/api/stats/aggregate",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "difficulty_profile": settings.difficulty_profile,
        "sessions": get_session_store().stats(),
    }


if __name__ == "__main__":
    import uvicorn

    # Sessions are held in process memory, so a single worker owns them all
    uvicorn.run(
        "oddtile.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1,
    )
