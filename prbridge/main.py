"""Main FastAPI application (GitHub webhook receiver)"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from prbridge import __version__
from prbridge.api import webhooks
from prbridge.config import settings

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting PRBridge (marker target: {settings.marker_target})")
    yield
    logger.info("Stopping PRBridge")


app = FastAPI(
    title="PRBridge",
    description="Sync GitHub pull requests with Backlog issues",
    version=__version__,
    lifespan=lifespan,
)

# Include API routers
app.include_router(webhooks.router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "PRBridge"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "prbridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
