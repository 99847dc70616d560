"""
FastAPI application for Site Service
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from .config import settings
from .infrastructure.cache import cache
from .infrastructure.content_client import content_client
from .api.routes import content, locale, sessions, users

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting Site Service...")

    # Connect to Redis
    await cache.connect()
    logger.info("Redis cache initialized")

    # Start content client
    await content_client.start()
    logger.info("Content client initialized")

    logger.info(f"Site Service started successfully on port {settings.PORT}")

    yield

    # Shutdown
    logger.info("Shutting down Site Service...")

    await content_client.stop()
    await cache.disconnect()

    logger.info("Site Service shut down successfully")


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Sales training site - lessons, articles, sign-up and language toggle",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(content.router)
app.include_router(users.router)
app.include_router(locale.router)
app.include_router(sessions.router)


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "site_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
