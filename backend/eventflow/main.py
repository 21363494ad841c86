"""
EventFlow - Main Application Entry Point

Moderation and notification pipeline for a community event listing:
- Signed one-click approve/reject links for moderators
- Subscriber matching and best-effort email fan-out on approval
- GDPR-style retention job that warns, then deletes, inactive accounts
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventflow.core.config import get_settings
from eventflow.core.logging import setup_logging, get_logger
from eventflow.core.metrics import metrics_endpoint
from eventflow.api.errors import register_exception_handlers
from eventflow.api.middleware import RequestLoggingMiddleware
from eventflow.api.router import api_router
from eventflow.db.session import dispose_engine
from eventflow.infrastructure.redis_client import RedisClient, get_redis_status

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        single_use_tokens=settings.APPROVAL_TOKEN_SINGLE_USE,
    )

    if settings.REDIS_ENABLED:
        if await RedisClient.get_client(settings):
            logger.info("redis_ready")
        else:
            logger.warning("redis_unavailable", message="Approval tokens fall back to expiry-only")

    yield

    await RedisClient.close()
    await dispose_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Event moderation, subscriber notification and data retention API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)
app.add_middleware(RequestLoggingMiddleware)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "redis": await get_redis_status(settings),
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
