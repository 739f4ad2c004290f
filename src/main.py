"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from src.api import users
from src.api.dependencies import get_user_cache, get_user_repository
from src.api.error_handlers import register_error_handlers
from src.config import get_settings
from src.domain.errors import UnexpectedError
from src.logging_config import setup_logging
from src.repositories.user_repository import SqlAlchemyUserRepository
from src.services.cache_writer import CacheWriter
from src.services.user_cache import UserCache, create_user_cache

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build process-wide resources on startup and release them on shutdown."""
    setup_logging(settings.log_level, settings.log_format)
    app.state.user_cache = create_user_cache(settings)
    app.state.cache_writer = CacheWriter(max_pending=settings.cache_writer_queue_size)
    app.state.cache_writer.start()
    logger.info(f"User service starting ({settings.environment})")
    yield
    app.state.cache_writer.stop()
    logger.info(f"Cache writer stopped: {app.state.cache_writer.stats}")
    if app.state.user_cache is not None:
        app.state.user_cache.close()


app = FastAPI(
    title="User API",
    description="User CRUD service with filtering, pagination and a Redis look-aside cache",
    version="2.0.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_error_handlers(app)

# Register routers
app.include_router(users.router)


@app.get("/health")
def health_check(
    repository: Annotated[SqlAlchemyUserRepository, Depends(get_user_repository)],
    cache: Annotated[UserCache | None, Depends(get_user_cache)],
):
    """Report database and cache connectivity."""
    database_status = "connected"
    try:
        repository.ping()
    except UnexpectedError:
        database_status = "disconnected"

    cache_status = "disabled"
    if cache is not None:
        try:
            cache_status = "connected" if cache.ping() else "disconnected"
        except RedisError:
            cache_status = "disconnected"

    healthy = database_status == "connected" and cache_status != "disconnected"
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "database": database_status,
            "cache": cache_status,
            "environment": settings.environment,
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
