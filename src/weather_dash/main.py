"""FastAPI application serving the dashboard and its weather proxy."""

import logging
import os
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi_cache import FastAPICache
from fastapi_cache.backends.redis import RedisBackend

from weather_dash.api.endpoints import router as weather_router
from weather_dash.config import (
    HOST, PORT, DEBUG, REDIS_URL, CACHE_PREFIX, STATIC_DIR,
    RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS_PER_SECOND
)
from weather_dash.errors import ProxyError
from weather_dash.logging_config import configure_logging
from weather_dash.middleware.rate_limit import RateLimitMiddleware
from weather_dash.weather.models import ErrorResponse

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    redis_client = None
    try:
        logger.info(f"Connecting to Redis at {REDIS_URL}")
        redis_client = redis.from_url(REDIS_URL)
        FastAPICache.init(RedisBackend(redis_client), prefix=CACHE_PREFIX)
        logger.info("Proxy response cache initialized with Redis backend")

        logger.info("Starting weather dashboard proxy")
        yield
    except Exception as e:
        logger.error(f"Startup error: {e}")
        logger.error(traceback.format_exc())
        raise
    finally:
        logger.info("Shutting down weather dashboard proxy")
        if redis_client is not None:
            try:
                await redis_client.close()
            except Exception as e:
                logger.error(f"Shutdown error: {e}")


async def proxy_error_handler(_request: Request, exc: ProxyError) -> JSONResponse:
    """Answer with the status and JSON body carried by the error."""
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error serving {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="Internal server error").model_dump(exclude_none=True)
    )


def create_app(rate_limit_enabled: bool = RATE_LIMIT_ENABLED) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        rate_limit_enabled: Whether to throttle proxy requests per client

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Weather Dashboard",
        description="Weather dashboard with a same-origin proxy to OpenWeatherMap",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RateLimitMiddleware,
        calls=RATE_LIMIT_REQUESTS_PER_SECOND,
        enabled=rate_limit_enabled
    )

    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(weather_router)

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": "Weather Dashboard proxy",
            "docs": "/docs",
            "endpoints": [
                "/api/weather",
                "/api/forecast",
                "/api/air-pollution",
                "/api/onecall",
                "/api/health",
            ],
        }

    # Dashboard assets are optional; the proxy works without them
    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

        @app.get("/", tags=["root"], include_in_schema=False)
        async def root():
            """Serve the dashboard page."""
            return FileResponse(os.path.join(STATIC_DIR, "index.html"))
    else:
        logger.info(f"No static assets at {STATIC_DIR}; serving the API only")

    return app


# Create app instance for uvicorn
app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
