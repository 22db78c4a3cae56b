import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from briefgate.app.api.briefs import router as briefs_router
from briefgate.app.core.config import settings
from briefgate.app.core.http_client import init_http_client
from briefgate.app.core.logging import get_logger, setup_logging
from briefgate.app.exceptions import GatewayException, RateLimited
from briefgate.app.middleware.rate_limit import RedisRateLimitStore, get_rate_limiter
from briefgate.app.middleware.request_id import RequestIdMiddleware, get_request_id
from briefgate.app.providers.factory import reset_provider


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    setup_logging()
    logger = get_logger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Shared HTTP client and the rate limiter's expiry sweep."""
        async with init_http_client():
            limiter = get_rate_limiter()
            await limiter.start_cleanup_task()
            logger.info(
                "Application startup complete",
                extra={
                    "rate_limit_store": type(limiter.store).__name__,
                    "mock_provider": settings.mock_provider,
                },
            )

            yield

            await limiter.close()
            reset_provider()

        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Decision Brief Gateway",
        description="Admission, rate limiting and brief parsing in front of a paid LLM API",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", settings.app_token_header, "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
        max_age=600,
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(briefs_router)

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check covering the rate limit store."""
        health_status: dict[str, Any] = {"status": "ok", "components": {}}

        store = get_rate_limiter().store
        store_ok = await store.ping()
        health_status["components"]["rate_limit_store"] = {
            "status": "ok" if store_ok else "error",
            "type": "redis" if isinstance(store, RedisRateLimitStore) else "memory",
        }
        if not store_ok:
            health_status["status"] = "degraded"

        health_status["components"]["provider"] = {
            "status": "ok",
            "type": "mock" if settings.mock_provider else "openrouter",
            "configured": settings.mock_provider or bool(settings.openrouter_api_key),
        }
        return health_status

    @app.exception_handler(GatewayException)
    async def gateway_exception_handler(request: Request, exc: GatewayException) -> JSONResponse:
        """Map the gateway error taxonomy onto JSON responses."""
        headers = None
        if isinstance(exc, RateLimited):
            headers = {
                "Retry-After": str(exc.retry_after),
                "X-RateLimit-Limit": str(exc.limit),
                "X-RateLimit-Remaining": "0",
                "X-RateLimit-Reset": str(int(exc.reset_at)),
            }
        content = exc.to_response()
        content["request_id"] = get_request_id(request)
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Unhandled exceptions: full details in the logs, generic body to the client."""
        request_id = get_request_id(request)
        logger.exception(
            f"Unhandled exception [request_id={request_id}]",
            extra={
                "request_id": request_id,
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exc(),
            },
        )

        if settings.debug:
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "message": str(exc),
                    "exception_type": type(exc).__name__,
                    "request_id": request_id,
                },
            )

        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "Internal server error",
                "request_id": request_id,
            },
        )

    return app


# Create the application instance
app = create_app()
