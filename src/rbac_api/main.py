"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from rbac_api.config import get_settings
from rbac_api.exceptions import RbacAPIError
from rbac_api.middleware.error_handler import (
    _get_cors_headers,
    error_body,
    generic_exception_handler,
    http_exception_handler,
    rbac_api_exception_handler,
    sqlalchemy_exception_handler,
    validation_exception_handler,
)
from rbac_api.middleware.request_id import RequestIDMiddleware
from rbac_api.providers import create_text_provider
from rbac_api.routers import ai_command, ai_service, associations, dashboard, permissions, roles
from rbac_api.security.rate_limit import limiter
from rbac_api.services.cache_service import CacheService
from rbac_api.services.context_service import RbacContextManager

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, max-age=0"
        response.headers.setdefault("Vary", "Accept, Authorization, Origin")
        # Strict Transport Security (HSTS) - only in production
        if not get_settings().debug:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the per-process collaborators and release them on shutdown."""
    config = get_settings()

    app.state.text_provider = create_text_provider(config)
    app.state.context_manager = RbacContextManager(config.context_cache_ttl_seconds)
    app.state.cache = None
    if config.redis_url is not None:
        app.state.cache = CacheService(str(config.redis_url), config.cache_ttl_dashboard)
        await app.state.cache.connect()

    if not config.ai_configured:
        logger.warning("LLM_API_KEY not configured - natural-language commands are disabled")

    yield

    # Close shared clients to release connections
    await app.state.text_provider.close()
    if app.state.cache is not None:
        await app.state.cache.close()


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Rate limit handler using the common error body.

    Includes Retry-After header per RFC 6585 Section 4.
    """
    return JSONResponse(
        status_code=429,
        content=error_body(
            "Too many requests",
            "Rate limit exceeded. Please wait before trying again.",
            429,
            {"limit": str(exc.detail)},
        ),
        headers={"Retry-After": "60", **_get_cors_headers(request)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    config = get_settings()

    app = FastAPI(
        title=config.app_name,
        version="0.1.0",
        description="Role-based access control administration API",
        lifespan=lifespan,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Security: Sanitized error handlers to prevent information disclosure
    app.add_exception_handler(RbacAPIError, rbac_api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    allowed_origins = config.cors_origins_list
    if "*" in allowed_origins:
        raise ValueError(
            "CORS_ORIGINS cannot contain '*' wildcard when allow_credentials=True. "
            "Specify explicit origins."
        )

    # Middleware runs in reverse order of addition; CORS must see requests first
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Requested-With"],
    )

    # Include routers
    app.include_router(permissions.router, prefix=f"{API_PREFIX}/permissions", tags=["Permissions"])
    app.include_router(roles.router, prefix=f"{API_PREFIX}/roles", tags=["Roles"])
    app.include_router(
        associations.router, prefix=f"{API_PREFIX}/associations", tags=["Associations"]
    )
    app.include_router(ai_service.router, prefix=f"{API_PREFIX}/ai-service", tags=["AI Service"])
    app.include_router(ai_command.router, prefix=f"{API_PREFIX}/ai-command", tags=["AI Command"])
    app.include_router(dashboard.router, prefix=f"{API_PREFIX}/dashboard", tags=["Dashboard"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
