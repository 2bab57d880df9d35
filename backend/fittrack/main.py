"""FitTrack Backend - FastAPI Application Factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fittrack.api.health import router as health_router
from fittrack.api.router import api_router
from fittrack.core.config import Settings, get_settings
from fittrack.core.errors import register_exception_handlers
from fittrack.core.logging import get_logger, setup_logging
from fittrack.middleware import (
    CsrfMiddleware,
    HTTPSRedirectMiddleware,
    RateLimiter,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    build_policies,
)
from fittrack.middleware.csrf import CSRF_HEADER_NAME
from fittrack.services.auth import AuthService
from fittrack.services.csrf_tokens import CsrfTokenStore
from fittrack.services.periodic_sweep import PeriodicSweep
from fittrack.services.progress import ProgressService

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings

    setup_logging(
        level=settings.log_level,
        format_type="structured" if not settings.debug else "dev",
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    for warning in settings.check_security_configuration():
        logger.warning(f"SECURITY: {warning}")

    sweeps: list[PeriodicSweep] = app.state.sweeps
    for sweep in sweeps:
        sweep.start()

    yield

    logger.info("Shutting down...")
    for sweep in sweeps:
        await sweep.stop()


def create_app(
    settings: Settings | None = None,
    csrf_store: CsrfTokenStore | None = None,
    rate_limiter: RateLimiter | None = None,
    auth_service: AuthService | None = None,
    progress_service: ProgressService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Stores and services default to fresh instances; tests pass their own
    (e.g. with a fake clock) to control expiry and window resets.
    """
    settings = settings or get_settings()
    csrf_store = csrf_store or CsrfTokenStore(
        ttl_seconds=settings.csrf_token_ttl_seconds,
        one_time_use=settings.csrf_one_time_use,
    )
    rate_limiter = rate_limiter or RateLimiter(max_keys=settings.rate_limit_max_keys)

    app = FastAPI(
        title=settings.app_name,
        description="Fitness tracking API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    app.state.settings = settings
    app.state.csrf_store = csrf_store
    app.state.rate_limiter = rate_limiter
    app.state.auth_service = auth_service or AuthService()
    app.state.progress_service = progress_service or ProgressService()
    app.state.sweeps = [
        PeriodicSweep(
            "csrf_tokens",
            csrf_store.cleanup_expired,
            settings.csrf_cleanup_interval_seconds,
        ),
        PeriodicSweep(
            "rate_limit_counters",
            rate_limiter.cleanup_expired,
            settings.rate_limit_cleanup_interval_seconds,
        ),
    ]

    register_exception_handlers(app)

    # Starlette runs middleware in reverse order of registration, so the
    # pipeline is: CORS -> security headers -> HTTPS redirect -> request log
    # -> rate limit -> CSRF -> route.
    app.add_middleware(
        CsrfMiddleware,
        token_store=csrf_store,
        exempt_paths=settings.csrf_exempt_path_list,
    )

    app.add_middleware(
        RateLimitMiddleware,
        rate_limiter=rate_limiter,
        policies=build_policies(
            window_seconds=settings.rate_limit_window_seconds,
            max_requests=settings.rate_limit_max_requests,
            auth_max_requests=settings.auth_rate_limit_max_requests,
        ),
        trusted_proxies=settings.trusted_proxy_ip_set,
        enabled=settings.rate_limit_enabled,
    )

    app.add_middleware(RequestLoggingMiddleware)

    if settings.https_enforced:
        app.add_middleware(HTTPSRedirectMiddleware)

    # Wraps the redirect and the limiters so 301/403/429 responses carry the headers too
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - MUST be outermost (added last in Starlette LIFO order)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", CSRF_HEADER_NAME],
    )

    if settings.enable_metrics:
        from prometheus_fastapi_instrumentator import Instrumentator

        Instrumentator(
            excluded_handlers=["/health", "/metrics"],
        ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    app.include_router(health_router)
    app.include_router(api_router)

    return app


# Application instance
app = create_app()
