# repo_browser/main.py
from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .cache import TTLCache
from .config import Settings
from .errors import InvalidArgument
from .logging import setup_logging
from .metrics import setup_metrics
from .routers import files, health
from .services.files import FileQueryService
from .services.github import GitHubContentsProvider, build_client

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again after a minute."


def _ratelimit_handler(request: Request, exc: RateLimitExceeded):
    # sync on purpose: SlowAPIMiddleware calls this without awaiting
    response = ORJSONResponse({"error": RATE_LIMIT_MESSAGE}, status_code=429)
    return request.app.state.limiter._inject_headers(response, request.state.view_rate_limit)


def _install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RateLimitExceeded, _ratelimit_handler)

    @app.exception_handler(InvalidArgument)
    async def _invalid_argument(request: Request, exc: InvalidArgument):
        return ORJSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return ORJSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


def _exempt_unlimited_routes(app: FastAPI, limiter: Limiter) -> None:
    """Only the file routes count against the per-client limit."""
    limited = {route.endpoint for route in files.router.routes}
    for route in app.routes:
        endpoint = getattr(route, "endpoint", None)
        if endpoint is not None and endpoint not in limited:
            limiter.exempt(endpoint)


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the API around one GitHub repository.

    `transport` replaces the network layer of the upstream client; tests
    pass an httpx.MockTransport.
    """
    cfg = settings or Settings()  # missing GITHUB_* values fail here
    logger = setup_logging(cfg.LOG_LEVEL)

    client = build_client(cfg, transport)
    cache = TTLCache(default_ttl=cfg.CACHE_TTL_SECONDS)
    service = FileQueryService(
        GitHubContentsProvider(client),
        cache,
        ttl=cfg.CACHE_TTL_SECONDS,
        single_flight=cfg.CACHE_SINGLE_FLIGHT,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(
        title=cfg.APP_NAME,
        version=cfg.APP_VERSION,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = cfg
    app.state.cache = cache
    app.state.file_service = service

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=Settings.split_csv(cfg.CORS_ALLOW_ORIGINS),
        allow_methods=Settings.split_csv(cfg.CORS_ALLOW_METHODS),
        allow_headers=Settings.split_csv(cfg.CORS_ALLOW_HEADERS),
    )

    # Rate limits (per IP), one budget shared by the four file routes
    limiter = Limiter(key_func=get_remote_address, application_limits=[cfg.RATE_LIMIT], headers_enabled=True)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    _install_error_handlers(app)

    # Routers
    app.include_router(files.router)
    app.include_router(health.router)

    # Metrics
    setup_metrics(app, enable=cfg.ENABLE_PROMETHEUS)

    _exempt_unlimited_routes(app, limiter)

    logger.info(
        "app_ready",
        github_api=cfg.GITHUB_API,
        owner=cfg.GITHUB_USERNAME,
        repo=cfg.GITHUB_REPO,
        cache_ttl=cfg.CACHE_TTL_SECONDS,
        rate_limit=cfg.RATE_LIMIT,
    )
    return app
