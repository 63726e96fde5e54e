"""FastAPI application exposing cached GitHub repository data."""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from repo_showcase import __version__
from repo_showcase.api.models import (
    CacheStatsResponse,
    ProfileResponse,
    RefreshResponse,
    RepositoriesResponse,
)
from repo_showcase.api.rate_limit import RateLimiter
from repo_showcase.cache import RepositoryCache
from repo_showcase.config import Settings, build_cache, build_scheduler
from repo_showcase.exceptions import UpstreamUnavailable
from repo_showcase.scheduler import RefreshScheduler, SchedulerStatus

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    cache: RepositoryCache | None = None,
    scheduler: RefreshScheduler | None = None,
) -> FastAPI:
    """Create and configure the FastAPI server app.

    ``cache`` and ``scheduler`` default to instances built from
    ``settings``; pass them in to share or fake the upstream.
    """
    app_settings = settings or Settings.load()
    repo_cache = cache or build_cache(app_settings)
    refresher = scheduler or build_scheduler(app_settings, repo_cache)
    rate_limiter = RateLimiter(
        app_settings.api.rate_limit_requests,
        app_settings.api.rate_limit_window_seconds,
    )
    default_account = app_settings.github.account

    app = FastAPI(title="repo-showcase API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = app_settings
    app.state.cache = repo_cache
    app.state.scheduler = refresher
    app.state.rate_limiter = rate_limiter

    @app.on_event("startup")
    async def on_startup() -> None:
        if app_settings.scheduler.enabled:
            refresher.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await refresher.stop()
        repo_cache.close()

    async def rate_limit(request: Request, response: Response) -> None:
        client_id = request.client.host if request.client else "unknown"
        allowed, remaining, reset = rate_limiter.check(client_id)
        headers = {
            "X-RateLimit-Limit": str(rate_limiter.limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(reset),
        }
        if not allowed:
            logger.warning("rate_limit_exceeded", client=client_id)
            raise HTTPException(
                status_code=429,
                detail="Too many GitHub API requests, please try again later.",
                headers=headers,
            )
        for header_name, value in headers.items():
            response.headers[header_name] = value

    router = APIRouter(prefix="/api/github", dependencies=[Depends(rate_limit)])

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @router.get("/repos", response_model=RepositoriesResponse)
    async def get_repos(account: str | None = None) -> RepositoriesResponse:
        listing = await asyncio.to_thread(
            repo_cache.fetch_pinned_listing, account or default_account
        )
        return RepositoriesResponse(
            repos=listing.repos, cached=listing.cached, source=listing.source
        )

    @router.get("/profile", response_model=ProfileResponse)
    async def get_profile(account: str | None = None) -> ProfileResponse:
        try:
            lookup = await asyncio.to_thread(
                repo_cache.fetch_profile_lookup, account or default_account
            )
        except UpstreamUnavailable as exc:
            logger.error("profile_unavailable", error=str(exc))
            raise HTTPException(
                status_code=503, detail="Failed to fetch GitHub profile"
            ) from exc
        return ProfileResponse(profile=lookup.profile, cached=lookup.cached)

    @router.post("/refresh", response_model=RefreshResponse)
    async def refresh(account: str | None = None) -> RefreshResponse:
        listing = await asyncio.to_thread(
            repo_cache.refresh, account or default_account
        )
        message = (
            "GitHub data refreshed successfully"
            if not listing.cached
            else "GitHub is unavailable; serving fallback data"
        )
        return RefreshResponse(
            message=message, repos=listing.repos, source=listing.source
        )

    @router.get("/cache/stats", response_model=CacheStatsResponse)
    async def cache_stats() -> CacheStatsResponse:
        if not app_settings.api.expose_cache_stats:
            raise HTTPException(
                status_code=404, detail="Endpoint not available in production"
            )
        return CacheStatsResponse(cache=repo_cache.get_cache_stats())

    @router.get("/scheduler", response_model=SchedulerStatus)
    async def scheduler_status() -> SchedulerStatus:
        return refresher.status()

    app.include_router(router)

    return app
