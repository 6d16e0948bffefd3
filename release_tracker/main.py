"""
Main FastAPI application module.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
import uvicorn
import logging
from contextlib import asynccontextmanager

from release_tracker.config import Settings, settings as default_settings
from release_tracker.api.health import router as health_router
from release_tracker.api.releases import router as releases_router
from release_tracker.services.github_service import GitHubService
from release_tracker.services.release_cache import ReleaseCache
from release_tracker.services.release_fetcher import ReleaseFetcher, format_age
from release_tracker.services.scheduler import RefreshScheduler


# Configure logging
logging.basicConfig(
    level=getattr(logging, default_settings.LOG_LEVEL.upper(), logging.INFO),
    format=default_settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info(f"Starting {app.title}...")
    scheduler: RefreshScheduler = app.state.scheduler
    scheduler.start()

    yield

    # Shutdown
    logger.info(f"Shutting down {app.title}...")
    await scheduler.stop()


def create_app(
    settings: Optional[Settings] = None,
    github_service: Optional[GitHubService] = None,
    cache: Optional[ReleaseCache] = None,
) -> FastAPI:
    """
    Build the application and wire its components.

    Construction order is GitHub client, fetcher, cache, scheduler; the
    scheduler is started by the lifespan handler before serving requests.
    """
    settings = settings or default_settings

    if github_service is None:
        github_service = GitHubService(
            api_url=settings.GITHUB_API_URL,
            token=settings.GITHUB_TOKEN,
            timeout=settings.TIMEOUT_SECONDS,
        )
    if cache is None:
        cache = ReleaseCache(
            repositories=settings.repositories,
            fetcher=ReleaseFetcher(github_service),
            failure_threshold=settings.FAILURE_THRESHOLD,
        )
    scheduler = RefreshScheduler(
        cache,
        interval=settings.REFRESH_INTERVAL,
        timeout=settings.REFRESH_TIMEOUT,
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Latest releases and unreleased commits of tracked GitHub repositories",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.github_service = github_service
    app.state.release_cache = cache
    app.state.scheduler = scheduler

    # Include routers
    app.include_router(releases_router, prefix=settings.API_V1_STR, tags=["releases"])
    app.include_router(health_router, prefix=settings.API_V1_STR, tags=["health"])

    @app.get("/", response_class=HTMLResponse)
    async def read_root(request: Request):
        """Render the release overview page."""
        snapshot = request.app.state.release_cache.get()
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "title": settings.APP_NAME,
                "releases": snapshot.releases,
                "fetched_at": snapshot.fetched_at,
                "fetched_at_ago": format_age(snapshot.fetched_at),
            },
        )

    @app.get("/info")
    async def get_app_info():
        """Get application information."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "debug": settings.DEBUG,
            "environment": "development" if settings.DEBUG else "production",
            "repositories": len(cache.repositories),
            "refresh_interval": settings.REFRESH_INTERVAL,
        }

    return app


# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "release_tracker.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        reload=default_settings.DEBUG,
        log_level=default_settings.LOG_LEVEL.lower()
    )
