"""
Health check API endpoints.
"""

import time
from datetime import datetime, timezone
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel
import logging

from release_tracker.api.releases import get_release_cache
from release_tracker.config import settings
from release_tracker.services.github_service import GitHubService
from release_tracker.services.release_cache import ReleaseCache

logger = logging.getLogger(__name__)

router = APIRouter()


class CacheStatus(BaseModel):
    """Release cache status model."""
    status: str
    repositories: int
    releases: int
    refresh_count: int
    refreshing: bool
    fetched_at: Optional[datetime] = None
    snapshot_age: Optional[float] = None
    last_cycle_failures: List[str] = []
    degraded_repositories: List[str] = []
    failure_streaks: Dict[str, int] = {}


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    version: str
    uptime: float
    cache: CacheStatus


# Store application start time for uptime calculation
app_start_time = time.time()


def get_github_service(request: Request) -> GitHubService:
    """Dependency returning the application's GitHub client."""
    return request.app.state.github_service


def check_cache(cache: ReleaseCache) -> CacheStatus:
    """Summarize the release cache freshness and per-repository failures."""
    snapshot = cache.get()
    health = cache.health()

    if snapshot.fetched_at is None:
        cache_status = "starting"
    elif health.is_degraded:
        cache_status = "degraded"
    else:
        cache_status = "healthy"

    snapshot_age = None
    if snapshot.fetched_at is not None:
        snapshot_age = (datetime.now(timezone.utc) - snapshot.fetched_at).total_seconds()

    return CacheStatus(
        status=cache_status,
        repositories=len(cache.repositories),
        releases=len(snapshot.releases),
        refresh_count=health.refresh_count,
        refreshing=cache.refreshing,
        fetched_at=snapshot.fetched_at,
        snapshot_age=snapshot_age,
        last_cycle_failures=list(health.last_cycle_failures),
        degraded_repositories=health.degraded_repositories,
        failure_streaks=health.failure_streaks,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check(cache: ReleaseCache = Depends(get_release_cache)):
    """
    Comprehensive health check endpoint.

    Reports "degraded" once a repository has failed to refresh in
    FAILURE_THRESHOLD consecutive cycles.
    """
    cache_status = check_cache(cache)
    return HealthResponse(
        status=cache_status.status,
        timestamp=datetime.now(timezone.utc),
        version=settings.APP_VERSION,
        uptime=time.time() - app_start_time,
        cache=cache_status,
    )


@router.get("/health/live")
async def liveness_probe():
    """
    Kubernetes liveness probe endpoint.

    Returns a simple OK response to indicate the application is running.
    """
    return {"status": "ok", "timestamp": datetime.now(timezone.utc)}


@router.get("/health/ready")
async def readiness_probe(cache: ReleaseCache = Depends(get_release_cache)):
    """
    Kubernetes readiness probe endpoint.

    Ready once the first snapshot has been published.
    """
    cache_status = check_cache(cache)
    if cache_status.status == "starting":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application not ready - no release snapshot published yet"
        )
    return {
        "status": "ready",
        "timestamp": datetime.now(timezone.utc),
        "cache": cache_status.model_dump(),
    }


@router.get("/health/github")
async def github_health(github: GitHubService = Depends(get_github_service)):
    """Get GitHub API rate limit information."""
    rate_limit = await github.get_rate_limit_info()
    if not rate_limit:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="GitHub API rate limit information unavailable"
        )
    core = rate_limit.get("resources", {}).get("core", rate_limit.get("rate", {}))
    return {
        "service": "github",
        "timestamp": datetime.now(timezone.utc),
        "authenticated": bool(github.token),
        "limit": core.get("limit"),
        "remaining": core.get("remaining"),
        "reset": core.get("reset"),
    }
