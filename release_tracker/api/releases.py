"""
Release snapshot API endpoints.
"""

from fastapi import APIRouter, Depends, Request

from release_tracker.models import ReleaseResponse, SnapshotResponse
from release_tracker.services.release_cache import ReleaseCache
from release_tracker.services.release_fetcher import format_age

router = APIRouter()


def get_release_cache(request: Request) -> ReleaseCache:
    """Dependency returning the application's release cache."""
    return request.app.state.release_cache


@router.get("/releases", response_model=SnapshotResponse)
async def list_releases(cache: ReleaseCache = Depends(get_release_cache)):
    """
    Return the most recently published release snapshot.

    The snapshot may be empty before the first refresh has finished;
    ``fetched_at_ago`` tells how stale it is.
    """
    snapshot = cache.get()
    return SnapshotResponse(
        releases=[ReleaseResponse.from_record(record) for record in snapshot.releases],
        total=len(snapshot.releases),
        fetched_at=snapshot.fetched_at,
        fetched_at_ago=format_age(snapshot.fetched_at),
    )
