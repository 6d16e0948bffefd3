"""
Services package for the GitHub API integration and the release cache.
"""

from .github_service import GitHubAPIError, GitHubService
from .release_cache import CacheHealth, ReleaseCache
from .release_fetcher import FetchError, ReleaseFetcher, format_age
from .scheduler import RefreshScheduler

__all__ = [
    "CacheHealth",
    "FetchError",
    "GitHubAPIError",
    "GitHubService",
    "RefreshScheduler",
    "ReleaseCache",
    "ReleaseFetcher",
    "format_age",
]
