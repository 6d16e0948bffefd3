#!/usr/bin/env python3
"""
Debug script to run a single release refresh and print the snapshot.
"""

import os
import sys
import asyncio
import logging

# Add the project directory to the Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '.'))

from release_tracker.config import settings
from release_tracker.models import MalformedRepoSpec, parse_repo_spec
from release_tracker.services import GitHubService, ReleaseCache, ReleaseFetcher, format_age

# Configure logging for debug output
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def main():
    """Main debug function."""
    print("=" * 60)
    print("RELEASE REFRESH DIAGNOSTIC SCRIPT")
    print("=" * 60)

    print(f"\n1. CURRENT CONFIGURATION:")
    print(f"   GitHub API: {settings.GITHUB_API_URL}")
    print(f"   Token configured: {bool(settings.GITHUB_TOKEN)}")
    print(f"   Refresh timeout: {settings.REFRESH_TIMEOUT}s")

    print(f"\n2. CONFIGURED REPOSITORIES:")
    if not settings.repositories:
        print("   None - set REPOS=owner/name[:branch],...")
        return
    for spec in settings.repositories:
        try:
            repo = parse_repo_spec(spec)
            print(f"   {spec} -> {repo.full_name} @ {repo.branch}")
        except MalformedRepoSpec as e:
            print(f"   ERROR: {e}")

    github = GitHubService()
    rate_limit = await github.get_rate_limit_info()
    core = rate_limit.get("resources", {}).get("core", {})
    print(f"\n3. RATE LIMIT: {core.get('remaining', '?')}/{core.get('limit', '?')} remaining")

    print(f"\n4. REFRESHING:")
    cache = ReleaseCache(settings.repositories, ReleaseFetcher(github))
    snapshot = await cache.refresh(timeout=settings.REFRESH_TIMEOUT)
    for release in snapshot.releases:
        print(
            f"   {release.repo}: {release.latest_tag} ({release.latest_tag_age}), "
            f"{release.unreleased_commits} unreleased commits"
        )
    failures = cache.health().last_cycle_failures
    if failures:
        print(f"   Failed: {', '.join(failures)}")
    print(f"   Fetched {format_age(snapshot.fetched_at)}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
