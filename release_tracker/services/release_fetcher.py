"""
Per-repository release status fetching.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import humanize

from release_tracker.models import ReleaseRecord, RepoRef, parse_repo_spec
from release_tracker.services.github_service import GitHubService

logger = logging.getLogger(__name__)

PHASE_LATEST_RELEASE = "latest-release"
PHASE_COMPARE = "compare"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_age(moment: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Humanize how long ago ``moment`` was, e.g. "3 days ago"."""
    if moment is None:
        return "never"
    now = now or utcnow()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    # Clock skew can put a publish time slightly in the future
    delta = max(now - moment, timedelta(0))
    return humanize.naturaltime(delta)


class FetchError(Exception):
    """A repository's release status could not be fetched in one phase."""

    def __init__(self, repo: RepoRef, phase: str, cause: Exception):
        self.repo = repo
        self.phase = phase
        self.cause = cause
        super().__init__(f"{phase} failed for {repo}: {cause}")


class ReleaseFetcher:
    """Combines the latest release and its commit delta into a ReleaseRecord."""

    def __init__(self, github: GitHubService, clock: Callable[[], datetime] = utcnow):
        self.github = github
        self.clock = clock

    async def fetch(self, repo_spec: str) -> ReleaseRecord:
        """
        Fetch the release status of one repository.

        Either both API calls succeed and a record is returned, or the
        whole fetch fails.

        Args:
            repo_spec: "owner/name[:branch]" spec from configuration

        Returns:
            ReleaseRecord: Latest tag, its age and the unreleased commit count

        Raises:
            MalformedRepoSpec: If the spec cannot be parsed
            FetchError: If either API call fails
        """
        repo = parse_repo_spec(repo_spec)

        try:
            release = await self.github.get_latest_release(repo.owner, repo.name)
        except Exception as e:
            raise FetchError(repo, PHASE_LATEST_RELEASE, e) from e

        try:
            comparison = await self.github.compare_commits(
                repo.owner, repo.name, release.tag_name, repo.branch
            )
        except Exception as e:
            raise FetchError(repo, PHASE_COMPARE, e) from e

        record = ReleaseRecord(
            repo=repo,
            latest_tag=release.tag_name,
            latest_tag_age=format_age(release.published_at, self.clock()),
            unreleased_commits=comparison.total_commits,
            published_at=release.published_at,
            html_url=release.html_url,
        )
        logger.debug(
            f"{repo}: {record.latest_tag} ({record.latest_tag_age}), "
            f"{record.unreleased_commits} unreleased commits"
        )
        return record
