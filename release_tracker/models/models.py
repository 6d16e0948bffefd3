"""
Data models for the GitHub Release Tracker application.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel

DEFAULT_BRANCH = "main"


class MalformedRepoSpec(ValueError):
    """Raised when a configured repository spec is not "owner/name[:branch]"."""

    def __init__(self, spec: str):
        self.spec = spec
        super().__init__(f"invalid repo format: {spec!r} (expected owner/name[:branch])")


@dataclass(frozen=True)
class RepoRef:
    """A repository and the branch whose release status is tracked."""
    owner: str
    name: str
    branch: str = DEFAULT_BRANCH

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_string(cls, spec: str) -> "RepoRef":
        return parse_repo_spec(spec)

    def __str__(self) -> str:
        return f"{self.full_name}:{self.branch}"


def parse_repo_spec(spec: str) -> RepoRef:
    """
    Parse an "owner/name" or "owner/name:branch" spec.

    Whitespace around each segment is ignored.

    Args:
        spec: Repository spec from configuration

    Returns:
        RepoRef: Parsed reference, branch defaults to "main"

    Raises:
        MalformedRepoSpec: If the owner/name part is not exactly two non-empty segments
    """
    repo_part, _, branch = spec.partition(":")
    segments = [segment.strip() for segment in repo_part.split("/")]
    if len(segments) != 2 or not all(segments):
        raise MalformedRepoSpec(spec)

    owner, name = segments
    return RepoRef(owner=owner, name=name, branch=branch.strip() or DEFAULT_BRANCH)


@dataclass(frozen=True)
class ReleaseRecord:
    """Release status of one repository as of one refresh cycle."""
    repo: RepoRef
    latest_tag: str
    latest_tag_age: str
    unreleased_commits: int
    published_at: Optional[datetime] = None
    html_url: Optional[str] = None


@dataclass(frozen=True)
class Snapshot:
    """Immutable result of one refresh cycle."""
    releases: Tuple[ReleaseRecord, ...] = ()
    fetched_at: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return not self.releases


EMPTY_SNAPSHOT = Snapshot()


# Pydantic models for API serialization
class ReleaseResponse(BaseModel):
    """Release response schema."""
    repository: str
    owner: str
    name: str
    branch: str
    latest_tag: str
    latest_tag_age: str
    unreleased_commits: int
    published_at: Optional[datetime] = None
    html_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: ReleaseRecord) -> "ReleaseResponse":
        return cls(
            repository=record.repo.full_name,
            owner=record.repo.owner,
            name=record.repo.name,
            branch=record.repo.branch,
            latest_tag=record.latest_tag,
            latest_tag_age=record.latest_tag_age,
            unreleased_commits=record.unreleased_commits,
            published_at=record.published_at,
            html_url=record.html_url,
        )


class SnapshotResponse(BaseModel):
    """Snapshot response schema."""
    releases: List[ReleaseResponse]
    total: int
    fetched_at: Optional[datetime] = None
    fetched_at_ago: str
