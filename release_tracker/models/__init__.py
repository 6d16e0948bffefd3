"""
Data models package.
"""

from .models import (
    EMPTY_SNAPSHOT,
    MalformedRepoSpec,
    ReleaseRecord,
    ReleaseResponse,
    RepoRef,
    Snapshot,
    SnapshotResponse,
    parse_repo_spec,
)

__all__ = [
    "EMPTY_SNAPSHOT",
    "MalformedRepoSpec",
    "ReleaseRecord",
    "ReleaseResponse",
    "RepoRef",
    "Snapshot",
    "SnapshotResponse",
    "parse_repo_spec",
]
