from datetime import datetime, timedelta, timezone

import pytest

from release_tracker.models import MalformedRepoSpec
from release_tracker.services.github_service import (
    GitHubAPIError,
    GitHubComparisonData,
    GitHubReleaseData,
)
from release_tracker.services.release_fetcher import FetchError, ReleaseFetcher, format_age

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class DummyGitHubService:
    def __init__(self, release=None, comparison=None, release_error=None, compare_error=None):
        self.release = release
        self.comparison = comparison
        self.release_error = release_error
        self.compare_error = compare_error
        self.calls = []

    async def get_latest_release(self, owner, repo):
        self.calls.append(("latest", owner, repo))
        if self.release_error:
            raise self.release_error
        return self.release

    async def compare_commits(self, owner, repo, base, head):
        self.calls.append(("compare", owner, repo, base, head))
        if self.compare_error:
            raise self.compare_error
        return self.comparison


def widget_release():
    return GitHubReleaseData(tag_name="v1.2.0", published_at=NOW - timedelta(days=3))


def ahead_by(count):
    return GitHubComparisonData(status="ahead", ahead_by=count, behind_by=0, total_commits=count)


@pytest.mark.asyncio
async def test_fetch_builds_release_record():
    github = DummyGitHubService(release=widget_release(), comparison=ahead_by(4))
    fetcher = ReleaseFetcher(github, clock=lambda: NOW)

    record = await fetcher.fetch("acme/widget")

    assert record.repo.full_name == "acme/widget"
    assert record.repo.branch == "main"
    assert record.latest_tag == "v1.2.0"
    assert record.latest_tag_age == "3 days ago"
    assert record.unreleased_commits == 4
    assert github.calls == [
        ("latest", "acme", "widget"),
        ("compare", "acme", "widget", "v1.2.0", "main"),
    ]


@pytest.mark.asyncio
async def test_fetch_compares_against_configured_branch():
    github = DummyGitHubService(release=widget_release(), comparison=ahead_by(0))

    record = await ReleaseFetcher(github, clock=lambda: NOW).fetch("acme/gadget:develop")

    assert github.calls[-1] == ("compare", "acme", "gadget", "v1.2.0", "develop")
    assert record.unreleased_commits == 0


@pytest.mark.asyncio
async def test_latest_release_failure():
    cause = GitHubAPIError("not found", status_code=404, github_error="repository_not_found")
    github = DummyGitHubService(release_error=cause)

    with pytest.raises(FetchError) as exc_info:
        await ReleaseFetcher(github).fetch("acme/widget")

    assert exc_info.value.phase == "latest-release"
    assert exc_info.value.cause is cause
    assert exc_info.value.repo.full_name == "acme/widget"
    # The comparison is never attempted without a tag
    assert [call[0] for call in github.calls] == ["latest"]


@pytest.mark.asyncio
async def test_compare_failure():
    cause = GitHubAPIError("boom", github_error="network_error")
    github = DummyGitHubService(release=widget_release(), compare_error=cause)

    with pytest.raises(FetchError) as exc_info:
        await ReleaseFetcher(github).fetch("acme/widget")

    assert exc_info.value.phase == "compare"
    assert exc_info.value.cause is cause


@pytest.mark.asyncio
async def test_malformed_spec_propagates_unchanged():
    github = DummyGitHubService()

    with pytest.raises(MalformedRepoSpec):
        await ReleaseFetcher(github).fetch("acme/widget/extra")

    assert github.calls == []


def test_format_age():
    assert format_age(NOW - timedelta(days=3), NOW) == "3 days ago"
    assert format_age(NOW - timedelta(hours=1), NOW) == "an hour ago"
    assert format_age(NOW + timedelta(minutes=5), NOW) == "now"
    assert format_age(None, NOW) == "never"


def test_format_age_treats_naive_datetimes_as_utc():
    assert format_age(datetime(2026, 10, 16, 12, 0), NOW) == "3 days ago"
