from datetime import datetime, timezone

import httpx
import pytest

from release_tracker.services.github_service import GitHubAPIError, GitHubService


def make_service(handler, token="secret"):
    return GitHubService(
        api_url="https://api.test",
        token=token,
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_latest_release():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={
            "tag_name": "v1.2.0",
            "name": "Widget 1.2.0",
            "published_at": "2026-10-16T12:00:00Z",
            "html_url": "https://github.com/acme/widget/releases/tag/v1.2.0",
        })

    release = await make_service(handler).get_latest_release("acme", "widget")

    assert seen["url"] == "https://api.test/repos/acme/widget/releases/latest"
    assert seen["auth"] == "token secret"
    assert release.tag_name == "v1.2.0"
    assert release.published_at == datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
    assert release.html_url.endswith("/v1.2.0")


@pytest.mark.asyncio
async def test_no_token_sends_no_authorization_header():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"tag_name": "v1", "published_at": None, "created_at": None})

    release = await make_service(handler, token="").get_latest_release("acme", "widget")

    assert seen["auth"] is None
    assert release.published_at is None


@pytest.mark.asyncio
async def test_compare_commits():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return httpx.Response(200, json={
            "status": "ahead",
            "ahead_by": 4,
            "behind_by": 0,
            "total_commits": 4,
            "html_url": "https://github.com/acme/widget/compare/v1.2.0...main",
        })

    comparison = await make_service(handler).compare_commits("acme", "widget", "v1.2.0", "main")

    assert seen["path"] == "/repos/acme/widget/compare/v1.2.0...main"
    assert comparison.total_commits == 4
    assert comparison.ahead_by == 4
    assert comparison.status == "ahead"


@pytest.mark.asyncio
async def test_missing_release_is_not_found():
    def handler(request):
        return httpx.Response(404, json={"message": "Not Found"})

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).get_latest_release("acme", "nothing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.github_error == "repository_not_found"


@pytest.mark.asyncio
async def test_rate_limited():
    def handler(request):
        return httpx.Response(
            403,
            json={"message": "API rate limit exceeded for 1.2.3.4."},
            headers={"X-RateLimit-Remaining": "0"},
        )

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).get_latest_release("acme", "widget")

    assert exc_info.value.github_error == "rate_limit_exceeded"


@pytest.mark.asyncio
async def test_forbidden():
    def handler(request):
        return httpx.Response(403, json={"message": "Resource not accessible"})

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).compare_commits("acme", "widget", "v1", "main")

    assert exc_info.value.github_error == "access_forbidden"


@pytest.mark.asyncio
async def test_server_error():
    def handler(request):
        return httpx.Response(500, json={"message": "Server Error"})

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).get_latest_release("acme", "widget")

    assert exc_info.value.github_error == "api_error"
    assert "Server Error" in exc_info.value.message


@pytest.mark.asyncio
async def test_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).get_latest_release("acme", "widget")

    assert exc_info.value.github_error == "network_error"


@pytest.mark.asyncio
async def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).get_latest_release("acme", "widget")

    assert exc_info.value.github_error == "timeout"


@pytest.mark.asyncio
async def test_malformed_release_payload():
    def handler(request):
        return httpx.Response(200, json={"name": "no tag"})

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).get_latest_release("acme", "widget")

    assert exc_info.value.github_error == "parse_error"


@pytest.mark.asyncio
async def test_rate_limit_info_failure_returns_empty():
    def handler(request):
        return httpx.Response(401, json={"message": "Bad credentials"})

    assert await make_service(handler).get_rate_limit_info() == {}


@pytest.mark.asyncio
async def test_non_object_comparison_payload():
    def handler(request):
        return httpx.Response(200, json=[1])

    with pytest.raises(GitHubAPIError) as exc_info:
        await make_service(handler).compare_commits("acme", "widget", "v1", "main")

    assert exc_info.value.github_error == "parse_error"
