"""
GitHub API integration service for fetching release and comparison data.
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from fastapi import status

from release_tracker.config import settings

logger = logging.getLogger(__name__)


@dataclass
class GitHubReleaseData:
    """Data class for GitHub release information."""
    tag_name: str
    published_at: Optional[datetime]
    name: Optional[str] = None
    html_url: Optional[str] = None


@dataclass
class GitHubComparisonData:
    """Data class for a GitHub commit range comparison."""
    status: str
    ahead_by: int
    behind_by: int
    total_commits: int
    html_url: Optional[str] = None


class GitHubAPIError(Exception):
    """Custom exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int = 500, github_error: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.github_error = github_error
        super().__init__(self.message)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class GitHubService:
    """Service for interacting with GitHub API."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or settings.GITHUB_API_URL).rstrip("/")
        self.token = settings.GITHUB_TOKEN if token is None else token
        self.timeout = timeout or settings.TIMEOUT_SECONDS
        self.transport = transport

        # Setup headers for GitHub API
        self.headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"{settings.APP_NAME}/{settings.APP_VERSION}",
        }

        if self.token:
            self.headers["Authorization"] = f"token {self.token}"
        else:
            logger.warning("GitHub token not configured - API rate limits will be lower")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def _get_json(self, path: str, resource: str) -> Dict[str, Any]:
        """
        Perform a GET request against the GitHub API and decode the JSON body.

        Args:
            path: API path, starting with "/"
            resource: Human readable name of what is fetched, used in errors

        Returns:
            Dict: Decoded response body

        Raises:
            GitHubAPIError: On any non-200 response, timeout or network error
        """
        url = f"{self.api_url}{path}"
        try:
            async with self._client() as client:
                response = await client.get(url, headers=self.headers)

                if response.status_code == 200:
                    return response.json()
                elif response.status_code == 404:
                    raise GitHubAPIError(
                        f"{resource} not found",
                        status_code=status.HTTP_404_NOT_FOUND,
                        github_error="repository_not_found"
                    )
                elif response.status_code in (403, 429):
                    error_data = response.json() if response.content else {}
                    if response.status_code == 429 or "rate limit" in error_data.get("message", "").lower():
                        remaining = response.headers.get("X-RateLimit-Remaining", "0")
                        reset_time = response.headers.get("X-RateLimit-Reset", "unknown")

                        logger.warning(
                            f"GitHub API rate limit exceeded. "
                            f"Remaining: {remaining}, Reset: {reset_time}"
                        )

                        raise GitHubAPIError(
                            "GitHub API rate limit exceeded. Please try again later.",
                            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                            github_error="rate_limit_exceeded"
                        )
                    else:
                        raise GitHubAPIError(
                            f"Access forbidden to {resource}",
                            status_code=status.HTTP_403_FORBIDDEN,
                            github_error="access_forbidden"
                        )
                else:
                    error_data = response.json() if response.content else {}
                    error_message = error_data.get("message", f"HTTP {response.status_code}")

                    raise GitHubAPIError(
                        f"GitHub API error for {resource}: {error_message}",
                        status_code=status.HTTP_502_BAD_GATEWAY,
                        github_error="api_error"
                    )

        except GitHubAPIError:
            raise
        except httpx.TimeoutException:
            raise GitHubAPIError(
                f"GitHub API request for {resource} timed out",
                status_code=status.HTTP_504_GATEWAY_TIMEOUT,
                github_error="timeout"
            )
        except httpx.RequestError as e:
            raise GitHubAPIError(
                f"Failed to connect to GitHub API: {e}",
                status_code=status.HTTP_502_BAD_GATEWAY,
                github_error="network_error"
            )
        except ValueError as e:
            raise GitHubAPIError(
                f"Invalid JSON from GitHub API for {resource}: {e}",
                status_code=status.HTTP_502_BAD_GATEWAY,
                github_error="parse_error"
            )

    async def get_latest_release(self, owner: str, repo: str) -> GitHubReleaseData:
        """
        Fetch the latest published release of a repository.

        Drafts and prereleases are never returned by this endpoint.

        Args:
            owner: Repository owner username
            repo: Repository name

        Returns:
            GitHubReleaseData: Tag name and publish time of the latest release

        Raises:
            GitHubAPIError: If the repository has no release or an API error occurs
        """
        data = await self._get_json(
            f"/repos/{owner}/{repo}/releases/latest",
            f"latest release of {owner}/{repo}",
        )
        return self._parse_release_data(data)

    def _parse_release_data(self, data: Dict[str, Any]) -> GitHubReleaseData:
        try:
            return GitHubReleaseData(
                tag_name=data["tag_name"],
                published_at=_parse_timestamp(data.get("published_at") or data.get("created_at")),
                name=data.get("name"),
                html_url=data.get("html_url"),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error parsing GitHub release data: {e}")
            raise GitHubAPIError(
                "Failed to parse GitHub release data",
                status_code=status.HTTP_502_BAD_GATEWAY,
                github_error="parse_error"
            )

    async def compare_commits(self, owner: str, repo: str, base: str, head: str) -> GitHubComparisonData:
        """
        Compare two refs of a repository.

        Args:
            owner: Repository owner username
            repo: Repository name
            base: Base ref, usually a release tag
            head: Head ref, usually a branch

        Returns:
            GitHubComparisonData: Commit counts between base and head

        Raises:
            GitHubAPIError: If either ref is unknown or an API error occurs
        """
        refs = f"{quote(base, safe='/')}...{quote(head, safe='/')}"
        data = await self._get_json(
            f"/repos/{owner}/{repo}/compare/{refs}",
            f"comparison {base}...{head} of {owner}/{repo}",
        )
        return self._parse_comparison_data(data)

    def _parse_comparison_data(self, data: Dict[str, Any]) -> GitHubComparisonData:
        try:
            return GitHubComparisonData(
                status=data.get("status", "unknown"),
                ahead_by=int(data.get("ahead_by", 0)),
                behind_by=int(data.get("behind_by", 0)),
                total_commits=int(data["total_commits"]),
                html_url=data.get("html_url"),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error parsing GitHub comparison data: {e}")
            raise GitHubAPIError(
                "Failed to parse GitHub comparison data",
                status_code=status.HTTP_502_BAD_GATEWAY,
                github_error="parse_error"
            )

    async def get_rate_limit_info(self) -> Dict[str, Any]:
        """
        Get current GitHub API rate limit information.

        Returns:
            Dict containing rate limit information
        """
        try:
            url = f"{self.api_url}/rate_limit"

            async with self._client() as client:
                response = await client.get(url, headers=self.headers)

                if response.status_code == 200:
                    return response.json()
                else:
                    logger.warning(f"Failed to get rate limit info: {response.status_code}")
                    return {}

        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Error getting rate limit info: {e}")
            return {}
