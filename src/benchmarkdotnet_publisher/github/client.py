"""GitHub REST API client for benchmarkdotnet-results-publisher.

This module provides an async client for the subset of the GitHub REST API
the publisher needs, implementing GitHubProtocol.
"""

from __future__ import annotations

import base64
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import httpx

from benchmarkdotnet_publisher.core.config import DEFAULT_API_URL
from benchmarkdotnet_publisher.core.exceptions import GitHubApiError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from benchmarkdotnet_publisher.core.types import RepositoryRef

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
API_VERSION = "2022-11-28"
PAGE_SIZE = 100
USER_AGENT = "benchmarkdotnet-results-publisher"


class GitHubClient:
    """Async client for the GitHub REST API.

    Uses httpx for async HTTP requests with connection pooling.
    Can be used as a context manager (reuses connections) or standalone.

    Attributes:
        api_url: Base URL of the GitHub REST API.
        timeout: Request timeout in seconds.

    Example:
        >>> async with GitHubClient(token="ghp_...") as github:
        ...     commit = await github.get_commit(repo, "6dcb09b5")
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize GitHubClient.

        Args:
            token: Access token sent as a bearer token.
            api_url: Base URL of the GitHub REST API. Defaults to api.github.com.
            timeout: Request timeout in seconds. Defaults to 30.0.
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._client: httpx.AsyncClient | None = None

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": API_VERSION,
        }

    async def __aenter__(self) -> GitHubClient:
        """Enter async context manager, creating a reusable HTTP client."""
        self._client = httpx.AsyncClient(headers=self._headers, timeout=self.timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit async context manager, closing the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[httpx.AsyncClient]:
        """Get an HTTP client for making requests.

        Yields:
            The managed client, or a temporary one outside a context manager.
        """
        if self._client is not None:
            yield self._client
        else:
            async with httpx.AsyncClient(headers=self._headers, timeout=self.timeout) as client:
                yield client

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, translating transport and status errors.

        Raises:
            GitHubApiError: If the request fails or returns a non-success status.
        """
        logger.debug(f"{method} {url}")
        try:
            async with self._get_client() as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response
        except httpx.ConnectError as e:
            msg = f"Failed to connect to GitHub at {self.api_url}: {e}"
            raise GitHubApiError(msg) from e
        except httpx.TimeoutException as e:
            msg = f"Request to GitHub timed out after {self.timeout}s: {e}"
            raise GitHubApiError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"GitHub API error: {e.response.status_code} - {e.response.text}"
            raise GitHubApiError(msg, status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            msg = f"Unexpected error calling GitHub: {e}"
            raise GitHubApiError(msg) from e

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            msg = f"Invalid JSON in GitHub response from {response.request.url}: {e}"
            raise GitHubApiError(msg) from e

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._send(method, f"{self.api_url}{path}", **kwargs)
        data: dict[str, Any] = self._json(response)
        return data

    async def _paginate(self, path: str) -> list[dict[str, Any]]:
        """Fetch every page of a list endpoint by following Link headers."""
        items: list[dict[str, Any]] = []
        url: str | None = f"{self.api_url}{path}"
        params: dict[str, Any] | None = {"per_page": PAGE_SIZE}

        while url:
            response = await self._send("GET", url, params=params)
            items.extend(self._json(response))
            url = response.links.get("next", {}).get("url")
            # The next link already carries the query string
            params = None

        return items

    async def get_content(self, repo: RepositoryRef, path: str, ref: str) -> dict[str, Any]:
        """Get the content of a file at a ref."""
        return await self._request("GET", f"/repos/{repo}/contents/{path.lstrip('/')}", params={"ref": ref})

    async def get_blob(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        """Get a git blob by its SHA."""
        return await self._request("GET", f"/repos/{repo}/git/blobs/{sha}")

    async def put_content(
        self,
        repo: RepositoryRef,
        path: str,
        *,
        branch: str,
        content: str,
        message: str,
        sha: str | None = None,
    ) -> dict[str, Any]:
        """Create or update a file, guarded by the SHA of the file being replaced."""
        payload: dict[str, Any] = {
            "branch": branch,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "message": message,
        }
        if sha is not None:
            payload["sha"] = sha

        return await self._request("PUT", f"/repos/{repo}/contents/{path.lstrip('/')}", json=payload)

    async def get_branch(self, repo: RepositoryRef, branch: str) -> dict[str, Any]:
        """Get a branch."""
        return await self._request("GET", f"/repos/{repo}/branches/{branch}")

    async def get_repository(self, repo: RepositoryRef) -> dict[str, Any]:
        """Get a repository."""
        return await self._request("GET", f"/repos/{repo}")

    async def create_ref(self, repo: RepositoryRef, ref: str, sha: str) -> dict[str, Any]:
        """Create a git reference pointing at a commit."""
        return await self._request("POST", f"/repos/{repo}/git/refs", json={"ref": ref, "sha": sha})

    async def get_commit(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        """Get a commit."""
        return await self._request("GET", f"/repos/{repo}/commits/{sha}")

    async def list_pull_requests_for_commit(self, repo: RepositoryRef, sha: str) -> list[dict[str, Any]]:
        """List the pull requests associated with a commit."""
        return await self._paginate(f"/repos/{repo}/commits/{sha}/pulls")

    async def list_issue_comments(self, repo: RepositoryRef, issue_number: int) -> list[dict[str, Any]]:
        """List all comments on an issue or pull request."""
        return await self._paginate(f"/repos/{repo}/issues/{issue_number}/comments")

    async def create_issue_comment(self, repo: RepositoryRef, issue_number: int, body: str) -> dict[str, Any]:
        """Create a comment on an issue or pull request."""
        return await self._request("POST", f"/repos/{repo}/issues/{issue_number}/comments", json={"body": body})

    async def update_issue_comment(self, repo: RepositoryRef, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an issue comment."""
        return await self._request("PATCH", f"/repos/{repo}/issues/comments/{comment_id}", json={"body": body})

    async def create_commit_comment(self, repo: RepositoryRef, sha: str, body: str) -> dict[str, Any]:
        """Create a comment on a commit."""
        return await self._request("POST", f"/repos/{repo}/commits/{sha}/comments", json={"body": body})
