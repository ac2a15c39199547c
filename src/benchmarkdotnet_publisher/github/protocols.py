"""Protocol for the GitHub REST API operations used by the publisher.

The history store and comment poster depend only on this protocol, so any
object implementing these async methods can stand in for the real client.
Methods return the decoded JSON payload of the API response and raise
GitHubApiError on any non-success status.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from benchmarkdotnet_publisher.core.types import RepositoryRef


@runtime_checkable
class GitHubProtocol(Protocol):
    """Protocol for GitHub API clients.

    Example:
        >>> from benchmarkdotnet_publisher.github import GitHubClient
        >>> isinstance(GitHubClient(token="..."), GitHubProtocol)
        True
    """

    async def get_content(self, repo: RepositoryRef, path: str, ref: str) -> dict[str, Any]:
        """Get the content of a file at a ref.

        Raises:
            GitHubApiError: With status 404 if the file or ref does not exist.
        """
        ...

    async def get_blob(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        """Get a git blob by its SHA."""
        ...

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
        """Create or update a file.

        Args:
            repo: The repository.
            path: Path of the file in the repository.
            branch: Branch to commit to.
            content: The new file content (text, encoded by the client).
            message: The commit message.
            sha: Blob SHA of the file being replaced; None to create it.

        Raises:
            GitHubApiError: With status 409 if ``sha`` does not match the
                current file.
        """
        ...

    async def get_branch(self, repo: RepositoryRef, branch: str) -> dict[str, Any]:
        """Get a branch, raising GitHubApiError (404) if it does not exist."""
        ...

    async def get_repository(self, repo: RepositoryRef) -> dict[str, Any]:
        """Get a repository."""
        ...

    async def create_ref(self, repo: RepositoryRef, ref: str, sha: str) -> dict[str, Any]:
        """Create a git reference pointing at a commit."""
        ...

    async def get_commit(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        """Get a commit."""
        ...

    async def list_pull_requests_for_commit(self, repo: RepositoryRef, sha: str) -> list[dict[str, Any]]:
        """List the pull requests associated with a commit."""
        ...

    async def list_issue_comments(self, repo: RepositoryRef, issue_number: int) -> list[dict[str, Any]]:
        """List all comments on an issue or pull request."""
        ...

    async def create_issue_comment(self, repo: RepositoryRef, issue_number: int, body: str) -> dict[str, Any]:
        """Create a comment on an issue or pull request."""
        ...

    async def update_issue_comment(self, repo: RepositoryRef, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an issue comment."""
        ...

    async def create_commit_comment(self, repo: RepositoryRef, sha: str, body: str) -> dict[str, Any]:
        """Create a comment on a commit."""
        ...
