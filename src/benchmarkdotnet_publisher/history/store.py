"""Storage of the benchmark history document in a GitHub repository.

The history document is a JSON file committed to a branch. Reads return the
blob SHA of the file alongside the document, and writes pass it back as a
precondition so that concurrent publishers cannot overwrite each other.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from benchmarkdotnet_publisher.core.exceptions import GitHubApiError, PublisherError
from benchmarkdotnet_publisher.core.types import HistoryDocument

if TYPE_CHECKING:
    from benchmarkdotnet_publisher.core.types import RepositoryRef
    from benchmarkdotnet_publisher.github.protocols import GitHubProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredHistory:
    """A history document and the fingerprint it was read at.

    Attributes:
        document: The history document.
        fingerprint: Blob SHA of the stored file, or None if it does not exist yet.
    """

    document: HistoryDocument
    fingerprint: str | None = None


def _decode_content(data: dict[str, Any]) -> str:
    encoding = data.get("encoding") or "base64"
    content = data.get("content") or ""
    if encoding != "base64":
        raise ValueError(f"Unsupported content encoding '{encoding}'")
    return base64.b64decode(content).decode("utf-8-sig")


class HistoryStore:
    """Versioned reads and conditional writes of the history document.

    Example:
        >>> store = HistoryStore(github)
        >>> stored = await store.read(repo, "gh-pages", "data.json")
        >>> written = await store.conditional_write(
        ...     repo, "gh-pages", "data.json", document, stored.fingerprint, "Update benchmarks"
        ... )
    """

    def __init__(self, github: GitHubProtocol) -> None:
        """Initialize with a GitHub client.

        Args:
            github: Client used for all repository operations.
        """
        self._github = github

    async def _branch_exists(self, repo: RepositoryRef, branch: str) -> bool:
        try:
            await self._github.get_branch(repo, branch)
            return True
        except GitHubApiError as e:
            if e.is_not_found:
                return False
            raise

    async def _ensure_branch(self, repo: RepositoryRef, branch: str) -> bool:
        """Create the branch from the default branch if it does not exist.

        Returns:
            True if the branch was just created, by this or a concurrent
            publisher. False if it already existed.
        """
        if await self._branch_exists(repo, branch):
            return False

        repository = await self._github.get_repository(repo)
        try:
            default_branch = repository["default_branch"]
            tip = await self._github.get_branch(repo, default_branch)
            sha = tip["commit"]["sha"]
        except KeyError as e:
            msg = f"Unexpected response from GitHub looking up the default branch of {repo}: missing {e}"
            raise GitHubApiError(msg) from e

        logger.info(f"Creating branch {branch} in {repo} from {default_branch} ({sha[:7]}).")
        try:
            await self._github.create_ref(repo, f"refs/heads/{branch}", sha)
        except GitHubApiError as e:
            # 422 when another publisher created the branch first
            if e.status_code != 422 or not await self._branch_exists(repo, branch):
                raise
            logger.debug(f"Branch {branch} in {repo} was created by another writer.")
        return True

    async def _get_content(self, repo: RepositoryRef, branch: str, path: str) -> dict[str, Any] | None:
        try:
            return await self._github.get_content(repo, path, branch)
        except GitHubApiError as e:
            if e.is_not_found:
                return None
            raise

    async def read(self, repo: RepositoryRef, branch: str, path: str) -> StoredHistory:
        """Read the history document from a branch.

        If the branch does not exist it is created from the repository's
        default branch. If the file does not exist an empty document is
        returned with no fingerprint.

        Args:
            repo: The repository.
            branch: The branch the document is stored on.
            path: Path of the document in the repository.

        Returns:
            The document and its fingerprint.

        Raises:
            GitHubApiError: For any API failure other than not found.
        """
        data = await self._get_content(repo, branch, path)

        if data is None and await self._ensure_branch(repo, branch):
            data = await self._get_content(repo, branch, path)

        if data is None:
            logger.debug(f"No existing results found at {path} on {branch}.")
            return StoredHistory(document=HistoryDocument())

        sha: str = data["sha"]

        # Files over 1 MB come back without inline content
        if data.get("encoding") == "none" or (not data.get("content") and data.get("size", 0) > 0):
            logger.debug(f"Fetching blob {sha} for {path}.")
            data = await self._github.get_blob(repo, sha)

        try:
            text = _decode_content(data)
            document = HistoryDocument.model_validate_json(text) if text.strip() else HistoryDocument()
        except (ValueError, ValidationError) as e:
            msg = f"Failed to parse existing results at {path} on {branch}: {e}"
            raise PublisherError(msg) from e

        logger.debug(f"Read results for {len(document.entries)} suites from {path} on {branch} ({sha[:7]}).")
        return StoredHistory(document=document, fingerprint=sha)

    async def conditional_write(
        self,
        repo: RepositoryRef,
        branch: str,
        path: str,
        document: HistoryDocument,
        expected_fingerprint: str | None,
        message: str,
    ) -> bool:
        """Write the history document if it has not changed since it was read.

        Args:
            repo: The repository.
            branch: The branch to commit to.
            path: Path of the document in the repository.
            document: The document to write.
            expected_fingerprint: Fingerprint returned by read(), None if the
                file did not exist.
            message: The commit message.

        Returns:
            True if the document was committed, False if the file changed
            since it was read.

        Raises:
            GitHubApiError: For any API failure other than a write conflict.
        """
        try:
            response = await self._github.put_content(
                repo,
                path,
                branch=branch,
                content=document.to_json(),
                message=message,
                sha=expected_fingerprint,
            )
        except GitHubApiError as e:
            # 422 when a file now exists that did not when it was read
            if e.status_code == 409 or (e.status_code == 422 and expected_fingerprint is None):
                logger.debug(f"Write conflict updating {path} on {branch}: {e}")
                return False
            raise

        commit_sha = str(response.get("commit", {}).get("sha", ""))
        logger.info(f"Committed results to {path} on {branch} ({commit_sha[:7]}).")
        return True
