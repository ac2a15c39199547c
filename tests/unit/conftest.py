"""Shared fixtures for unit tests."""

from __future__ import annotations

import base64
import hashlib
import itertools
import json
from typing import TYPE_CHECKING, Any

import pytest

from benchmarkdotnet_publisher.core.config import PublishOptions
from benchmarkdotnet_publisher.core.exceptions import GitHubApiError
from benchmarkdotnet_publisher.core.types import RepositoryRef

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

REPO = "octocat/benchmarks"
SHA = "6dcb09b5b57875f334f61aebed695e2e4193db5e"
MAIN_SHA = "7fd1a60b01f91b314f59955a4e4d4e80d8edf11d"


def _not_found() -> GitHubApiError:
    return GitHubApiError('GitHub API error: 404 - {"message": "Not Found"}', status_code=404)


def _blob_sha(content: str) -> str:
    data = content.encode("utf-8")
    return hashlib.sha1(b"blob %d\0" % len(data) + data).hexdigest()


class FakeGitHub:
    """In-memory GitHub implementing GitHubProtocol for a single repository.

    Attributes:
        files: File content by (branch, path).
        branches: Commit SHA by branch name.
        interleaved_writes: Contents written by another publisher just before
            each of the next put_content calls, one per call.
        large_files: Paths returned without inline content.
    """

    def __init__(self, default_branch: str = "main") -> None:
        self.default_branch = default_branch
        self.branches: dict[str, str] = {default_branch: MAIN_SHA}
        self.files: dict[tuple[str, str], str] = {}
        self.commits: dict[str, dict[str, Any]] = {}
        self.pulls: dict[str, list[dict[str, Any]]] = {}
        self.issue_comments: dict[int, list[dict[str, Any]]] = {}
        self.commit_comments: list[dict[str, Any]] = []
        self.created_refs: list[tuple[str, str]] = []
        self.interleaved_writes: list[str] = []
        self.large_files: set[str] = set()
        self.put_messages: list[str] = []
        self.read_count = 0
        self.put_count = 0
        self.errors: dict[str, GitHubApiError] = {}
        self._ids = itertools.count(1)

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.errors:
            raise self.errors[operation]

    def _commit_file(self, branch: str, path: str, content: str) -> str:
        self.files[(branch, path)] = content
        commit_sha = hashlib.sha1(f"{branch}:{path}:{content}".encode()).hexdigest()
        self.branches[branch] = commit_sha
        return commit_sha

    def seed(self, branch: str, path: str, document: dict[str, Any]) -> None:
        """Store a document as if it had been published earlier."""
        self.branches.setdefault(branch, MAIN_SHA)
        self._commit_file(branch, path, json.dumps(document, indent=2))

    def document(self, branch: str = "gh-pages", path: str = "data.json") -> dict[str, Any]:
        """Get a stored document."""
        data: dict[str, Any] = json.loads(self.files[(branch, path)])
        return data

    async def get_content(self, repo: RepositoryRef, path: str, ref: str) -> dict[str, Any]:
        self._maybe_fail("get_content")
        self.read_count += 1
        if ref not in self.branches or (ref, path) not in self.files:
            raise _not_found()

        content = self.files[(ref, path)]
        encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
        if path in self.large_files:
            return {"sha": _blob_sha(content), "size": len(content), "content": "", "encoding": "none"}
        return {"sha": _blob_sha(content), "size": len(content), "content": encoded, "encoding": "base64"}

    async def get_blob(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        for content in self.files.values():
            if _blob_sha(content) == sha:
                encoded = base64.b64encode(content.encode("utf-8")).decode("ascii")
                return {"sha": sha, "content": encoded, "encoding": "base64"}
        raise _not_found()

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
        self._maybe_fail("put_content")
        self.put_count += 1
        if branch not in self.branches:
            raise _not_found()

        if self.interleaved_writes:
            self._commit_file(branch, path, self.interleaved_writes.pop(0))

        existing = self.files.get((branch, path))
        if existing is not None and sha is None:
            raise GitHubApiError("GitHub API error: 422 - sha wasn't supplied", status_code=422)
        if existing is not None and sha != _blob_sha(existing):
            raise GitHubApiError(f"GitHub API error: 409 - {path} does not match {sha}", status_code=409)

        commit_sha = self._commit_file(branch, path, content)
        self.put_messages.append(message)
        return {"content": {"sha": _blob_sha(content)}, "commit": {"sha": commit_sha}}

    async def get_branch(self, repo: RepositoryRef, branch: str) -> dict[str, Any]:
        self._maybe_fail("get_branch")
        if branch not in self.branches:
            raise _not_found()
        return {"name": branch, "commit": {"sha": self.branches[branch]}}

    async def get_repository(self, repo: RepositoryRef) -> dict[str, Any]:
        return {"full_name": repo.full_name, "default_branch": self.default_branch}

    async def create_ref(self, repo: RepositoryRef, ref: str, sha: str) -> dict[str, Any]:
        self.created_refs.append((ref, sha))
        self.branches[ref.removeprefix("refs/heads/")] = sha
        return {"ref": ref, "object": {"sha": sha}}

    async def get_commit(self, repo: RepositoryRef, sha: str) -> dict[str, Any]:
        if sha in self.commits:
            return self.commits[sha]
        return {
            "sha": sha,
            "html_url": f"https://github.com/{repo}/commit/{sha}",
            "commit": {
                "message": "Improve parsing performance",
                "author": {"name": "Mona Lisa", "email": "mona@github.com", "date": "2024-01-15T10:00:00Z"},
                "committer": {"name": "GitHub", "email": "noreply@github.com", "date": "2024-01-15T10:00:00Z"},
            },
            "author": {"login": "octocat"},
            "committer": {"login": "web-flow"},
        }

    async def list_pull_requests_for_commit(self, repo: RepositoryRef, sha: str) -> list[dict[str, Any]]:
        return list(self.pulls.get(sha, []))

    async def list_issue_comments(self, repo: RepositoryRef, issue_number: int) -> list[dict[str, Any]]:
        return [dict(comment) for comment in self.issue_comments.get(issue_number, [])]

    async def create_issue_comment(self, repo: RepositoryRef, issue_number: int, body: str) -> dict[str, Any]:
        comment = {"id": next(self._ids), "body": body}
        self.issue_comments.setdefault(issue_number, []).append(comment)
        return dict(comment)

    async def update_issue_comment(self, repo: RepositoryRef, comment_id: int, body: str) -> dict[str, Any]:
        for comments in self.issue_comments.values():
            for comment in comments:
                if comment["id"] == comment_id:
                    comment["body"] = body
                    return dict(comment)
        raise _not_found()

    async def create_commit_comment(self, repo: RepositoryRef, sha: str, body: str) -> dict[str, Any]:
        comment = {"id": next(self._ids), "commit_id": sha, "body": body}
        self.commit_comments.append(comment)
        return dict(comment)


def bdn_benchmark(
    full_name: str,
    mean: float | None = 150,
    stddev: float = 5,
    allocated: int | None = None,
) -> dict[str, Any]:
    """Build a benchmark as written by BenchmarkDotNet's JSON exporter."""
    benchmark: dict[str, Any] = {
        "DisplayInfo": f"{full_name}: DefaultJob",
        "Method": full_name.rsplit(".", 1)[-1],
        "FullName": full_name,
    }
    if mean is not None:
        benchmark["Statistics"] = {"N": 15, "Min": mean - stddev, "Mean": mean, "StandardDeviation": stddev}
    if allocated is not None:
        benchmark["Memory"] = {
            "Gen0Collections": 1,
            "Gen1Collections": 0,
            "Gen2Collections": 0,
            "TotalOperations": 1048576,
            "BytesAllocatedPerOperation": allocated,
        }
    return benchmark


@pytest.fixture
def repo() -> RepositoryRef:
    """The repository used in tests."""
    return RepositoryRef.parse(REPO)


@pytest.fixture
def fake_github() -> FakeGitHub:
    """An empty in-memory GitHub."""
    return FakeGitHub()


@pytest.fixture
def artifacts(tmp_path: Path) -> Path:
    """An empty BenchmarkDotNet artifacts directory."""
    path = tmp_path / "BenchmarkDotNet.Artifacts"
    (path / "results").mkdir(parents=True)
    return path


@pytest.fixture
def write_results(artifacts: Path) -> Callable[..., Path]:
    """Write a full compressed JSON export into the artifacts directory."""

    def _write(title: str, benchmarks: list[dict[str, Any]], file_name: str | None = None) -> Path:
        name = file_name or title.split("-", 1)[0]
        path = artifacts / "results" / f"{name}-report-full-compressed.json"
        path.write_text(json.dumps({"Title": title, "Benchmarks": benchmarks}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_options(artifacts: Path) -> Callable[..., PublishOptions]:
    """Build publish options pointing at the artifacts directory."""

    def _make(**overrides: Any) -> PublishOptions:
        values: dict[str, Any] = {
            "access_token": "my-token",
            "repo": REPO,
            "sha": SHA,
            "results_path": artifacts,
            "output_step_summary": False,
        }
        values.update(overrides)
        return PublishOptions(**values)

    return _make


@pytest.fixture
def make_benchmark() -> Callable[..., dict[str, Any]]:
    """Factory for BenchmarkDotNet benchmark payloads."""
    return bdn_benchmark
