"""High-level API for publishing BenchmarkDotNet results.

This module provides BenchmarksPublisher, which merges new results into
the history document in the target repository and checks them for
regressions against the results published before them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from benchmarkdotnet_publisher.core.exceptions import PublishConflictError
from benchmarkdotnet_publisher.core.types import CommitDescriptor, CommitUser, RepositoryRef
from benchmarkdotnet_publisher.github.client import GitHubClient
from benchmarkdotnet_publisher.history.merger import compute_deltas, merge_results, suite_name_for
from benchmarkdotnet_publisher.history.store import HistoryStore
from benchmarkdotnet_publisher.regression.comments import CommentPoster
from benchmarkdotnet_publisher.regression.evaluator import RegressionEvaluator
from benchmarkdotnet_publisher.regression.models import RegressionReport, RegressionThresholds
from benchmarkdotnet_publisher.results.locator import find_summary_files, load_results
from benchmarkdotnet_publisher.results.summary import build_step_summary, write_step_summary

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from benchmarkdotnet_publisher.core.config import PublishOptions
    from benchmarkdotnet_publisher.core.types import BenchmarkRun, DeltaPair, HistoryDocument
    from benchmarkdotnet_publisher.github.protocols import GitHubProtocol

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Outcome of a publish operation.

    A result with ``failed`` set is still a successful publish: the
    document was written, but thresholds were exceeded and the caller
    asked for that to fail the run.

    Attributes:
        published: Whether any results were written.
        document: The document as written.
        deltas: Delta pairs of each suite that received new results.
        report: The regression report.
        attempts: Number of read-merge-write attempts made.
        failed: Whether the caller should report failure.
        message: Reason for failure, if failed.
    """

    published: bool
    document: HistoryDocument | None = None
    deltas: dict[str, list[DeltaPair]] = field(default_factory=dict)
    report: RegressionReport = field(default_factory=RegressionReport)
    attempts: int = 0
    failed: bool = False
    message: str | None = None


def generate_commit_message(suites: Sequence[str], prefix: str | None = None) -> str:
    """Generate the commit message for a set of published suites.

    Args:
        suites: Names of the suites published, in order. Duplicates are ignored.
        prefix: Optional prefix for the first line.

    Returns:
        The commit message.
    """
    unique = list(dict.fromkeys(suites))
    name = unique[0] if len(unique) == 1 else f"{len(unique)} suites"
    noun = "suite" if len(unique) == 1 else "suites"

    lines = [
        f"{prefix or ''}Publish results for {name}",
        "",
        f"Publish BenchmarkDotNet results for {len(unique)} {noun}.",
        "",
        "---",
        "benchmarks:",
        *[f"- name: {suite}" for suite in unique],
        "...",
        "",
    ]
    return "\n".join(lines)


def to_commit_descriptor(data: dict[str, Any]) -> CommitDescriptor:
    """Convert a GitHub commit API response into a commit descriptor."""
    details: dict[str, Any] = data.get("commit") or {}
    git_author: dict[str, Any] = details.get("author") or {}
    git_committer: dict[str, Any] = details.get("committer") or {}
    author_account: dict[str, Any] = data.get("author") or {}
    committer_account: dict[str, Any] = data.get("committer") or {}

    return CommitDescriptor(
        id=data["sha"],
        message=details.get("message", ""),
        url=data.get("html_url", ""),
        timestamp=git_author.get("date"),
        author=CommitUser(
            name=git_author.get("name"),
            email=git_author.get("email"),
            username=author_account.get("login"),
        ),
        committer=CommitUser(
            name=git_committer.get("name"),
            email=git_committer.get("email"),
            username=committer_account.get("login"),
        ),
    )


class BenchmarksPublisher:
    """Publish BenchmarkDotNet results to a GitHub repository.

    The history document is updated with optimistic concurrency: it is
    read with its fingerprint, merged in memory, and written only if the
    fingerprint still matches. On a conflict the whole cycle is retried
    with a fresh read, up to ``options.max_attempts`` times.

    Example:
        >>> async with GitHubClient(token=options.access_token) as github:
        ...     result = await BenchmarksPublisher(options, github).publish()
        >>> if result.failed:
        ...     print(result.message)
    """

    def __init__(self, options: PublishOptions, github: GitHubProtocol | None = None) -> None:
        """Initialize with options and a GitHub client.

        Args:
            options: The publish options.
            github: GitHub client (default: GitHubClient for the options).
        """
        self._options = options
        self._github: GitHubProtocol = github or GitHubClient(
            token=options.access_token,
            api_url=options.api_url,
            timeout=options.timeout_seconds,
        )
        self._store = HistoryStore(self._github)

    def _commit_message(self, suites: Sequence[str]) -> str:
        if self._options.commit_message:
            return self._options.commit_message
        return generate_commit_message(suites, self._options.commit_message_prefix)

    async def get_commit(self, repo: RepositoryRef, sha: str) -> CommitDescriptor:
        """Fetch the commit the results were produced from."""
        data = await self._github.get_commit(repo, sha)
        return to_commit_descriptor(data)

    async def update_results(
        self,
        runs: dict[Path, BenchmarkRun],
        commit: CommitDescriptor,
    ) -> tuple[HistoryDocument, int]:
        """Merge runs into the history document and write it.

        Args:
            runs: The parsed runs, in discovery order.
            commit: The commit attached to the new entries.

        Returns:
            The document as written and the number of attempts taken.

        Raises:
            PublishConflictError: If every attempt hit a write conflict.
            GitHubApiError: If any other API request fails.
        """
        options = self._options
        repo = RepositoryRef.parse(options.repo)
        suites = [suite_name_for(run, options.name) for run in runs.values()]
        message = self._commit_message(suites)

        for attempt in range(1, options.max_attempts + 1):
            stored = await self._store.read(repo, options.branch, options.output_file_path)
            merged = merge_results(
                stored.document,
                runs.values(),
                commit,
                suite_name=options.name,
                max_items=options.max_items,
                repo_url=options.repo_url,
            )

            written = await self._store.conditional_write(
                repo,
                options.branch,
                options.output_file_path,
                merged,
                stored.fingerprint,
                message,
            )
            if written:
                return merged, attempt

            logger.warning(
                f"{options.output_file_path} was updated by another writer "
                f"(attempt {attempt} of {options.max_attempts})."
            )
            if attempt < options.max_attempts and options.retry_delay > 0:
                await asyncio.sleep(options.retry_delay)

        msg = f"Failed to publish benchmark results after {options.max_attempts} attempts."
        raise PublishConflictError(msg, attempts=options.max_attempts)

    def _write_step_summary(self, report: RegressionReport) -> None:
        options = self._options
        if not options.output_step_summary or options.step_summary_path is None:
            return
        content = build_step_summary(find_summary_files(options.results_path), report)
        write_step_summary(options.step_summary_path, content)

    async def publish(self) -> PublishResult:
        """Publish all results found in the results directory.

        Returns:
            The outcome. If no results were found nothing is written and
            ``published`` is False.

        Raises:
            ResultsParseError: If a result file cannot be parsed.
            PublishConflictError: If the document could not be written.
            GitHubApiError: If a GitHub API request fails.
        """
        options = self._options
        runs = load_results(options.results_path)

        if not runs:
            logger.warning("No benchmarks found to publish.")
            return PublishResult(published=False)

        logger.info(f"Publishing results from {len(runs)} BenchmarkDotNet result files.")

        source = RepositoryRef.parse(options.source_repo)
        commit = await self.get_commit(source, options.sha)
        document, attempts = await self.update_results(runs, commit)

        suites = [suite_name_for(run, options.name) for run in runs.values()]
        deltas = compute_deltas(document, suites)

        evaluator = RegressionEvaluator(
            RegressionThresholds(
                duration=options.fail_threshold_duration,
                memory=options.fail_threshold_memory,
            )
        )
        report = evaluator.evaluate(deltas)

        if report.has_regressions and options.comment_on_threshold:
            await CommentPoster(self._github).post(source, options.sha, report)

        self._write_step_summary(report)

        result = PublishResult(
            published=True,
            document=document,
            deltas=deltas,
            report=report,
            attempts=attempts,
        )

        if report.has_regressions and options.fail_on_threshold:
            result.failed = True
            result.message = f"{report.count} benchmark(s) exceeded the configured thresholds."

        logger.info(f"Published results for {len(deltas)} suites to {options.repo}@{options.branch}.")
        return result
