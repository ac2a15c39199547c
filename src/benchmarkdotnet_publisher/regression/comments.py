"""Rendering and posting of regression comments.

Comments go to the pull request associated with the commit when there is
an unlocked one, otherwise to the commit itself. Pull request comments
carry a watermark so that later runs update the same comment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from benchmarkdotnet_publisher.regression.formatting import scale_values

if TYPE_CHECKING:
    from benchmarkdotnet_publisher.core.types import RepositoryRef
    from benchmarkdotnet_publisher.github.protocols import GitHubProtocol
    from benchmarkdotnet_publisher.regression.models import RegressionReport

logger = logging.getLogger(__name__)

WATERMARK = "<!-- benchmarkdotnet-results-publisher -->"


@dataclass(frozen=True)
class CommentTarget:
    """Where a regression comment is posted.

    Attributes:
        kind: ``issue`` for a pull request thread, ``commit`` for a commit.
        sha: The commit SHA.
        issue_number: The pull request number when kind is ``issue``.
    """

    kind: Literal["issue", "commit"]
    sha: str
    issue_number: int | None = None


def render_report(report: RegressionReport, sha: str | None = None) -> str:
    """Render a regression report as Markdown.

    Args:
        report: The report to render.
        sha: The commit the results were produced from.

    Returns:
        The Markdown body, starting with the watermark.
    """
    thresholds = report.thresholds
    intro = "Performance regressions were detected"
    if sha:
        intro += f" for commit {sha}"

    lines = [
        WATERMARK,
        "",
        "## :warning: Benchmark Regressions",
        "",
        f"{intro}.",
        "",
        f"Thresholds: duration `{thresholds.duration:g}`, memory `{thresholds.memory:g}` (ratio of increase).",
    ]

    for suite, records in report.regressions.items():
        lines.extend(
            [
                "",
                f"### {suite}",
                "",
                "| Benchmark | Metric | Previous | Current | Change |",
                "|:----------|:-------|---------:|--------:|-------:|",
            ]
        )
        for record in records:
            previous, current = scale_values(record.previous, record.current, record.kind)
            lines.append(
                f"| `{record.name}` | {record.kind.capitalize()} | {previous} | {current} "
                f"| +{record.change_percent:.1f}% |"
            )

    lines.append("")
    return "\n".join(lines)


class CommentPoster:
    """Post regression reports to GitHub.

    Example:
        >>> poster = CommentPoster(github)
        >>> await poster.post(repo, sha, report)
    """

    def __init__(self, github: GitHubProtocol) -> None:
        self._github = github

    async def resolve_target(self, repo: RepositoryRef, sha: str) -> CommentTarget:
        """Find where to comment for a commit."""
        pulls = await self._github.list_pull_requests_for_commit(repo, sha)
        for pull in pulls:
            if not pull.get("locked", False):
                return CommentTarget(kind="issue", sha=sha, issue_number=int(pull["number"]))
        return CommentTarget(kind="commit", sha=sha)

    async def upsert_issue_comment(self, repo: RepositoryRef, issue_number: int, body: str) -> int:
        """Update the watermarked comment on an issue, or create it.

        Returns:
            The ID of the comment.
        """
        if WATERMARK not in body:
            body = f"{WATERMARK}\n{body}"

        comments = await self._github.list_issue_comments(repo, issue_number)
        for comment in comments:
            if WATERMARK in str(comment.get("body") or ""):
                comment_id = int(comment["id"])
                await self._github.update_issue_comment(repo, comment_id, body)
                logger.info(f"Updated comment {comment_id} on #{issue_number}.")
                return comment_id

        created = await self._github.create_issue_comment(repo, issue_number, body)
        comment_id = int(created["id"])
        logger.info(f"Created comment {comment_id} on #{issue_number}.")
        return comment_id

    async def post(self, repo: RepositoryRef, sha: str, report: RegressionReport) -> CommentTarget:
        """Render a report and post it for a commit.

        Args:
            repo: The repository the commit belongs to.
            sha: The commit SHA.
            report: The regression report.

        Returns:
            Where the comment was posted.
        """
        body = render_report(report, sha)
        target = await self.resolve_target(repo, sha)

        if target.kind == "issue" and target.issue_number is not None:
            await self.upsert_issue_comment(repo, target.issue_number, body)
        else:
            await self._github.create_commit_comment(repo, sha, body)
            logger.info(f"Created comment on commit {sha[:7]}.")

        return target
