"""Main CLI entry point for benchmarkdotnet-results-publisher.

This module defines the Typer application. Every ``publish`` option can
also be set through the ``INPUT_*`` environment variable GitHub Actions
uses for the matching action input.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from pydantic import ValidationError

from benchmarkdotnet_publisher import __version__
from benchmarkdotnet_publisher.core.config import (
    DEFAULT_RESULTS_DIRECTORY,
    GitHubContext,
    PublishOptions,
    Settings,
)
from benchmarkdotnet_publisher.core.exceptions import ConfigurationError, PublisherError
from benchmarkdotnet_publisher.github.client import GitHubClient
from benchmarkdotnet_publisher.publisher import BenchmarksPublisher, PublishResult

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="benchmarks-publisher",
    help="Publish BenchmarkDotNet results to a GitHub repository.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"benchmarkdotnet-results-publisher v{__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Configure the root logger for console output."""
    logging.basicConfig(
        level=level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main(
    version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Enable debug logging.",
            envvar="RUNNER_DEBUG",
        ),
    ] = False,
) -> None:
    """Publish BenchmarkDotNet results to a GitHub repository."""
    settings = Settings()
    configure_logging("DEBUG" if verbose else settings.log_level)


@app.command()
def version() -> None:
    """Show the current version."""
    typer.echo(f"benchmarkdotnet-results-publisher v{__version__}")


def build_options(
    *,
    repo_token: str | None,
    branch: str | None = None,
    commit_message: str | None = None,
    commit_message_prefix: str | None = None,
    comment_on_threshold: bool = False,
    fail_on_threshold: bool = False,
    fail_threshold_duration: float | None = None,
    fail_threshold_memory: float | None = None,
    max_items: int | None = None,
    name: str | None = None,
    output_file_path: str | None = None,
    output_step_summary: bool = True,
    repo: str | None = None,
    results_path: Path | None = None,
    sha: str | None = None,
    max_attempts: int | None = None,
    context: GitHubContext | None = None,
    settings: Settings | None = None,
) -> PublishOptions:
    """Build publish options from CLI values and the runner environment.

    Raises:
        ConfigurationError: If a required value is missing or a value is invalid.
    """
    context = context or GitHubContext()
    settings = settings or Settings()

    target_repo = repo or context.repository
    commit_sha = sha or context.sha

    if not repo_token:
        raise ConfigurationError("A GitHub access token is required (--repo-token or INPUT_REPO-TOKEN).")
    if not target_repo:
        raise ConfigurationError("The target repository is required (--repo or GITHUB_REPOSITORY).")
    if not commit_sha:
        raise ConfigurationError("The commit SHA is required (--sha or GITHUB_SHA).")

    if results_path is None:
        workspace = Path(context.workspace) if context.workspace else Path.cwd()
        results_path = workspace / DEFAULT_RESULTS_DIRECTORY

    values: dict[str, object] = {
        "access_token": repo_token,
        "api_url": context.api_url,
        "branch": branch,
        "commit_message": commit_message,
        "commit_message_prefix": commit_message_prefix,
        "comment_on_threshold": comment_on_threshold,
        "fail_on_threshold": fail_on_threshold,
        "max_items": max_items,
        "name": name,
        "output_file_path": output_file_path,
        "output_step_summary": output_step_summary,
        "repo": target_repo,
        "results_path": results_path,
        "run_repo": context.repository,
        "server_url": context.server_url,
        "sha": commit_sha,
        "step_summary_path": context.step_summary,
        "timeout_seconds": settings.timeout_seconds,
    }
    if fail_threshold_duration is not None:
        values["fail_threshold_duration"] = fail_threshold_duration
    if fail_threshold_memory is not None:
        values["fail_threshold_memory"] = fail_threshold_memory
    if max_attempts is not None:
        values["max_attempts"] = max_attempts

    try:
        return PublishOptions.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


async def run_publish(options: PublishOptions) -> PublishResult:
    """Publish results with a GitHub client scoped to the operation."""
    async with GitHubClient(
        token=options.access_token,
        api_url=options.api_url,
        timeout=options.timeout_seconds,
    ) as github:
        return await BenchmarksPublisher(options, github).publish()


def _fail(message: str) -> NoReturn:
    # Workflow command, shown as an annotation on the run
    typer.echo(f"::error::{message}", err=True)
    raise typer.Exit(1)


@app.command()
def publish(
    repo_token: Annotated[
        str | None,
        typer.Option("--repo-token", envvar=["INPUT_REPO-TOKEN", "GITHUB_TOKEN"], help="GitHub access token."),
    ] = None,
    branch: Annotated[
        str | None,
        typer.Option("--branch", envvar="INPUT_BRANCH", help="Branch to push the results to [default: gh-pages]."),
    ] = None,
    commit_message: Annotated[
        str | None,
        typer.Option("--commit-message", envvar="INPUT_COMMIT-MESSAGE", help="Commit message to use."),
    ] = None,
    commit_message_prefix: Annotated[
        str | None,
        typer.Option(
            "--commit-message-prefix",
            envvar="INPUT_COMMIT-MESSAGE-PREFIX",
            help="Prefix for generated commit messages.",
        ),
    ] = None,
    comment_on_threshold: Annotated[
        bool,
        typer.Option(
            "--comment-on-threshold/--no-comment-on-threshold",
            envvar="INPUT_COMMENT-ON-THRESHOLD",
            help="Post a comment if a duration or memory threshold is exceeded.",
        ),
    ] = False,
    fail_on_threshold: Annotated[
        bool,
        typer.Option(
            "--fail-on-threshold/--no-fail-on-threshold",
            envvar="INPUT_FAIL-ON-THRESHOLD",
            help="Fail if a duration or memory threshold is exceeded.",
        ),
    ] = False,
    fail_threshold_duration: Annotated[
        float | None,
        typer.Option(
            "--fail-threshold-duration",
            envvar="INPUT_FAIL-THRESHOLD-DURATION",
            help="Duration threshold as a ratio of increase [default: 2.0].",
        ),
    ] = None,
    fail_threshold_memory: Annotated[
        float | None,
        typer.Option(
            "--fail-threshold-memory",
            envvar="INPUT_FAIL-THRESHOLD-MEMORY",
            help="Memory threshold as a ratio of increase [default: 2.0].",
        ),
    ] = None,
    max_items: Annotated[
        int | None,
        typer.Option("--max-items", envvar="INPUT_MAX-ITEMS", help="Maximum number of results kept per suite."),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", envvar="INPUT_NAME", help="Suite name to group the results under."),
    ] = None,
    output_file_path: Annotated[
        str | None,
        typer.Option(
            "--output-file-path",
            envvar="INPUT_OUTPUT-FILE-PATH",
            help="Path of the results file in the repository [default: data.json].",
        ),
    ] = None,
    output_step_summary: Annotated[
        bool,
        typer.Option(
            "--output-step-summary/--no-output-step-summary",
            envvar="INPUT_OUTPUT-STEP-SUMMARY",
            help="Write the Markdown results to the job step summary.",
        ),
    ] = True,
    repo: Annotated[
        str | None,
        typer.Option("--repo", envvar="INPUT_REPO", help="Repository to push the results to (owner/name)."),
    ] = None,
    results_path: Annotated[
        Path | None,
        typer.Option(
            "--results-path",
            envvar="INPUT_RESULTS-PATH",
            help="BenchmarkDotNet results directory [default: ./BenchmarkDotNet.Artifacts].",
        ),
    ] = None,
    sha: Annotated[
        str | None,
        typer.Option("--sha", help="Commit SHA the results were produced from [default: GITHUB_SHA]."),
    ] = None,
    max_attempts: Annotated[
        int | None,
        typer.Option("--max-attempts", help="Attempts to write the results before giving up [default: 3]."),
    ] = None,
) -> None:
    """Publish BenchmarkDotNet results to a GitHub repository.

    Examples:
        benchmarks-publisher publish --repo octocat/benchmarks --sha 6dcb09b
        benchmarks-publisher publish --max-items 100 --fail-on-threshold
    """
    try:
        options = build_options(
            repo_token=repo_token,
            branch=branch,
            commit_message=commit_message,
            commit_message_prefix=commit_message_prefix,
            comment_on_threshold=comment_on_threshold,
            fail_on_threshold=fail_on_threshold,
            fail_threshold_duration=fail_threshold_duration,
            fail_threshold_memory=fail_threshold_memory,
            max_items=max_items,
            name=name,
            output_file_path=output_file_path,
            output_step_summary=output_step_summary,
            repo=repo,
            results_path=results_path,
            sha=sha,
            max_attempts=max_attempts,
        )
        result = asyncio.run(run_publish(options))
    except (PublisherError, OSError) as e:
        logger.error("Failed to publish benchmark results.", exc_info=e)
        _fail(str(e))

    if result.failed:
        logger.error(result.report.summary())
        _fail(result.message or "Benchmark thresholds exceeded.")
