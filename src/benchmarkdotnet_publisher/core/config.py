"""Configuration management for benchmarkdotnet-results-publisher.

This module provides the immutable PublishOptions value passed to every
component, plus pydantic-settings classes that read the process
environment (the GitHub Actions runner context and tool settings).
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"
DEFAULT_BRANCH = "gh-pages"
DEFAULT_OUTPUT_FILE_PATH = "data.json"
DEFAULT_RESULTS_DIRECTORY = "BenchmarkDotNet.Artifacts"
DEFAULT_THRESHOLD = 2.0
DEFAULT_MAX_ATTEMPTS = 3


class Settings(BaseSettings):
    """Tool settings loaded from environment variables.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        timeout_seconds: Timeout for GitHub API requests.

    Environment Variables:
        BDN_PUBLISHER_LOG_LEVEL: Logging level (default: INFO)
        BDN_PUBLISHER_TIMEOUT_SECONDS: Timeout in seconds (default: 30.0)
    """

    model_config = SettingsConfigDict(
        env_prefix="BDN_PUBLISHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for GitHub API requests in seconds",
    )


class GitHubContext(BaseSettings):
    """The GitHub Actions runner context.

    Read from the ``GITHUB_*`` variables the runner sets for every step.
    Outside of GitHub Actions every field falls back to a default or None.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_",
        case_sensitive=False,
        extra="ignore",
    )

    repository: str | None = Field(default=None, description="The owner/name of the triggering repository")
    sha: str | None = Field(default=None, description="The commit SHA that triggered the workflow")
    api_url: str = Field(default=DEFAULT_API_URL, description="The GitHub REST API URL")
    server_url: str = Field(default=DEFAULT_SERVER_URL, description="The GitHub server URL")
    step_summary: str | None = Field(default=None, description="Path of the job step summary file")
    workspace: str | None = Field(default=None, description="The default working directory of the job")


class PublishOptions(BaseModel):
    """Options for a single publish operation.

    Built once at the CLI boundary and passed by reference into the
    publisher, the history store and the regression evaluator.

    Attributes:
        access_token: GitHub token used for all API requests.
        api_url: GitHub REST API URL.
        branch: Branch the history document is committed to.
        commit_message: Commit message to use instead of a generated one.
        commit_message_prefix: Prefix for generated commit messages.
        comment_on_threshold: Post a comment when a threshold is exceeded.
        fail_on_threshold: Report failure when a threshold is exceeded.
        fail_threshold_duration: Duration threshold, as a ratio of increase.
        fail_threshold_memory: Memory threshold, as a ratio of increase.
        max_items: Maximum number of entries kept per suite (None = unlimited).
        name: Suite name overriding the one derived from the result title.
        output_file_path: Path of the history document in the repository.
        output_step_summary: Write the Markdown results to the step summary.
        repo: The owner/name of the repository the results are pushed to.
        results_path: Directory searched for BenchmarkDotNet result files.
        run_repo: The owner/name of the repository that triggered the run,
            if different from ``repo``.
        server_url: GitHub server URL, used to build the repository URL.
        sha: The commit SHA that triggered the run.
        step_summary_path: Path of the step summary file, if any.
        max_attempts: Read-merge-write attempts before giving up.
        retry_delay: Seconds to wait between attempts.
        timeout_seconds: Timeout for GitHub API requests.

    Example:
        >>> options = PublishOptions(
        ...     access_token="ghp_...",
        ...     repo="octocat/benchmarks",
        ...     sha="6dcb09b5b57875f334f61aebed695e2e4193db5e",
        ...     max_items=100,
        ... )
    """

    model_config = {"frozen": True}

    access_token: str = Field(..., min_length=1, description="GitHub access token")
    api_url: str = Field(default=DEFAULT_API_URL, description="GitHub REST API URL")
    branch: str = Field(default=DEFAULT_BRANCH, description="Target branch")
    commit_message: str | None = Field(default=None, description="Commit message override")
    commit_message_prefix: str | None = Field(default=None, description="Prefix for generated commit messages")
    comment_on_threshold: bool = Field(default=False, description="Comment when a threshold is exceeded")
    fail_on_threshold: bool = Field(default=False, description="Fail when a threshold is exceeded")
    fail_threshold_duration: float = Field(default=DEFAULT_THRESHOLD, ge=0, description="Duration threshold ratio")
    fail_threshold_memory: float = Field(default=DEFAULT_THRESHOLD, ge=0, description="Memory threshold ratio")
    max_items: int | None = Field(default=None, ge=1, description="Maximum entries per suite")
    name: str | None = Field(default=None, description="Suite name override")
    output_file_path: str = Field(default=DEFAULT_OUTPUT_FILE_PATH, description="Path of the history document")
    output_step_summary: bool = Field(default=True, description="Write results to the step summary")
    repo: str = Field(..., description="Target repository (owner/name)")
    results_path: Path = Field(default=Path(DEFAULT_RESULTS_DIRECTORY), description="BenchmarkDotNet artifacts")
    run_repo: str | None = Field(default=None, description="Repository that triggered the run (owner/name)")
    server_url: str = Field(default=DEFAULT_SERVER_URL, description="GitHub server URL")
    sha: str = Field(..., min_length=1, description="Triggering commit SHA")
    step_summary_path: Path | None = Field(default=None, description="Step summary file")
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1, description="Publish attempts")
    retry_delay: float = Field(default=0.0, ge=0, description="Seconds between publish attempts")
    timeout_seconds: float = Field(default=30.0, gt=0, description="GitHub API timeout")

    @field_validator("branch", "output_file_path", mode="before")
    @classmethod
    def _default_when_blank(cls, value: object, info: ValidationInfo) -> object:
        # Unset action inputs arrive as empty strings
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_BRANCH if info.field_name == "branch" else DEFAULT_OUTPUT_FILE_PATH
        return value

    @field_validator("commit_message", "commit_message_prefix", "name", "run_repo", mode="before")
    @classmethod
    def _none_when_blank(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def source_repo(self) -> str:
        """The repository the benchmarked commit belongs to."""
        return self.run_repo or self.repo

    @property
    def repo_url(self) -> str:
        """Web URL of the repository the benchmarks were run for."""
        return f"{self.server_url.rstrip('/')}/{self.source_repo}"
