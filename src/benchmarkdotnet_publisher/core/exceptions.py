"""Custom exceptions for benchmarkdotnet-results-publisher.

This module defines the exception hierarchy used throughout the package.
All exceptions inherit from PublisherError for easy catching.
"""

from __future__ import annotations


class PublisherError(Exception):
    """Base exception for all publisher errors.

    Example:
        >>> try:
        ...     await publisher.publish()
        ... except PublisherError as e:
        ...     print(f"Failed to publish benchmark results: {e}")
    """


class ResultsParseError(PublisherError):
    """Raised when a BenchmarkDotNet result file cannot be parsed.

    The message always names the offending file. A malformed artifact
    points at a misconfigured benchmark run, so this is never retried.

    Example:
        >>> raise ResultsParseError("Failed to parse '/tmp/Foo-report-full-compressed.json' ...")
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class GitHubApiError(PublisherError):
    """Raised when a GitHub API request fails.

    Attributes:
        status_code: HTTP status code of the failed response, or None if the
            request never produced a response (connection error, timeout).

    Example:
        >>> raise GitHubApiError("GitHub API error: 404 - Not Found", status_code=404)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_not_found(self) -> bool:
        """Whether the error is an HTTP 404."""
        return self.status_code == 404


class PublishConflictError(PublisherError):
    """Raised when the history document could not be written after all attempts.

    Example:
        >>> raise PublishConflictError("Failed to publish results after 3 attempts.", attempts=3)
    """

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class ConfigurationError(PublisherError):
    """Raised when configuration is invalid or missing.

    Example:
        >>> raise ConfigurationError("Invalid repository 'foo': expected 'owner/name'")
    """
