"""Core module for benchmarkdotnet-results-publisher.

This module contains the fundamental types, exceptions and configuration
used throughout the package.
"""

from __future__ import annotations

from benchmarkdotnet_publisher.core.config import GitHubContext, PublishOptions, Settings
from benchmarkdotnet_publisher.core.exceptions import (
    ConfigurationError,
    GitHubApiError,
    PublishConflictError,
    PublisherError,
    ResultsParseError,
)
from benchmarkdotnet_publisher.core.types import (
    BenchmarkPoint,
    BenchmarkRun,
    CommitDescriptor,
    CommitUser,
    DeltaPair,
    HistoryDocument,
    HistoryEntry,
    RepositoryRef,
)

__all__ = [
    # Config
    "GitHubContext",
    "PublishOptions",
    "Settings",
    # Exceptions
    "ConfigurationError",
    "GitHubApiError",
    "PublishConflictError",
    "PublisherError",
    "ResultsParseError",
    # Types
    "BenchmarkPoint",
    "BenchmarkRun",
    "CommitDescriptor",
    "CommitUser",
    "DeltaPair",
    "HistoryDocument",
    "HistoryEntry",
    "RepositoryRef",
]
