"""GitHub REST API access."""

from __future__ import annotations

from benchmarkdotnet_publisher.github.client import GitHubClient
from benchmarkdotnet_publisher.github.protocols import GitHubProtocol

__all__ = [
    "GitHubClient",
    "GitHubProtocol",
]
