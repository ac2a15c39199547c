"""benchmarkdotnet-results-publisher: Publish BenchmarkDotNet results to a GitHub repository."""

from __future__ import annotations

from benchmarkdotnet_publisher.core.config import PublishOptions
from benchmarkdotnet_publisher.core.exceptions import PublisherError
from benchmarkdotnet_publisher.publisher import BenchmarksPublisher, PublishResult

__version__ = "1.0.0"
__all__ = [
    "BenchmarksPublisher",
    "PublishOptions",
    "PublishResult",
    "PublisherError",
    "__version__",
]
