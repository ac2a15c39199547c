"""Command-line interface for benchmarkdotnet-results-publisher."""

from __future__ import annotations

from benchmarkdotnet_publisher.cli.main import app

__all__ = ["app"]
