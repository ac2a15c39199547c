"""Discovery and parsing of BenchmarkDotNet result files.

Example:
    >>> from benchmarkdotnet_publisher.results import load_results
    >>> runs = load_results(Path("BenchmarkDotNet.Artifacts"))
"""

from __future__ import annotations

from benchmarkdotnet_publisher.results.locator import (
    find_result_files,
    find_summary_files,
    load_results,
    parse_results,
)
from benchmarkdotnet_publisher.results.summary import build_step_summary, write_step_summary

__all__ = [
    "build_step_summary",
    "find_result_files",
    "find_summary_files",
    "load_results",
    "parse_results",
    "write_step_summary",
]
