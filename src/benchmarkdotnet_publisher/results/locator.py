"""Discovery and parsing of BenchmarkDotNet result files.

BenchmarkDotNet writes its exports under ``BenchmarkDotNet.Artifacts/results``.
Only the "full compressed" JSON export (``--exporters json``) carries the
statistics and memory figures needed for publishing.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from benchmarkdotnet_publisher.core.exceptions import ResultsParseError
from benchmarkdotnet_publisher.core.types import BenchmarkRun

logger = logging.getLogger(__name__)

RESULTS_PATTERN = "*-report-full-compressed.json"
SUMMARY_PATTERN = "*-report-github.md"


def _find_files(root: Path, pattern: str) -> list[Path]:
    if not root.is_dir():
        return []

    found: dict[Path, None] = {}
    for candidate in sorted(root.rglob(pattern)):
        resolved = candidate.resolve()
        if resolved.is_file():
            found.setdefault(resolved, None)
    return list(found)


def find_result_files(root: Path) -> list[Path]:
    """Find all BenchmarkDotNet full compressed JSON exports under a directory.

    Args:
        root: The artifacts directory to search recursively.

    Returns:
        Resolved paths of the matching files, in sorted order.
        Empty if the directory does not exist.
    """
    return _find_files(root, RESULTS_PATTERN)


def find_summary_files(root: Path) -> list[Path]:
    """Find all BenchmarkDotNet GitHub Markdown exports under a directory."""
    return _find_files(root, SUMMARY_PATTERN)


def parse_results(path: Path) -> BenchmarkRun:
    """Parse a single BenchmarkDotNet JSON result file.

    Args:
        path: Path to the result file.

    Returns:
        The parsed benchmark run.

    Raises:
        ResultsParseError: If the file is not valid BenchmarkDotNet JSON output.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
        return BenchmarkRun.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.debug(f"Failed to parse '{path}': {e}")
        msg = (
            f"Failed to parse '{path}' as BenchmarkDotNet JSON output. "
            f"Results must be a JSON file generated with the '--exporters json' option: {e}"
        )
        raise ResultsParseError(msg, path=str(path)) from e


def load_results(root: Path) -> dict[Path, BenchmarkRun]:
    """Find and parse all BenchmarkDotNet results under a directory.

    Args:
        root: The artifacts directory to search.

    Returns:
        Mapping of result file path to parsed run, in discovery order.

    Raises:
        ResultsParseError: If any result file cannot be parsed.

    Example:
        >>> runs = load_results(Path("BenchmarkDotNet.Artifacts"))
        >>> for path, run in runs.items():
        ...     print(path.name, len(run.benchmarks))
    """
    paths = find_result_files(root)

    logger.debug(f"Found {len(paths)} BenchmarkDotNet JSON result files.")
    for path in paths:
        logger.debug(f"  - {path}")

    runs: dict[Path, BenchmarkRun] = {}
    for path in paths:
        run = parse_results(path)
        runs[path] = run
        logger.debug(f"Parsed {len(run.benchmarks)} benchmarks from '{run.title}'.")

    return runs
