"""Job step summary output.

BenchmarkDotNet's GitHub Markdown exporter writes one ``*-report-github.md``
file per benchmark class. These are appended to the job summary under a
heading per file, followed by the regression table if there is one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from benchmarkdotnet_publisher.regression.comments import render_report

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from benchmarkdotnet_publisher.regression.models import RegressionReport

logger = logging.getLogger(__name__)

SUMMARY_SUFFIX = "-report-github"


def summary_title(path: Path) -> str:
    """Get the heading for a Markdown export, e.g. ``MySuite.Benchmarks``."""
    stem = path.stem
    if stem.endswith(SUMMARY_SUFFIX):
        stem = stem[: -len(SUMMARY_SUFFIX)]
    return stem


def build_step_summary(files: Iterable[Path], report: RegressionReport | None = None) -> str:
    """Build the Markdown for the step summary.

    Args:
        files: The Markdown exports to include.
        report: Regression report to append, if any regressions were found.

    Returns:
        The summary Markdown, empty if there is nothing to write.
    """
    sections: list[str] = []

    for path in files:
        content = path.read_text(encoding="utf-8-sig").strip()
        sections.append(f"## {summary_title(path)}\n\n{content}\n")

    if report is not None and report.has_regressions:
        sections.append(render_report(report))

    return "\n".join(sections)


def write_step_summary(path: Path, content: str) -> None:
    """Append content to the step summary file."""
    if not content:
        return

    with path.open("a", encoding="utf-8") as f:
        f.write(content)
        if not content.endswith("\n"):
            f.write("\n")

    logger.debug(f"Wrote {len(content)} characters to the step summary.")
