"""Merging of new benchmark results into the history document.

Everything here is pure: no I/O, and the input document is never mutated.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from benchmarkdotnet_publisher.core.types import BenchmarkPoint, DeltaPair, HistoryEntry

if TYPE_CHECKING:
    from collections.abc import Iterable

    from benchmarkdotnet_publisher.core.types import (
        BenchmarkRun,
        CommitDescriptor,
        HistoryDocument,
    )

DURATION_UNIT = "ns"


def _epoch_millis(now: datetime | None) -> int:
    moment = now or datetime.now(timezone.utc)
    return int(moment.timestamp() * 1000)


def suite_name_for(run: BenchmarkRun, override: str | None = None) -> str:
    """Get the name of the suite a run's results are grouped under.

    Without an override, the title is split on its first hyphen and the
    prefix is used, so ``MySuite-20240115-103000`` maps to ``MySuite``.

    Args:
        run: The benchmark run.
        override: Explicit suite name, used as-is when set.

    Returns:
        The suite name.
    """
    if override:
        return override
    return run.title.split("-", 1)[0]


def to_points(run: BenchmarkRun) -> list[BenchmarkPoint]:
    """Convert the benchmarks of a run into history points."""
    points: list[BenchmarkPoint] = []
    for benchmark in run.benchmarks:
        statistics = benchmark.statistics
        point = BenchmarkPoint(
            name=benchmark.full_name,
            value=statistics.mean if statistics else 0,
            unit=DURATION_UNIT,
            range=f"± {statistics.standard_deviation}" if statistics else None,
            bytes_allocated=benchmark.memory.bytes_allocated_per_operation if benchmark.memory else None,
        )
        points.append(point)
    return points


def merge_results(
    document: HistoryDocument,
    runs: Iterable[BenchmarkRun],
    commit: CommitDescriptor,
    *,
    suite_name: str | None = None,
    max_items: int | None = None,
    repo_url: str | None = None,
    now: datetime | None = None,
) -> HistoryDocument:
    """Append one history entry per run to a copy of the document.

    Args:
        document: The existing history document. Not modified.
        runs: The new runs, appended in order.
        commit: The commit attached to every new entry.
        suite_name: Suite name override for all runs.
        max_items: Maximum entries kept per suite; the oldest are dropped.
        repo_url: Repository URL recorded in the document, if given.
        now: The publish time. Defaults to the current time.

    Returns:
        The merged document.

    Example:
        >>> merged = merge_results(HistoryDocument(), [run], commit, max_items=50)
        >>> list(merged.entries)
        ['MySuite']
    """
    timestamp = _epoch_millis(now)
    merged = document.model_copy(deep=True)

    for run in runs:
        name = suite_name_for(run, suite_name)
        suite = merged.entries.setdefault(name, [])
        suite.append(HistoryEntry(commit=commit, date=timestamp, benches=to_points(run)))

        if max_items is not None and len(suite) > max_items:
            del suite[: len(suite) - max_items]

    merged.last_updated = timestamp
    if repo_url:
        merged.repo_url = repo_url

    return merged


def compute_deltas(document: HistoryDocument, suites: Iterable[str]) -> dict[str, list[DeltaPair]]:
    """Pair each suite's newest results with the results before them.

    Points in the newest entry with no same-named point in the previous
    entry are skipped. Suites with fewer than two entries have no pairs.

    Args:
        document: The merged history document.
        suites: Names of the suites to compute deltas for.

    Returns:
        Delta pairs per suite, in the order of the newest entry's points.
    """
    deltas: dict[str, list[DeltaPair]] = {}

    for name in suites:
        if name in deltas:
            continue

        entries = document.entries.get(name, [])
        if len(entries) < 2:
            deltas[name] = []
            continue

        previous = {point.name: point for point in entries[-2].benches}
        deltas[name] = [
            DeltaPair(current=point, previous=previous[point.name])
            for point in entries[-1].benches
            if point.name in previous
        ]

    return deltas
