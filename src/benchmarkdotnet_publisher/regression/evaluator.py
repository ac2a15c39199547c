"""Regression evaluator for published benchmark results.

This module provides the RegressionEvaluator class, which compares each
benchmark's newest result with the one recorded before it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from benchmarkdotnet_publisher.regression.models import (
    RegressionKind,
    RegressionRecord,
    RegressionReport,
    RegressionThresholds,
)

if TYPE_CHECKING:
    from benchmarkdotnet_publisher.core.types import DeltaPair

logger = logging.getLogger(__name__)


class RegressionEvaluator:
    """Detect regressions between consecutive benchmark results.

    Duration and memory are evaluated independently, so one benchmark can
    produce zero, one or two regressions.

    Attributes:
        thresholds: Thresholds for regression detection.

    Example:
        >>> evaluator = RegressionEvaluator(RegressionThresholds(duration=1.0))
        >>> report = evaluator.evaluate(deltas)
        >>> if report.has_regressions:
        ...     print(report.summary())
    """

    def __init__(self, thresholds: RegressionThresholds | None = None) -> None:
        """Initialize evaluator.

        Args:
            thresholds: Thresholds for regression detection. Defaults to RegressionThresholds().
        """
        self.thresholds = thresholds or RegressionThresholds()

    def _check(
        self,
        name: str,
        kind: RegressionKind,
        current: float,
        previous: float,
        threshold: float,
    ) -> RegressionRecord | None:
        # No meaningful ratio against a zero baseline
        if previous == 0:
            return None

        ratio = (current - previous) / previous
        if ratio <= threshold:
            return None

        return RegressionRecord(
            name=name,
            kind=kind,
            current=current,
            previous=previous,
            change_percent=ratio * 100,
            ratio=ratio,
        )

    def evaluate_pair(self, delta: DeltaPair) -> list[RegressionRecord]:
        """Evaluate a single benchmark.

        Args:
            delta: The current and previous result of the benchmark.

        Returns:
            The regressions found, duration first.
        """
        previous = delta.previous
        if previous is None:
            return []

        current = delta.current
        records: list[RegressionRecord] = []

        duration = self._check(current.name, "duration", current.value, previous.value, self.thresholds.duration)
        if duration is not None:
            records.append(duration)

        if current.bytes_allocated is not None and previous.bytes_allocated is not None:
            memory = self._check(
                current.name,
                "memory",
                current.bytes_allocated,
                previous.bytes_allocated,
                self.thresholds.memory,
            )
            if memory is not None:
                records.append(memory)

        return records

    def evaluate(self, deltas: dict[str, list[DeltaPair]]) -> RegressionReport:
        """Evaluate the deltas of every suite.

        Args:
            deltas: Delta pairs grouped by suite name.

        Returns:
            RegressionReport with the regressions of each suite that has any.
        """
        report = RegressionReport(thresholds=self.thresholds)

        for suite, pairs in deltas.items():
            records = [record for pair in pairs for record in self.evaluate_pair(pair)]
            if records:
                report.regressions[suite] = records
                for record in records:
                    logger.warning(f"Benchmark regression in {suite}: {record.message}")

        return report
