"""Models for regression detection.

This module provides dataclasses for regression thresholds, the
individual regressions found, and the overall report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

RegressionKind = Literal["duration", "memory"]


@dataclass(frozen=True)
class RegressionThresholds:
    """Thresholds for regression detection.

    Thresholds are ratios of increase over the previous result, not
    multiples: 1.0 flags a benchmark that became twice as slow, and the
    default 2.0 one that became three times as slow.

    Attributes:
        duration: Threshold for the mean duration (default 2.0).
        memory: Threshold for bytes allocated per operation (default 2.0).

    Example:
        >>> thresholds = RegressionThresholds(duration=0.5)  # Flag a 50% slowdown
        >>> thresholds.memory
        2.0
    """

    duration: float = 2.0
    memory: float = 2.0


@dataclass(frozen=True)
class RegressionRecord:
    """A benchmark that exceeded a threshold.

    Attributes:
        name: Full name of the benchmark.
        kind: Whether the duration or the memory regressed.
        current: The current value (nanoseconds or bytes).
        previous: The previous value (nanoseconds or bytes).
        change_percent: Percentage increase over the previous value.
        ratio: Fractional increase over the previous value.

    Example:
        >>> record = RegressionRecord(
        ...     name="MySuite.Benchmarks.Parse",
        ...     kind="duration",
        ...     current=310.0,
        ...     previous=100.0,
        ...     change_percent=210.0,
        ...     ratio=2.1,
        ... )
        >>> record.message
        'MySuite.Benchmarks.Parse duration increased by 210.0% (ratio: 2.10)'
    """

    name: str
    kind: RegressionKind
    current: float
    previous: float
    change_percent: float
    ratio: float

    @property
    def message(self) -> str:
        """Human-readable regression message."""
        return f"{self.name} {self.kind} increased by {self.change_percent:.1f}% (ratio: {self.ratio:.2f})"


@dataclass
class RegressionReport:
    """Result of regression evaluation.

    Attributes:
        regressions: Regressions found, grouped by suite name.
        thresholds: The thresholds used.
    """

    regressions: dict[str, list[RegressionRecord]] = field(default_factory=dict)
    thresholds: RegressionThresholds = field(default_factory=RegressionThresholds)

    @property
    def has_regressions(self) -> bool:
        """Check if any regressions were detected."""
        return any(self.regressions.values())

    @property
    def count(self) -> int:
        """Total number of regressions across all suites."""
        return sum(len(records) for records in self.regressions.values())

    def summary(self) -> str:
        """Generate a human-readable summary.

        Returns:
            Multi-line summary string.
        """
        if not self.has_regressions:
            return "No regressions detected."

        lines = [f"{self.count} benchmark regression(s) detected:"]
        for suite, records in self.regressions.items():
            for record in records:
                lines.append(f"  [{suite}] {record.message}")

        return "\n".join(lines)
