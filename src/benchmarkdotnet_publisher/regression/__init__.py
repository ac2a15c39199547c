"""Regression detection module for benchmarkdotnet-results-publisher.

This module detects benchmarks whose duration or memory increased by more
than a threshold compared with the previously published results.

Example:
    >>> from benchmarkdotnet_publisher.regression import RegressionEvaluator, RegressionThresholds
    >>>
    >>> evaluator = RegressionEvaluator(RegressionThresholds(duration=1.0))
    >>> report = evaluator.evaluate(deltas)
    >>> if report.has_regressions:
    ...     print(report.summary())
"""

from __future__ import annotations

from benchmarkdotnet_publisher.regression.comments import WATERMARK, CommentPoster, CommentTarget, render_report
from benchmarkdotnet_publisher.regression.evaluator import RegressionEvaluator
from benchmarkdotnet_publisher.regression.formatting import format_number, scale_values
from benchmarkdotnet_publisher.regression.models import (
    RegressionRecord,
    RegressionReport,
    RegressionThresholds,
)

__all__ = [
    "WATERMARK",
    "CommentPoster",
    "CommentTarget",
    "RegressionEvaluator",
    "RegressionRecord",
    "RegressionReport",
    "RegressionThresholds",
    "format_number",
    "render_report",
    "scale_values",
]
