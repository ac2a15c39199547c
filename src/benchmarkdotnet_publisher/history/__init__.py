"""Benchmark history module.

This module provides the pure merge of new results into the history
document and the store that reads and conditionally writes it.

Example:
    >>> from benchmarkdotnet_publisher.history import HistoryStore, merge_results
    >>>
    >>> stored = await HistoryStore(github).read(repo, "gh-pages", "data.json")
    >>> merged = merge_results(stored.document, runs, commit, max_items=100)
"""

from __future__ import annotations

from benchmarkdotnet_publisher.history.merger import compute_deltas, merge_results, suite_name_for, to_points
from benchmarkdotnet_publisher.history.store import HistoryStore, StoredHistory

__all__ = [
    "HistoryStore",
    "StoredHistory",
    "compute_deltas",
    "merge_results",
    "suite_name_for",
    "to_points",
]
