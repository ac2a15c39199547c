"""Unit tests for regression detection and reporting."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from benchmarkdotnet_publisher.core.types import BenchmarkPoint, DeltaPair
from benchmarkdotnet_publisher.regression import (
    WATERMARK,
    CommentPoster,
    CommentTarget,
    RegressionEvaluator,
    RegressionRecord,
    RegressionReport,
    RegressionThresholds,
    format_number,
    render_report,
    scale_values,
)
from conftest import SHA

if TYPE_CHECKING:
    from benchmarkdotnet_publisher.core.types import RepositoryRef
    from conftest import FakeGitHub


def _pair(
    current: float,
    previous: float | None,
    *,
    current_bytes: int | None = None,
    previous_bytes: int | None = None,
    name: str = "MySuite.Parse",
) -> DeltaPair:
    return DeltaPair(
        current=BenchmarkPoint(name=name, value=current, unit="ns", bytes_allocated=current_bytes),
        previous=(
            BenchmarkPoint(name=name, value=previous, unit="ns", bytes_allocated=previous_bytes)
            if previous is not None
            else None
        ),
    )


def _report() -> RegressionReport:
    return RegressionEvaluator().evaluate({"MySuite": [_pair(350, 100, current_bytes=4096, previous_bytes=1024)]})


# ============================================================================
# Models
# ============================================================================


class TestRegressionThresholds:
    """Tests for RegressionThresholds."""

    def test_defaults(self) -> None:
        """Both thresholds default to 2.0."""
        thresholds = RegressionThresholds()

        assert thresholds.duration == 2.0
        assert thresholds.memory == 2.0


class TestRegressionRecord:
    """Tests for RegressionRecord."""

    def test_message(self) -> None:
        """The message names the benchmark, metric and increase."""
        record = RegressionRecord(
            name="MySuite.Parse", kind="memory", current=4096, previous=1024, change_percent=300.0, ratio=3.0
        )

        assert record.message == "MySuite.Parse memory increased by 300.0% (ratio: 3.00)"


class TestRegressionReport:
    """Tests for RegressionReport."""

    def test_empty(self) -> None:
        """An empty report has no regressions."""
        report = RegressionReport()

        assert not report.has_regressions
        assert report.count == 0
        assert report.summary() == "No regressions detected."

    def test_summary(self) -> None:
        """The summary lists every regression under its suite."""
        report = _report()

        assert report.count == 2
        assert report.summary() == (
            "2 benchmark regression(s) detected:\n"
            "  [MySuite] MySuite.Parse duration increased by 250.0% (ratio: 2.50)\n"
            "  [MySuite] MySuite.Parse memory increased by 300.0% (ratio: 3.00)"
        )


# ============================================================================
# Evaluator
# ============================================================================


class TestRegressionEvaluator:
    """Tests for RegressionEvaluator."""

    def test_above_threshold(self) -> None:
        """An increase above the threshold is a regression."""
        records = RegressionEvaluator().evaluate_pair(_pair(310, 100))

        assert len(records) == 1
        assert records[0].kind == "duration"
        assert records[0].ratio == pytest.approx(2.1)
        assert records[0].change_percent == pytest.approx(210.0)
        assert records[0].current == 310
        assert records[0].previous == 100

    def test_at_threshold(self) -> None:
        """An increase exactly at the threshold is not a regression."""
        assert RegressionEvaluator().evaluate_pair(_pair(300, 100)) == []

    def test_improvement(self) -> None:
        """A decrease is never a regression."""
        assert RegressionEvaluator().evaluate_pair(_pair(10, 100)) == []

    def test_custom_threshold(self) -> None:
        """A lower threshold flags smaller increases."""
        evaluator = RegressionEvaluator(RegressionThresholds(duration=0.5))

        assert evaluator.evaluate_pair(_pair(151, 100))
        assert not evaluator.evaluate_pair(_pair(150, 100))

    def test_zero_previous(self) -> None:
        """A zero previous value is skipped."""
        assert RegressionEvaluator().evaluate_pair(_pair(500, 0)) == []

    def test_no_previous(self) -> None:
        """A benchmark without a previous result is skipped."""
        assert RegressionEvaluator().evaluate_pair(_pair(500, None)) == []

    def test_memory_regression(self) -> None:
        """Memory is checked when both results have allocations."""
        records = RegressionEvaluator().evaluate_pair(_pair(100, 100, current_bytes=4096, previous_bytes=1024))

        assert [(record.kind, record.ratio) for record in records] == [("memory", 3.0)]

    def test_memory_zero_previous(self) -> None:
        """Memory growth from zero allocations is skipped."""
        assert RegressionEvaluator().evaluate_pair(_pair(100, 100, current_bytes=4096, previous_bytes=0)) == []

    def test_memory_requires_both(self) -> None:
        """Memory is not checked when either side has no allocations recorded."""
        assert RegressionEvaluator().evaluate_pair(_pair(100, 100, current_bytes=4096)) == []
        assert RegressionEvaluator().evaluate_pair(_pair(100, 100, previous_bytes=1024)) == []

    def test_duration_and_memory(self) -> None:
        """Duration and memory are reported independently, duration first."""
        records = RegressionEvaluator().evaluate_pair(_pair(350, 100, current_bytes=4096, previous_bytes=1024))

        assert [record.kind for record in records] == ["duration", "memory"]

    def test_memory_threshold(self) -> None:
        """The memory threshold applies to allocations only."""
        evaluator = RegressionEvaluator(RegressionThresholds(duration=10.0, memory=0.1))

        records = evaluator.evaluate_pair(_pair(350, 100, current_bytes=1200, previous_bytes=1000))

        assert [record.kind for record in records] == ["memory"]

    def test_evaluate_groups_by_suite(self, caplog: pytest.LogCaptureFixture) -> None:
        """Only suites with regressions appear in the report, and each is logged."""
        deltas = {
            "Alpha": [_pair(310, 100, name="Alpha.A"), _pair(100, 100, name="Alpha.B")],
            "Beta": [_pair(100, 100, name="Beta.A")],
            "Gamma": [],
        }

        with caplog.at_level(logging.WARNING):
            report = RegressionEvaluator().evaluate(deltas)

        assert list(report.regressions) == ["Alpha"]
        assert [record.name for record in report.regressions["Alpha"]] == ["Alpha.A"]
        assert "Benchmark regression in Alpha: Alpha.A duration increased by 210.0%" in caplog.text

    def test_report_carries_thresholds(self) -> None:
        """The report records the thresholds it was evaluated with."""
        thresholds = RegressionThresholds(duration=1.0, memory=0.5)

        assert RegressionEvaluator(thresholds).evaluate({}).thresholds == thresholds


# ============================================================================
# Formatting
# ============================================================================


class TestFormatting:
    """Tests for value formatting."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (150, "150"),
            (150.0, "150"),
            (1.5, "1.50"),
            (0.25, "0.25"),
            (0.05, "0.05"),
            (0.1, "0.1"),
        ],
    )
    def test_format_number(self, value: float, expected: str) -> None:
        """Integers have no decimals and values above 0.1 have two."""
        assert format_number(value) == expected

    def test_scale_nanoseconds(self) -> None:
        """Small durations stay in nanoseconds."""
        assert scale_values(150, 480, "duration") == ("150 ns", "480 ns")

    def test_scale_milliseconds(self) -> None:
        """Durations are scaled while the smaller value is at least 1000."""
        assert scale_values(1_500_000, 4_500_000, "duration") == ("1.50 ms", "4.50 ms")

    def test_scale_uses_smaller_value(self) -> None:
        """Both values share the unit of the smaller one."""
        assert scale_values(900, 3_000_000, "duration") == ("900 ns", "3000000 ns")

    def test_scale_stops_at_seconds(self) -> None:
        """Seconds is the largest duration unit."""
        previous, current = scale_values(2_000_000_000_000, 7_000_000_000_000, "duration")

        assert previous.startswith("2000")
        assert previous.endswith(" s")
        assert current.startswith("7000")
        assert current.endswith(" s")

    def test_scale_memory(self) -> None:
        """Allocations are scaled through KB and MB."""
        assert scale_values(1024, 4096, "memory") == ("1.02 KB", "4.10 KB")
        assert scale_values(64, 256, "memory") == ("64 bytes", "256 bytes")


# ============================================================================
# Comments
# ============================================================================


class TestRenderReport:
    """Tests for render_report()."""

    def test_render(self) -> None:
        """The report renders as a watermarked Markdown table per suite."""
        body = render_report(_report(), SHA)

        assert body.startswith(WATERMARK)
        assert "## :warning: Benchmark Regressions" in body
        assert f"for commit {SHA}" in body
        assert "Thresholds: duration `2`, memory `2`" in body
        assert "### MySuite" in body
        assert "| `MySuite.Parse` | Duration | 100 ns | 350 ns | +250.0% |" in body
        assert "| `MySuite.Parse` | Memory | 1.02 KB | 4.10 KB | +300.0% |" in body

    def test_render_without_sha(self) -> None:
        """Without a commit, the introduction omits it."""
        body = render_report(_report())

        assert "Performance regressions were detected." in body


class TestCommentPoster:
    """Tests for CommentPoster."""

    @pytest.mark.asyncio
    async def test_commit_comment_without_pull_request(self, fake_github: FakeGitHub, repo: RepositoryRef) -> None:
        """Without a pull request the commit is commented on."""
        target = await CommentPoster(fake_github).post(repo, SHA, _report())

        assert target == CommentTarget(kind="commit", sha=SHA)
        assert len(fake_github.commit_comments) == 1
        assert fake_github.commit_comments[0]["commit_id"] == SHA
        assert WATERMARK in fake_github.commit_comments[0]["body"]

    @pytest.mark.asyncio
    async def test_pull_request_comment(self, fake_github: FakeGitHub, repo: RepositoryRef) -> None:
        """An unlocked pull request receives the comment."""
        fake_github.pulls[SHA] = [{"number": 42, "locked": False}]

        target = await CommentPoster(fake_github).post(repo, SHA, _report())

        assert target == CommentTarget(kind="issue", sha=SHA, issue_number=42)
        assert len(fake_github.issue_comments[42]) == 1
        assert fake_github.commit_comments == []

    @pytest.mark.asyncio
    async def test_locked_pull_request(self, fake_github: FakeGitHub, repo: RepositoryRef) -> None:
        """Locked pull requests are skipped."""
        fake_github.pulls[SHA] = [{"number": 41, "locked": True}]

        target = await CommentPoster(fake_github).post(repo, SHA, _report())

        assert target.kind == "commit"
        assert fake_github.issue_comments == {}
        assert len(fake_github.commit_comments) == 1

    @pytest.mark.asyncio
    async def test_first_unlocked_pull_request(self, fake_github: FakeGitHub, repo: RepositoryRef) -> None:
        """The first unlocked pull request is chosen."""
        fake_github.pulls[SHA] = [{"number": 41, "locked": True}, {"number": 42}, {"number": 43}]

        target = await CommentPoster(fake_github).resolve_target(repo, SHA)

        assert target.issue_number == 42

    @pytest.mark.asyncio
    async def test_upsert_updates_existing(self, fake_github: FakeGitHub, repo: RepositoryRef) -> None:
        """Posting again updates the watermarked comment instead of adding one."""
        fake_github.pulls[SHA] = [{"number": 42, "locked": False}]
        fake_github.issue_comments[42] = [{"id": 900, "body": "Looks good to me"}]
        poster = CommentPoster(fake_github)

        await poster.post(repo, SHA, _report())
        await poster.post(repo, SHA, RegressionEvaluator().evaluate({"MySuite": [_pair(500, 100)]}))

        comments = fake_github.issue_comments[42]
        assert len(comments) == 2
        assert comments[0]["body"] == "Looks good to me"
        assert "+400.0%" in comments[1]["body"]
        assert "Memory" not in comments[1]["body"]

    @pytest.mark.asyncio
    async def test_upsert_adds_watermark(self, fake_github: FakeGitHub, repo: RepositoryRef) -> None:
        """Bodies without the watermark get it prepended."""
        comment_id = await CommentPoster(fake_github).upsert_issue_comment(repo, 7, "plain")

        assert fake_github.issue_comments[7] == [{"id": comment_id, "body": f"{WATERMARK}\nplain"}]
