"""Core type definitions for benchmarkdotnet-results-publisher.

This module defines the data structures for parsed BenchmarkDotNet
results, the persisted history document, and the per-benchmark deltas
used for regression detection.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from benchmarkdotnet_publisher.core.exceptions import ConfigurationError

# ============================================================================
# BenchmarkDotNet results (input)
# ============================================================================


class BenchmarkStatistics(BaseModel):
    """Precomputed statistics of a single benchmark."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mean: int | float = Field(..., alias="Mean", description="Mean duration in nanoseconds")
    standard_deviation: int | float = Field(..., alias="StandardDeviation", description="Standard deviation")


class BenchmarkMemory(BaseModel):
    """Memory diagnoser figures of a single benchmark."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bytes_allocated_per_operation: int = Field(..., alias="BytesAllocatedPerOperation")


class BenchmarkResult(BaseModel):
    """A single benchmark from a BenchmarkDotNet JSON export.

    Attributes:
        full_name: Fully-qualified benchmark name, including parameters.
        statistics: Duration statistics, absent if the benchmark did not run.
        memory: Allocation figures, present when the memory diagnoser was enabled.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    full_name: str = Field(..., alias="FullName")
    statistics: BenchmarkStatistics | None = Field(default=None, alias="Statistics")
    memory: BenchmarkMemory | None = Field(default=None, alias="Memory")


class BenchmarkRun(BaseModel):
    """The contents of one ``*-report-full-compressed.json`` file.

    Example:
        >>> run = BenchmarkRun.model_validate_json(path.read_text())
        >>> run.title
        'MySuite.Benchmarks-20240115-103000'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(..., alias="Title")
    benchmarks: list[BenchmarkResult] = Field(..., alias="Benchmarks")


# ============================================================================
# History document (persisted)
# ============================================================================


class _HistoryModel(BaseModel):
    # Unknown fields written by other tools survive a read-modify-write
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class CommitUser(_HistoryModel):
    """Author or committer of a commit."""

    name: str | None = None
    email: str | None = None
    username: str | None = None


class CommitDescriptor(_HistoryModel):
    """The commit that produced a set of benchmark results.

    Attributes:
        id: The commit SHA.
        message: The commit message.
        url: Web URL of the commit.
        author: The commit author, if known.
        committer: The committer, if known.
        timestamp: ISO 8601 timestamp of the commit, if known.
    """

    id: str
    message: str
    url: str
    author: CommitUser | None = None
    committer: CommitUser | None = None
    timestamp: str | None = None


class BenchmarkPoint(_HistoryModel):
    """One benchmark measurement within a history entry."""

    name: str
    value: int | float
    unit: str
    range: str | None = None
    bytes_allocated: int | None = None


class HistoryEntry(_HistoryModel):
    """One published snapshot of a suite.

    Attributes:
        commit: The commit the results were produced from.
        date: When the entry was published (epoch milliseconds).
        benches: The benchmark measurements, in result-file order.
    """

    commit: CommitDescriptor
    date: int
    benches: list[BenchmarkPoint] = Field(default_factory=list)


class HistoryDocument(_HistoryModel):
    """The merged benchmark history stored in the target repository.

    Entries per suite are ordered oldest first.

    Example:
        >>> document = HistoryDocument()
        >>> document.last_updated
        0
        >>> document.entries
        {}
    """

    last_updated: int = 0
    repo_url: str = ""
    entries: dict[str, list[HistoryEntry]] = Field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize the document as pretty-printed JSON."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)


# ============================================================================
# Regression inputs
# ============================================================================


class DeltaPair(BaseModel):
    """The newest measurement of a benchmark and the one before it."""

    model_config = {"frozen": True}

    current: BenchmarkPoint
    previous: BenchmarkPoint | None = None


class RepositoryRef(BaseModel):
    """Reference to a GitHub repository.

    Example:
        >>> repo = RepositoryRef.parse("octocat/hello-world")
        >>> repo.owner, repo.name
        ('octocat', 'hello-world')
    """

    model_config = {"frozen": True}

    owner: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

    @classmethod
    def parse(cls, slug: str) -> RepositoryRef:
        """Parse an ``owner/name`` slug.

        Raises:
            ConfigurationError: If the slug is not of the form ``owner/name``.
        """
        owner, sep, name = slug.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            raise ConfigurationError(f"Invalid repository '{slug}': expected 'owner/name'")
        return cls(owner=owner, name=name)

    @property
    def full_name(self) -> str:
        """The ``owner/name`` slug."""
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name
