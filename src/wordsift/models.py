"""Core wordsift data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List


@dataclass(slots=True, frozen=True)
class WorkerResult:
    """Terminal message published by one worker."""

    name: str
    words: FrozenSet[str]
    scanned: int = 0
    failed: int = 0
    skipped: int = 0
    elapsed: float = 0.0
    error: str | None = None


@dataclass(slots=True)
class PipelineResult:
    """Outcome of one full pass over a filespec list."""

    words: FrozenSet[str]
    worker_results: List[WorkerResult] = field(default_factory=list)
    file_count: int = 0

    @property
    def sorted_words(self) -> List[str]:
        return sorted(self.words)

    @property
    def failed(self) -> int:
        return sum(result.failed for result in self.worker_results)


@dataclass(slots=True, frozen=True)
class BenchmarkResult:
    """Timings for one run at a specific worker count, in seconds."""

    worker_count: int
    user: float
    system: float
    total: float
    real: float

    def metrics(self) -> Dict[str, float]:
        return {
            "user": self.user,
            "system": self.system,
            "total": self.total,
            "real": self.real,
        }


METRICS = ("user", "system", "total", "real")


def _ratio(numerator: float, denominator: float) -> float | None:
    if denominator <= 0:
        return None
    return numerator / denominator


@dataclass(slots=True, frozen=True)
class BenchmarkComparison:
    """A 1-worker baseline run paired with an N-worker run."""

    baseline: BenchmarkResult
    parallel: BenchmarkResult

    @property
    def factors(self) -> Dict[str, float | None]:
        """Per-metric ratio of the N-worker run to the baseline.

        Each metric is divided by the same metric of the baseline, so the
        system factor is ``parallel.system / baseline.system``.
        """
        base = self.baseline.metrics()
        par = self.parallel.metrics()
        return {name: _ratio(par[name], base[name]) for name in METRICS}

    @property
    def speedup(self) -> float | None:
        """Wall-clock speedup, greater than 1 when the N-worker run is faster."""
        return _ratio(self.baseline.real, self.parallel.real)
