"""Throughput measurement of the scan pipeline at different worker counts."""

from __future__ import annotations

import logging
import os
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

from wordsift.config import AppConfig, default_worker_count
from wordsift.ingestion.dictionary import Dictionary
from wordsift.models import BenchmarkComparison, BenchmarkResult, PipelineResult
from wordsift.scan.pipeline import ProgressCallback, run_pipeline, write_words

LOGGER = logging.getLogger(__name__)


class Stopwatch:
    """Measures real time and user/system CPU time of a block.

    CPU times include children that were waited for during the block, which
    covers worker processes and the ``strings`` processes they ran.
    """

    def __init__(self) -> None:
        self._start_times: Optional[os.times_result] = None
        self._start_real = 0.0
        self.user = 0.0
        self.system = 0.0
        self.real = 0.0

    def __enter__(self) -> "Stopwatch":
        self._start_times = os.times()
        self._start_real = time.perf_counter()
        return self

    def __exit__(self, *exc_info: object) -> None:
        real = time.perf_counter() - self._start_real
        end = os.times()
        start = self._start_times
        if start is None:
            raise RuntimeError("Stopwatch used outside a with block")
        self.user = max(0.0, (end.user + end.children_user) - (start.user + start.children_user))
        self.system = max(
            0.0, (end.system + end.children_system) - (start.system + start.children_system)
        )
        self.real = max(0.0, real)

    def result(self, worker_count: int) -> BenchmarkResult:
        return BenchmarkResult(
            worker_count=worker_count,
            user=round(self.user, 3),
            system=round(self.system, 3),
            total=round(self.user + self.system, 3),
            real=round(self.real, 3),
        )


@dataclass(slots=True)
class BenchmarkRun:
    pipeline: PipelineResult
    benchmark: BenchmarkResult
    words_path: Optional[Path] = None


def words_path_for(output_dir: Path, workers: int) -> Path:
    return Path(output_dir) / f"words-{workers}.txt"


def run_benchmark(
    filespecs: Sequence[str],
    dictionary: Dictionary,
    config: AppConfig,
    *,
    output_dir: Optional[Path] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> BenchmarkRun:
    """Run the pipeline once and time it.

    ``filespecs`` is enumerated by the caller, so enumeration is not timed.
    """
    workers = config.worker_count
    LOGGER.info("Benchmarking with %d worker(s)", workers)
    with Stopwatch() as stopwatch:
        pipeline = run_pipeline(filespecs, dictionary, config, on_progress=on_progress)
    benchmark = stopwatch.result(workers)

    words_path = None
    if output_dir is not None:
        words_path = write_words(pipeline.words, words_path_for(output_dir, workers))
    return BenchmarkRun(pipeline=pipeline, benchmark=benchmark, words_path=words_path)


Runner = Callable[..., BenchmarkRun]


def compare(
    filespecs: Sequence[str],
    dictionary: Dictionary,
    config: AppConfig,
    *,
    workers: Optional[int] = None,
    randomize_order: bool = True,
    rng: Optional[random.Random] = None,
    output_dir: Optional[Path] = None,
    runner: Runner = run_benchmark,
) -> BenchmarkComparison:
    """Run once with 1 worker and once with ``workers`` (default: CPU count).

    The two runs happen in random order unless ``randomize_order`` is off,
    in which case the baseline goes first. With one worker there is nothing
    to compare, so the pipeline runs once and both sides share that result.
    """
    parallel_workers = workers if workers is not None else default_worker_count()
    if parallel_workers == 1:
        LOGGER.warning("Only one worker available; comparing a single 1-worker run with itself")
        run = runner(filespecs, dictionary, config.with_workers(1), output_dir=output_dir)
        return BenchmarkComparison(baseline=run.benchmark, parallel=run.benchmark)

    order = [1, parallel_workers]
    if randomize_order and (rng or random.Random()).random() < 0.5:
        order.reverse()

    runs: dict[int, BenchmarkResult] = {}
    for count in order:
        run = runner(filespecs, dictionary, config.with_workers(count), output_dir=output_dir)
        runs[count] = run.benchmark

    return BenchmarkComparison(baseline=runs[1], parallel=runs[parallel_workers])
