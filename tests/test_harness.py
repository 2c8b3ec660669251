"""Tests for the benchmark harness."""

from __future__ import annotations

import random
from pathlib import Path
from unittest.mock import patch

import pytest

from wordsift.bench.harness import BenchmarkRun, Stopwatch, compare, run_benchmark, words_path_for
from wordsift.config import AppConfig
from wordsift.ingestion.dictionary import Dictionary
from wordsift.models import BenchmarkResult, PipelineResult

DICTIONARY = Dictionary(["cat", "dog"])


def _fake_runner(timings: dict[int, BenchmarkResult], calls: list[int]):
    def runner(filespecs, dictionary, config, *, output_dir=None):
        calls.append(config.worker_count)
        return BenchmarkRun(
            pipeline=PipelineResult(words=frozenset()),
            benchmark=timings[config.worker_count],
        )

    return runner


class TestStopwatch:
    """Test Stopwatch."""

    def test_measures_non_negative_times(self) -> None:
        with Stopwatch() as stopwatch:
            sum(i * i for i in range(10000))

        result = stopwatch.result(4)
        assert result.worker_count == 4
        assert result.real >= 0
        assert result.user >= 0
        assert result.system >= 0
        assert result.total == pytest.approx(round(stopwatch.user + stopwatch.system, 3))

    def test_includes_children_times(self) -> None:
        """Should add waited-for children CPU time."""
        start = type("T", (), {"user": 1.0, "system": 0.5, "children_user": 0.0, "children_system": 0.0})
        end = type("T", (), {"user": 1.5, "system": 0.75, "children_user": 2.0, "children_system": 1.0})
        with patch("wordsift.bench.harness.os.times", side_effect=[start, end]):
            with Stopwatch() as stopwatch:
                pass

        assert stopwatch.user == pytest.approx(2.5)
        assert stopwatch.system == pytest.approx(1.25)


class TestRunBenchmark:
    """Test run_benchmark."""

    def test_times_and_writes_words(self, tmp_path: Path) -> None:
        tree = tmp_path / "tree"
        tree.mkdir()
        (tree / "a.txt").write_text("cat, dog")
        config = AppConfig(base_dir=tree, workers=2, backend="thread", extractor="builtin")

        run = run_benchmark([str(tree / "a.txt")], DICTIONARY, config, output_dir=tmp_path)

        assert run.benchmark.worker_count == 2
        assert run.pipeline.words == frozenset({"cat", "dog"})
        assert run.words_path == words_path_for(tmp_path, 2)
        assert run.words_path.read_text() == "cat\ndog"

    def test_no_output_dir(self, tmp_path: Path) -> None:
        config = AppConfig(base_dir=tmp_path, workers=1, backend="thread", extractor="builtin")

        run = run_benchmark([], DICTIONARY, config)

        assert run.words_path is None


class TestCompare:
    """Test compare."""

    TIMINGS = {
        1: BenchmarkResult(worker_count=1, user=8.0, system=2.0, total=10.0, real=10.0),
        4: BenchmarkResult(worker_count=4, user=10.0, system=4.0, total=14.0, real=2.5),
    }

    def test_runs_baseline_and_parallel(self) -> None:
        calls: list[int] = []
        config = AppConfig(workers=99)

        comparison = compare(
            [], DICTIONARY, config, workers=4, randomize_order=False, runner=_fake_runner(self.TIMINGS, calls)
        )

        assert calls == [1, 4]
        assert comparison.baseline.worker_count == 1
        assert comparison.parallel.worker_count == 4
        assert comparison.speedup == pytest.approx(4.0)
        assert comparison.speedup >= 1

    def test_factor_per_metric(self) -> None:
        """System factor should divide by baseline system time, not user time."""
        comparison = compare(
            [], DICTIONARY, AppConfig(), workers=4, randomize_order=False, runner=_fake_runner(self.TIMINGS, [])
        )

        factors = comparison.factors
        assert factors["user"] == pytest.approx(10.0 / 8.0)
        assert factors["system"] == pytest.approx(4.0 / 2.0)
        assert factors["system"] != pytest.approx(4.0 / 8.0)
        assert factors["total"] == pytest.approx(1.4)
        assert factors["real"] == pytest.approx(0.25)

    def test_random_order(self) -> None:
        """Should run the parallel pass first for some seeds."""
        orders = set()
        for seed in range(20):
            calls: list[int] = []
            compare(
                [], DICTIONARY, AppConfig(), workers=4, rng=random.Random(seed), runner=_fake_runner(self.TIMINGS, calls)
            )
            orders.add(tuple(calls))

        assert orders == {(1, 4), (4, 1)}

    def test_defaults_to_cpu_count(self) -> None:
        calls: list[int] = []
        timings = dict(self.TIMINGS)
        timings[6] = self.TIMINGS[4]
        with patch("wordsift.bench.harness.default_worker_count", return_value=6):
            compare([], DICTIONARY, AppConfig(), randomize_order=False, runner=_fake_runner(timings, calls))

        assert calls == [1, 6]


class TestStopwatchMisuse:
    def test_exit_without_enter(self) -> None:
        with pytest.raises(RuntimeError, match="outside a with block"):
            Stopwatch().__exit__(None, None, None)


class TestCompareSingleWorker:
    def test_single_worker_runs_once(self) -> None:
        calls: list[int] = []

        comparison = compare(
            [], DICTIONARY, AppConfig(), workers=1, runner=_fake_runner(TestCompare.TIMINGS, calls)
        )

        assert calls == [1]
        assert comparison.baseline == comparison.parallel
        assert comparison.speedup == pytest.approx(1.0)
