"""Rendering of benchmark numbers as a table, JSON or YAML."""

from __future__ import annotations

import json
from typing import Any, Dict

import yaml
from rich.table import Table

from wordsift.models import METRICS, BenchmarkComparison, BenchmarkResult

FORMATS = ("text", "json", "yaml")


def benchmark_to_dict(result: BenchmarkResult) -> Dict[str, Any]:
    return {"workers": result.worker_count, **result.metrics()}


def comparison_to_dict(comparison: BenchmarkComparison) -> Dict[str, Any]:
    return {
        "baseline": benchmark_to_dict(comparison.baseline),
        "parallel": benchmark_to_dict(comparison.parallel),
        "factors": comparison.factors,
        "speedup": comparison.speedup,
    }


def _format_number(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.5f}"


def benchmark_table(result: BenchmarkResult) -> Table:
    table = Table(title=f"{result.worker_count} worker(s)", show_header=True, header_style="bold magenta")
    table.add_column("Metric")
    table.add_column("Seconds", justify="right")
    for name, value in result.metrics().items():
        table.add_row(name.capitalize(), _format_number(value))
    return table


def summary_table(comparison: BenchmarkComparison) -> Table:
    """Side-by-side table of both runs with the per-metric factor."""
    table = Table(title="Summary Results", show_header=True, header_style="bold magenta")
    table.add_column("")
    table.add_column("1 worker", justify="right")
    table.add_column(f"{comparison.parallel.worker_count} workers", justify="right")
    table.add_column("Factor", justify="right")

    baseline = comparison.baseline.metrics()
    parallel = comparison.parallel.metrics()
    factors = comparison.factors
    for name in METRICS:
        table.add_row(
            name.capitalize(),
            _format_number(baseline[name]),
            _format_number(parallel[name]),
            _format_number(factors[name]),
        )
    table.caption = f"Speedup (real): {_format_number(comparison.speedup)}"
    return table


def render_report(payload: Dict[str, Any], fmt: str) -> str:
    """Serialize a report dict as ``json`` or ``yaml``."""
    if fmt == "json":
        return json.dumps(payload, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False)
    raise ValueError(f"Unsupported report format: {fmt}")
