"""Command line interface for wordsift."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from wordsift.bench.harness import compare, run_benchmark
from wordsift.bench.report import (
    FORMATS,
    benchmark_table,
    benchmark_to_dict,
    comparison_to_dict,
    render_report,
    summary_table,
)
from wordsift.config import (
    DEFAULT_DICTIONARY,
    DEFAULT_OUTPUT,
    WORKERS_ENV_VAR,
    AppConfig,
)
from wordsift.errors import ConfigurationError, DictionaryLoadError, WorkerStallError
from wordsift.ingestion.dictionary import Dictionary, load_dictionary
from wordsift.models import WorkerResult
from wordsift.scan.pipeline import run_pipeline, write_words
from wordsift.utils.files import find_filespecs


console = Console()
app = typer.Typer(help="wordsift - find dictionary words anywhere in a file tree")

USAGE_HINT = "Syntax is wordsift COMMAND [BASE_DIR] [FILEMASK]; quote FILEMASK so the shell does not expand it."


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _validate(config: AppConfig) -> None:
    try:
        config.validate()
    except ConfigurationError as exc:
        raise typer.BadParameter(f"{exc}. {USAGE_HINT}") from exc
    if config.workers is None:
        console.print(
            f"Using the number of CPUs ({config.worker_count}) as the number of workers. "
            f"Set {WORKERS_ENV_VAR} or --workers to override."
        )


def _load_dictionary(config: AppConfig) -> Dictionary:
    try:
        return load_dictionary(config.dictionary_path)
    except DictionaryLoadError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


def _find_filespecs(config: AppConfig) -> List[str]:
    mask = f" matching '{config.filemask}'" if config.filemask else ""
    console.print(f"Finding files under [bold]{config.base_dir}[/bold]{mask}...")
    filespecs = find_filespecs(config.base_dir, config.filemask)
    console.print(f"Found {len(filespecs)} files.")
    return filespecs


def _worker_table(results: List[WorkerResult]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Worker")
    table.add_column("Files", justify="right")
    table.add_column("Unreadable", justify="right")
    table.add_column("Skipped", justify="right")
    table.add_column("Words", justify="right")
    table.add_column("Seconds", justify="right")
    for result in sorted(results, key=lambda r: r.name):
        table.add_row(
            result.name,
            str(result.scanned),
            str(result.failed),
            str(result.skipped),
            str(len(result.words)),
            f"{result.elapsed:.5f}",
        )
    return table


def _build_config(
    base_dir: Path,
    filemask: Optional[str],
    workers: Optional[int],
    policy: str,
    backend: str,
    extractor: str,
    dictionary: Path,
    output: Path,
    log_dir: Optional[Path],
    timeout: Optional[float],
    seed: Optional[int],
) -> AppConfig:
    return AppConfig(
        base_dir=base_dir,
        filemask=filemask,
        workers=workers,
        policy=policy,
        backend=backend,
        extractor=extractor,
        dictionary_path=dictionary,
        output_path=output,
        log_dir=log_dir,
        timeout=timeout,
        seed=seed,
    )


@app.command()
def scan(
    base_dir: Path = typer.Argument(Path("."), help="Directory to scan (default: current directory)."),
    filemask: Optional[str] = typer.Argument(None, help="Quoted file name glob, e.g. '*.rb'."),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", envvar=WORKERS_ENV_VAR, help="Number of workers (default: CPU count)"
    ),
    policy: str = typer.Option("pull", help="Work distribution: pull or static"),
    backend: str = typer.Option("process", help="Worker backend: process or thread"),
    extractor: str = typer.Option("strings", help="Text extractor: strings or builtin"),
    dictionary: Path = typer.Option(DEFAULT_DICTIONARY, "--dictionary", help="Word list file"),
    output: Path = typer.Option(DEFAULT_OUTPUT, "--output", "-o", help="Where to write the words"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Write one log file per worker here"),
    timeout: Optional[float] = typer.Option(None, help="Give up if workers take longer (seconds)"),
    seed: Optional[int] = typer.Option(None, help="Shuffle seed for the static policy"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Scan a file tree and write every dictionary word found."""
    _setup_logging(verbose)
    config = _build_config(
        base_dir, filemask, workers, policy, backend, extractor, dictionary, output, log_dir, timeout, seed
    )
    _validate(config)
    words = _load_dictionary(config)
    filespecs = _find_filespecs(config)

    console.print(f"Scanning with {config.worker_count} {config.backend} worker(s), {config.policy} policy...")
    try:
        with Progress(console=console, transient=True) as progress:
            task = progress.add_task("Sending files", total=len(filespecs) or 1)
            result = run_pipeline(
                filespecs,
                words,
                config,
                on_progress=lambda sent, total: progress.update(task, completed=sent),
            )
    except WorkerStallError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    console.print(_worker_table(result.worker_results))
    path = write_words(result.words, config.output_path)
    console.print(f"Finished. {len(result.words)} words are in [bold]{path}[/bold].")


@app.command()
def benchmark(
    base_dir: Path = typer.Argument(Path("."), help="Directory to scan (default: current directory)."),
    filemask: Optional[str] = typer.Argument(None, help="Quoted file name glob, e.g. '*.rb'."),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", envvar=WORKERS_ENV_VAR, help="Parallel worker count (default: CPU count)"
    ),
    single: bool = typer.Option(False, "--single", help="Only time one run at --workers"),
    policy: str = typer.Option("pull", help="Work distribution: pull or static"),
    backend: str = typer.Option("process", help="Worker backend: process or thread"),
    extractor: str = typer.Option("strings", help="Text extractor: strings or builtin"),
    dictionary: Path = typer.Option(DEFAULT_DICTIONARY, "--dictionary", help="Word list file"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", help="Directory for words-<n>.txt files"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Write one log file per worker here"),
    timeout: Optional[float] = typer.Option(None, help="Give up if workers take longer (seconds)"),
    seed: Optional[int] = typer.Option(None, help="Shuffle seed for the static policy"),
    shuffle_order: bool = typer.Option(
        True, "--shuffle-order/--no-shuffle-order", help="Randomize which run goes first"
    ),
    fmt: str = typer.Option("text", "--format", help="Report format: text, json or yaml"),
    report: Optional[Path] = typer.Option(None, "--report", help="Also write the report to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Time the scan, by default comparing 1 worker against N workers."""
    _setup_logging(verbose)
    if fmt not in FORMATS:
        raise typer.BadParameter(f"Unknown format {fmt!r}; choose from {', '.join(FORMATS)}")
    config = _build_config(
        base_dir, filemask, workers, policy, backend, extractor, dictionary, DEFAULT_OUTPUT, log_dir, timeout, seed
    )
    _validate(config)
    words = _load_dictionary(config)
    filespecs = _find_filespecs(config)

    try:
        if single:
            run = run_benchmark(filespecs, words, config, output_dir=output_dir)
            console.print(benchmark_table(run.benchmark))
            payload = benchmark_to_dict(run.benchmark)
        else:
            comparison = compare(
                filespecs,
                words,
                config,
                workers=config.worker_count,
                randomize_order=shuffle_order,
                output_dir=output_dir,
            )
            console.print(summary_table(comparison))
            payload = comparison_to_dict(comparison)
    except WorkerStallError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if fmt != "text":
        console.print(render_report(payload, fmt), markup=False, highlight=False)
    if report is not None:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(render_report(payload, "yaml" if fmt == "yaml" else "json"), encoding="utf-8")
        console.print(f"Report written to [bold]{report}[/bold].")
    console.print(f"Finished. Words are in {output_dir}/words-<n>.txt.")
