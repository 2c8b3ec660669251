"""End-to-end scan: filespecs in, global word set out."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from wordsift.config import AppConfig
from wordsift.errors import WorkerStallError
from wordsift.ingestion.dictionary import Dictionary
from wordsift.ingestion.extractor import get_extractor
from wordsift.models import PipelineResult
from wordsift.scan.aggregate import aggregate, collect_results
from wordsift.scan.pool import WorkerPool, make_channel
from wordsift.scan.work_queue import (
    FilespecProducer,
    PullQueue,
    StaticPartitionQueue,
    WorkQueue,
    partition,
)

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def build_work_queues(
    filespecs: Sequence[str],
    config: AppConfig,
    workers: int,
    *,
    on_progress: Optional[ProgressCallback] = None,
) -> tuple[List[WorkQueue], Optional[FilespecProducer]]:
    """Create one work queue per worker for the configured policy."""
    if config.policy == "static":
        batches = partition(filespecs, workers, random.Random(config.seed))
        LOGGER.debug("Static batch sizes: %s", [len(batch) for batch in batches])
        return [StaticPartitionQueue(batch) for batch in batches], None

    channel = make_channel(config.backend, maxsize=2 * workers)
    producer = FilespecProducer(
        filespecs,
        channel,
        workers,
        progress_interval=config.progress_interval,
        on_progress=on_progress,
        log_path=None if config.log_dir is None else Path(config.log_dir) / "producer.log",
    )
    return [PullQueue(channel) for _ in range(workers)], producer


def run_pipeline(
    filespecs: Sequence[str],
    dictionary: Dictionary,
    config: AppConfig,
    *,
    on_progress: Optional[ProgressCallback] = None,
) -> PipelineResult:
    """Scan every filespec with ``config.worker_count`` workers and merge the results."""
    workers = config.worker_count
    extractor = get_extractor(config.extractor, config.strings_command)
    work_queues, producer = build_work_queues(filespecs, config, workers, on_progress=on_progress)
    results_channel = make_channel(config.backend)

    pool = WorkerPool(
        dictionary,
        work_queues,
        results_channel,
        extractor,
        backend=config.backend,
        log_dir=config.log_dir,
    )
    pool.start()
    if producer is not None:
        producer.start()

    try:
        worker_results = collect_results(results_channel, pool.size, config.timeout)
    except WorkerStallError:
        if producer is not None:
            producer.stop()
        pool.terminate()
        raise

    # Every worker has published; filespecs still unsent will never be taken.
    if producer is not None:
        producer.stop()
        producer.join()
    pool.join()

    for result in worker_results:
        if result.error:
            LOGGER.error("%s stopped early: %s", result.name, result.error)

    words = aggregate(result.words for result in worker_results)
    failed = sum(result.failed for result in worker_results)
    LOGGER.info(
        "Found %d distinct words in %d files (%d unreadable)", len(words), len(filespecs), failed
    )
    return PipelineResult(words=words, worker_results=worker_results, file_count=len(filespecs))


def write_words(words: Iterable[str], path: Path) -> Path:
    """Write the sorted words, newline-joined, to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(sorted(words)), encoding="utf-8")
    return path
