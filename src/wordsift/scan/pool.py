"""Pool of isolated workers, each running its own ``FileScanner``."""

from __future__ import annotations

import logging
import multiprocessing
import queue
import threading
import time
from pathlib import Path
from typing import Any, List, Optional, Sequence, Set

from wordsift.errors import QueueProtocolError
from wordsift.ingestion.dictionary import Dictionary
from wordsift.ingestion.extractor import TextExtractor
from wordsift.models import WorkerResult
from wordsift.scan.scanner import FileScanner
from wordsift.scan.work_queue import EXHAUSTED, WorkQueue

LOGGER = logging.getLogger(__name__)


def make_channel(backend: str, maxsize: int = 0) -> Any:
    """Queue suitable for passing values between workers of ``backend``."""
    if backend == "thread":
        return queue.Queue(maxsize=maxsize)
    return multiprocessing.get_context().Queue(maxsize=maxsize)


def _is_filespec(item: Any) -> bool:
    return isinstance(item, str) and len(item) > 0


def _open_worker_log(name: str, log_dir: Optional[Path]) -> Optional[logging.Logger]:
    if log_dir is None:
        return None
    log_dir.mkdir(parents=True, exist_ok=True)
    worker_log = logging.getLogger(f"wordsift.worker.{name}")
    worker_log.setLevel(logging.INFO)
    worker_log.propagate = False
    handler = logging.FileHandler(log_dir / f"{name}.log", mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    worker_log.addHandler(handler)
    return worker_log


def _close_worker_log(worker_log: Optional[logging.Logger]) -> None:
    if worker_log is None:
        return
    for handler in list(worker_log.handlers):
        handler.close()
        worker_log.removeHandler(handler)


def run_worker(
    name: str,
    dictionary: Dictionary,
    work_queue: WorkQueue,
    results: Any,
    extractor: TextExtractor,
    log_dir: Optional[Path] = None,
) -> None:
    """Body of one worker.

    Pulls filespecs until ``EXHAUSTED``, then publishes exactly one
    ``WorkerResult`` on ``results``. The result is published even if the
    loop fails, so the aggregator is never left waiting on a dead worker.
    """
    worker_log: Optional[logging.Logger] = None
    scanner: Optional[FileScanner] = None
    found: Set[str] = set()
    scanned = 0
    skipped = 0
    error: Optional[str] = None
    start = time.perf_counter()

    try:
        worker_log = _open_worker_log(name, log_dir)
        scanner = FileScanner(name, dictionary, extractor)
        while True:
            item = work_queue.next()
            if item is EXHAUSTED:
                break
            if not _is_filespec(item):
                skipped += 1
                LOGGER.warning(
                    "%s: %s", name, QueueProtocolError(f"expected one filespec, got {item!r:.80}")
                )
                continue

            file_start = time.perf_counter()
            if worker_log is not None:
                worker_log.info("%12.5f  Received %s for processing.", file_start - start, item)
            found |= scanner.scan(item)
            scanned += 1
            if worker_log is not None:
                now = time.perf_counter()
                worker_log.info(
                    "%12.5f%12s+%8.5f Completed processing %s", now - start, "", now - file_start, item
                )
    except Exception as exc:
        error = f"{type(exc).__name__}: {exc}"
        raise
    finally:
        elapsed = time.perf_counter() - start
        message = f"Worker {name:<12} duration (secs): {elapsed:.5f}"
        LOGGER.info(message)
        if worker_log is not None:
            worker_log.info(message)
        _close_worker_log(worker_log)
        results.put(
            WorkerResult(
                name=name,
                words=frozenset(found),
                scanned=scanned,
                failed=scanner.failed if scanner is not None else 0,
                skipped=skipped,
                elapsed=elapsed,
                error=error,
            )
        )


class WorkerPool:
    """Starts one worker per work queue and waits for them to finish.

    ``backend`` is ``"process"`` for true parallelism or ``"thread"``; in
    both cases workers exchange values only through queues.
    """

    def __init__(
        self,
        dictionary: Dictionary,
        work_queues: Sequence[WorkQueue],
        results: Any,
        extractor: TextExtractor,
        *,
        backend: str = "process",
        log_dir: Optional[Path] = None,
    ) -> None:
        self.dictionary = dictionary
        self.work_queues = list(work_queues)
        self.results = results
        self.extractor = extractor
        self.backend = backend
        self.log_dir = log_dir
        self.names = [f"worker-{index}" for index in range(len(self.work_queues))]
        self._units: List[Any] = []

    @property
    def size(self) -> int:
        return len(self.work_queues)

    def start(self) -> None:
        LOGGER.info("Starting %d %s worker(s)", self.size, self.backend)
        context = multiprocessing.get_context()
        for name, work_queue in zip(self.names, self.work_queues):
            args = (name, self.dictionary, work_queue, self.results, self.extractor, self.log_dir)
            if self.backend == "thread":
                unit: Any = threading.Thread(target=run_worker, name=name, args=args, daemon=True)
            else:
                unit = context.Process(target=run_worker, name=name, args=args, daemon=True)
            unit.start()
            self._units.append(unit)

    def join(self, timeout: Optional[float] = None) -> None:
        for unit in self._units:
            unit.join(timeout)

    def terminate(self) -> None:
        """Kill process workers; thread workers are daemons and are left behind."""
        for unit in self._units:
            if hasattr(unit, "terminate") and unit.is_alive():
                LOGGER.warning("Terminating stalled worker %s", unit.name)
                unit.terminate()
