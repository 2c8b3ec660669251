"""Work distribution: static partitions and a dynamic pull queue.

Workers only ever call ``next()``, which returns a filespec or
``EXHAUSTED``; they do not know which policy feeds them.
"""

from __future__ import annotations

import enum
import logging
import math
import queue
import random
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, TextIO

LOGGER = logging.getLogger(__name__)


class Signal(enum.Enum):
    # Enum members pickle by name, so identity holds across processes.
    EXHAUSTED = "exhausted"


EXHAUSTED = Signal.EXHAUSTED


class WorkQueue(ABC):
    """Source of filespecs for one worker."""

    @abstractmethod
    def next(self) -> Any:
        """Return the next filespec, or ``EXHAUSTED`` once there are none left."""


def partition(
    filespecs: Sequence[str], count: int, rng: Optional[random.Random] = None
) -> List[List[str]]:
    """Shuffle ``filespecs`` and cut them into exactly ``count`` batches.

    Every batch holds ``ceil(total / count)`` filespecs except the last
    non-empty one, which may be shorter; trailing batches may be empty when
    there are fewer files than batches.
    """
    if count <= 0:
        raise ValueError(f"count must be > 0, got {count}")
    shuffled = list(filespecs)
    (rng or random.Random()).shuffle(shuffled)
    size = max(1, math.ceil(len(shuffled) / count))
    return [shuffled[index * size : (index + 1) * size] for index in range(count)]


class StaticPartitionQueue(WorkQueue):
    """Serves one pre-assigned batch, then ``EXHAUSTED`` forever."""

    def __init__(self, batch: Sequence[str]) -> None:
        self._batch = list(batch)
        self._position = 0

    def __len__(self) -> int:
        return len(self._batch)

    def next(self) -> Any:
        if self._position >= len(self._batch):
            return EXHAUSTED
        filespec = self._batch[self._position]
        self._position += 1
        return filespec


class PullQueue(WorkQueue):
    """Consumer end of a channel fed by a ``FilespecProducer``.

    ``channel`` is anything with a blocking ``get()``: a ``queue.Queue`` or a
    ``multiprocessing`` queue.
    """

    def __init__(self, channel: Any) -> None:
        self._channel = channel
        self._exhausted = False

    def next(self) -> Any:
        if self._exhausted:
            return EXHAUSTED
        item = self._channel.get()
        if item is EXHAUSTED:
            self._exhausted = True
        return item


class FilespecProducer:
    """Single producer that streams filespecs to whichever worker asks next.

    Runs on its own thread. The channel should be bounded so the producer
    only advances as workers take items. After the last filespec it sends
    one ``EXHAUSTED`` per consumer. ``stop()`` abandons whatever is left,
    for when no consumer will ever take it. With ``log_path`` set, every
    filespec sent is also written there, one per line.
    """

    def __init__(
        self,
        filespecs: Sequence[str],
        channel: Any,
        consumers: int,
        *,
        progress_interval: float = 1.0,
        on_progress: Optional[Callable[[int, int], None]] = None,
        log_path: Optional[Path] = None,
        put_interval: float = 0.1,
    ) -> None:
        self.filespecs = list(filespecs)
        self.channel = channel
        self.consumers = consumers
        self.progress_interval = progress_interval
        self.on_progress = on_progress
        self.log_path = log_path
        self.put_interval = put_interval
        self.sent = 0
        self._next_report = 0.0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def start(self) -> None:
        self._thread = threading.Thread(target=self.run, name="FilespecProducer", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        if self.log_path is None:
            self._send_all(None)
            return
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        with self.log_path.open("w", encoding="utf-8") as log:
            self._send_all(log)

    def _send_all(self, log: Optional[TextIO]) -> None:
        total = len(self.filespecs)
        self._report(0, total)
        for filespec in self.filespecs:
            if not self._put(filespec):
                LOGGER.warning("Producer stopped after sending %d of %d filespecs", self.sent, total)
                return
            self.sent += 1
            if log is not None:
                log.write(f"{filespec}\n")
            self._report(self.sent, total)
        for _ in range(self.consumers):
            if not self._put(EXHAUSTED):
                return
        LOGGER.info("Finished sending %d filespecs to %d workers", total, self.consumers)

    def _put(self, item: Any) -> bool:
        """Block until ``item`` is queued; False if stopped first."""
        while not self._stop.is_set():
            try:
                self.channel.put(item, timeout=self.put_interval)
                return True
            except queue.Full:
                continue
        return False

    def _report(self, sent: int, total: int) -> None:
        now = time.monotonic()
        if now < self._next_report and sent < total:
            return
        self._next_report = now + self.progress_interval
        if self.on_progress is not None:
            self.on_progress(sent, total)
        percent = 100.0 * sent / total if total else 100.0
        LOGGER.debug("%05.2f%% sent [%6d / %6d]", percent, sent, total)
