"""Merging of per-worker results into the global word set."""

from __future__ import annotations

import queue
import time
from typing import AbstractSet, Any, FrozenSet, Iterable, List, Optional

from wordsift.errors import WorkerStallError
from wordsift.models import WorkerResult


def aggregate(word_sets: Iterable[AbstractSet[str]]) -> FrozenSet[str]:
    """Union of all word sets; independent of their order."""
    words: set[str] = set()
    for word_set in word_sets:
        words |= word_set
    return frozenset(words)


def collect_results(channel: Any, count: int, timeout: Optional[float] = None) -> List[WorkerResult]:
    """Block until ``count`` workers have published their result.

    Without a timeout this waits indefinitely. With one, ``WorkerStallError``
    is raised once the deadline passes with results still missing.
    """
    results: List[WorkerResult] = []
    deadline = None if timeout is None else time.monotonic() + timeout
    while len(results) < count:
        if deadline is None:
            results.append(channel.get())
            continue
        remaining = deadline - time.monotonic()
        try:
            results.append(channel.get(timeout=max(remaining, 0.0)))
        except queue.Empty:
            raise WorkerStallError(
                f"{count - len(results)} of {count} worker(s) did not finish within {timeout}s"
            ) from None
    return results
