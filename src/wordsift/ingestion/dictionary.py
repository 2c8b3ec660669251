"""Loading of the reference word list."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator

from wordsift.errors import DictionaryLoadError

LOGGER = logging.getLogger(__name__)


class Dictionary:
    """Immutable set of lower-cased valid words.

    Built once per run and handed to every worker; nothing mutates it.
    """

    __slots__ = ("_words",)

    def __init__(self, words: Iterable[str]) -> None:
        self._words: FrozenSet[str] = frozenset(
            word.strip().lower() for word in words if word and word.strip()
        )

    @property
    def words(self) -> FrozenSet[str]:
        return self._words

    def contains(self, word: str) -> bool:
        return word in self._words

    def __contains__(self, word: object) -> bool:
        return word in self._words

    def __len__(self) -> int:
        return len(self._words)

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dictionary):
            return NotImplemented
        return self._words == other._words

    def __hash__(self) -> int:
        return hash(self._words)

    def __reduce__(self):
        return (Dictionary, (self._words,))

    def __repr__(self) -> str:
        return f"Dictionary({len(self._words)} words)"


def load_dictionary(source: Path | str) -> Dictionary:
    """Read a newline-delimited word list into a ``Dictionary``."""
    path = Path(source)
    try:
        with path.open("r", encoding="utf-8", errors="replace") as handle:
            dictionary = Dictionary(handle)
    except OSError as exc:
        raise DictionaryLoadError(f"Cannot read word list {path}: {exc}") from exc

    if not dictionary:
        raise DictionaryLoadError(f"Word list {path} contains no words")

    LOGGER.info("Loaded %d dictionary words from %s", len(dictionary), path)
    return dictionary
