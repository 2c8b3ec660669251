"""Per-worker file scanning: extract, tokenize, keep dictionary words."""

from __future__ import annotations

import logging
from typing import Iterable, Set

from wordsift.errors import ExtractionError
from wordsift.ingestion.dictionary import Dictionary
from wordsift.ingestion.extractor import TextExtractor
from wordsift.utils.text import iter_tokens

LOGGER = logging.getLogger(__name__)


def is_word(token: str, dictionary: Dictionary) -> bool:
    """Exact membership test against the dictionary."""
    return dictionary.contains(token)


class FileScanner:
    """Reduces files to the set of dictionary words they contain.

    One instance is created for each worker.
    """

    def __init__(self, name: str, dictionary: Dictionary, extractor: TextExtractor) -> None:
        self.name = name
        self.dictionary = dictionary
        self.extractor = extractor
        self.failed = 0

    def scan(self, filespec: str) -> Set[str]:
        """Return the words of ``filespec``; an unreadable file yields an empty set."""
        try:
            lines = self.extractor.extract(filespec)
        except ExtractionError as exc:
            self.failed += 1
            LOGGER.warning("%s: skipping %s", self.name, exc)
            return set()

        return {token for token in iter_tokens(lines) if is_word(token, self.dictionary)}

    def scan_batch(self, filespecs: Iterable[str]) -> Set[str]:
        words: Set[str] = set()
        for filespec in filespecs:
            words |= self.scan(filespec)
        return words
