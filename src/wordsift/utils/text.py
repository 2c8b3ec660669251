"""Text helpers: punctuation stripping and tokenizing."""

from __future__ import annotations

import string
from typing import Iterable, Iterator, List

# ASCII [[:punct:]]; each character becomes one space.
_PUNCTUATION_TABLE = str.maketrans(string.punctuation, " " * len(string.punctuation))


def strip_punctuation(text: str) -> str:
    """Replace every punctuation character with a single space.

    Replacing rather than deleting keeps ``foo.bar`` as two tokens.
    """
    return text.translate(_PUNCTUATION_TABLE)


def split_lines(text: str) -> List[str]:
    """Strip punctuation from ``text`` and split it into lines."""
    if not text:
        return []
    return strip_punctuation(text).split("\n")


def tokenize(line: str) -> List[str]:
    """Whitespace-split a line into lower-cased tokens."""
    return [token.lower() for token in line.split()]


def iter_tokens(lines: Iterable[str]) -> Iterator[str]:
    """Yield the tokens of every line in order."""
    for line in lines:
        yield from tokenize(line)
