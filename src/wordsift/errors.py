"""Exception hierarchy for wordsift."""

from __future__ import annotations


class WordsiftError(Exception):
    """Base class for all wordsift errors."""


class ConfigurationError(WordsiftError):
    """Invalid run configuration; raised before any worker starts."""


class DictionaryLoadError(WordsiftError):
    """The word list could not be read or contained no words."""


class ExtractionError(WordsiftError):
    """Printable text could not be obtained from a single file."""

    def __init__(self, filespec: str, reason: str) -> None:
        super().__init__(f"{filespec}: {reason}")
        self.filespec = filespec
        self.reason = reason


class QueueProtocolError(WordsiftError):
    """A worker received something other than a single filespec."""


class WorkerStallError(WordsiftError):
    """Workers did not publish their results within the allowed time."""
