"""Printable text extraction from arbitrary (including binary) files.

Two extractors share one interface, ``extract(filespec) -> list[str]``:

* ``StringsExtractor`` shells out to the ``strings`` utility.
* ``BuiltinExtractor`` applies the same rule in-process: runs of at least
  four printable ASCII characters, one run per line.

Both return lines with punctuation already replaced by spaces.
"""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass
from typing import List, Protocol

from wordsift.errors import ConfigurationError, ExtractionError
from wordsift.utils.text import split_lines

MIN_RUN_LENGTH = 4
_PRINTABLE_RUN = re.compile(rb"[\x20-\x7e\t]{%d,}" % MIN_RUN_LENGTH)


class TextExtractor(Protocol):
    def extract(self, filespec: str) -> List[str]: ...


def _check_readable(filespec: str) -> None:
    if not os.path.isfile(filespec):
        raise ExtractionError(filespec, "no such file")


@dataclass(slots=True, frozen=True)
class StringsExtractor:
    """Delegate to the external ``strings`` command."""

    command: str = "strings"

    def extract(self, filespec: str) -> List[str]:
        _check_readable(filespec)
        try:
            completed = subprocess.run(
                [self.command, "--", filespec],
                capture_output=True,
                check=False,
            )
        except OSError as exc:
            raise ExtractionError(filespec, f"could not run {self.command}: {exc}") from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise ExtractionError(
                filespec, stderr or f"{self.command} exited with status {completed.returncode}"
            )
        return split_lines(completed.stdout.decode("utf-8", errors="replace"))


@dataclass(slots=True, frozen=True)
class BuiltinExtractor:
    """Find printable runs without spawning a process."""

    def extract(self, filespec: str) -> List[str]:
        _check_readable(filespec)
        try:
            with open(filespec, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise ExtractionError(filespec, str(exc)) from exc

        runs = (match.group().decode("ascii") for match in _PRINTABLE_RUN.finditer(data))
        return split_lines("\n".join(runs))


def get_extractor(name: str, command: str = "strings") -> TextExtractor:
    """Build the extractor registered under ``name``."""
    if name == "strings":
        return StringsExtractor(command=command)
    if name == "builtin":
        return BuiltinExtractor()
    raise ConfigurationError(f"Unknown extractor {name!r}")
