"""Utility helpers for enumerating the files to scan."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterator, List

LOGGER = logging.getLogger(__name__)


def iter_filespecs(base_dir: Path | str, filemask: str | None = None) -> Iterator[str]:
    """Yield regular files under ``base_dir``, following symbolic links.

    ``filemask`` is a shell glob matched against the file name only, like
    ``find -name``. Directories reached twice through links are walked once.
    """
    seen: set[tuple[int, int]] = set()
    for root, dirs, files in os.walk(base_dir, followlinks=True):
        try:
            stat = os.stat(root)
        except OSError as exc:
            LOGGER.warning("Cannot stat %s: %s", root, exc)
            dirs[:] = []
            continue
        key = (stat.st_dev, stat.st_ino)
        if key in seen:
            LOGGER.debug("Skipping already visited directory %s", root)
            dirs[:] = []
            continue
        seen.add(key)
        dirs.sort()
        for name in sorted(files):
            if filemask and not fnmatch.fnmatchcase(name, filemask):
                continue
            path = os.path.join(root, name)
            if os.path.isfile(path):
                yield path


def find_filespecs(base_dir: Path | str, filemask: str | None = None) -> List[str]:
    """Return every filespec to scan, as an ordered list."""
    filespecs = list(iter_filespecs(base_dir, filemask))
    LOGGER.info("Found %d files under %s", len(filespecs), base_dir)
    return filespecs
