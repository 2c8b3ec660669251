"""Application configuration defaults."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, replace
from pathlib import Path

from wordsift.errors import ConfigurationError

DEFAULT_DICTIONARY = Path("/usr/share/dict/words")
DEFAULT_OUTPUT = Path("words.txt")
WORKERS_ENV_VAR = "WORDSIFT_WORKERS"

POLICIES = ("pull", "static")
BACKENDS = ("process", "thread")
EXTRACTORS = ("strings", "builtin")


def default_worker_count() -> int:
    """Number of processors available to this process."""
    try:
        return len(os.sched_getaffinity(0))
    except AttributeError:  # not available on macOS/Windows
        return os.cpu_count() or 1


def resolve_worker_count(value: int | str | None) -> int:
    """Turn an optional override into a positive worker count.

    ``None`` (or an empty string) falls back to the processor count.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default_worker_count()
    try:
        count = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Worker count must be an integer, got {value!r}") from exc
    if count <= 0:
        raise ConfigurationError(f"Worker count must be > 0, got {count}")
    return count


def _check_log_dir(log_dir: Path) -> None:
    if log_dir.exists() and not log_dir.is_dir():
        raise ConfigurationError(f"Log directory is not a directory: {log_dir}")
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"Cannot create log directory {log_dir}: {exc}") from exc
    if not os.access(log_dir, os.W_OK | os.X_OK):
        raise ConfigurationError(f"Log directory is not writable: {log_dir}")

@dataclass(slots=True)
class AppConfig:
    base_dir: Path = Path(".")
    filemask: str | None = None
    workers: int | None = None
    policy: str = "pull"
    backend: str = "process"
    extractor: str = "strings"
    strings_command: str = "strings"
    dictionary_path: Path = DEFAULT_DICTIONARY
    output_path: Path = DEFAULT_OUTPUT
    log_dir: Path | None = None
    timeout: float | None = None
    seed: int | None = None
    progress_interval: float = 1.0

    @property
    def worker_count(self) -> int:
        return resolve_worker_count(self.workers)

    def validate(self) -> None:
        """Raise ``ConfigurationError`` for anything that would fail mid-run."""
        resolve_worker_count(self.workers)
        if self.policy not in POLICIES:
            raise ConfigurationError(f"Unknown policy {self.policy!r}; choose from {', '.join(POLICIES)}")
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"Unknown backend {self.backend!r}; choose from {', '.join(BACKENDS)}")
        if self.extractor not in EXTRACTORS:
            raise ConfigurationError(
                f"Unknown extractor {self.extractor!r}; choose from {', '.join(EXTRACTORS)}"
            )
        if self.extractor == "strings" and shutil.which(self.strings_command) is None:
            raise ConfigurationError(
                f"'{self.strings_command}' was not found on PATH; install binutils or use --extractor builtin"
            )
        if not Path(self.base_dir).is_dir():
            raise ConfigurationError(f"Base directory not found: {self.base_dir}")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be > 0, got {self.timeout}")
        if self.log_dir is not None:
            _check_log_dir(Path(self.log_dir))

    def with_workers(self, workers: int) -> "AppConfig":
        """Copy of this config pinned to ``workers``."""
        return replace(self, workers=workers)
