"""Scoped temporary files for staging rendered images before delivery."""

import os
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

DEFAULT_PREFIX = "statusboard_"


class StagingArea:
    """
    Directory of short-lived files, each removed when its scope exits.

    Files left behind by a killed process are removed by sweep().
    """

    def __init__(self, root: Path, prefix: str = DEFAULT_PREFIX) -> None:
        self._root = Path(root)
        self._prefix = prefix

    @property
    def root(self) -> Path:
        return self._root

    @contextmanager
    def stage(self, data: bytes, suffix: str = ".png") -> Iterator[Path]:
        """Write data to a fresh file and yield its path. The file is always deleted."""
        self._root.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=self._prefix, suffix=suffix, dir=self._root)
        path = Path(name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            yield path
        finally:
            path.unlink(missing_ok=True)

    def sweep(self, min_age: float = 300.0) -> int:
        """
        Remove orphaned staged files.

        Args:
            min_age: Only files last modified at least this many seconds ago
                are removed, so files staged by live processes survive.

        Returns:
            Number of files removed.
        """
        if not self._root.is_dir():
            return 0

        cutoff = time.time() - min_age
        removed = 0
        for path in self._root.glob(f"{self._prefix}*"):
            try:
                if path.is_file() and path.stat().st_mtime <= cutoff:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                continue  # Removed concurrently

        if removed:
            logger.info(f"Removed {removed} orphaned staged file(s) from {self._root}")
        return removed
