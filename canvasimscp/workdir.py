"""
workdir.py - Per-import scratch directory.

Each import gets its own directory under <temp_base>/canvas_import/<token>.
Use it as a context manager; the directory is removed on every exit path:

    with WorkingDirectory(settings.temp_base) as workdir:
        ...
"""

from __future__ import annotations

import itertools
import os
import shutil
import time
from pathlib import Path
from typing import Optional, Union

from canvasimscp.icons import WARNING

NAMESPACE = "canvas_import"

_counter = itertools.count(1)


def unique_token() -> str:
    """Timestamp-based token; pid and a counter keep same-second calls apart."""
    return f"{int(time.time())}_{os.getpid()}_{next(_counter)}"


class WorkingDirectory:
    """Exclusively owned scratch directory for one import call."""

    def __init__(self, temp_base: Union[str, Path], namespace: str = NAMESPACE):
        self.temp_base = Path(temp_base)
        self.namespace = namespace
        self.token: Optional[str] = None
        self.path: Optional[Path] = None

    def create(self) -> Path:
        """Make a fresh directory. A token is never reused."""
        parent = self.temp_base / self.namespace
        parent.mkdir(parents=True, exist_ok=True)
        while True:
            token = unique_token()
            candidate = parent / token
            try:
                candidate.mkdir()
            except FileExistsError:
                continue
            self.token = token
            self.path = candidate
            return candidate

    def release(self) -> None:
        """Recursively delete the directory (safe to call twice)."""
        if self.path is not None and self.path.exists():
            try:
                shutil.rmtree(self.path)
            except OSError as e:
                print(f"[import:warn] {WARNING} Could not remove working directory {self.path}: {e}")
        self.path = None

    def __enter__(self) -> Path:
        return self.create()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
