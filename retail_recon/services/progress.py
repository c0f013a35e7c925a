from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm

"""Progress display while decoding several uploaded exports (TTY only).

A single tqdm bar counts decoded files; in non-TTY environments (CI, pipes)
no bar is created so no ANSI control sequences reach the log output.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """File-level progress bar used by the ``sales`` command."""

    def __init__(self, total_files: int, *, description: str = "Reading files") -> None:
        self.total_files = total_files
        self.description = description
        self.done = 0
        self.rows = 0
        self.enabled = is_tty_enabled()
        self.pbar: Any | None = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    def advance(self, file_path: Path, rows: int = 0) -> None:
        """Mark one file as decoded."""
        self.done += 1
        self.rows += rows
        if self.pbar is not None:
            self.pbar.set_postfix(file=file_path.name, rows=self.rows)
            self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
