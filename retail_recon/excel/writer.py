from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from ..models.sheet import Row
from ..services.merge import strip_bookkeeping

"""Spreadsheet encoding boundary: one sheet, caller-supplied header order."""

__all__ = [
    "write_sheet",
]


def write_sheet(
    path: Path,
    headers: Sequence[str],
    rows: Iterable[Row],
    sheet_name: str = "Sheet1",
) -> Path:
    """Write rows to a single-sheet xlsx file and return its path.

    Diff bookkeeping keys are stripped; keys not listed in ``headers`` are
    dropped, missing ones are written empty.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    cleaned = [strip_bookkeeping(r) for r in rows]
    df = pd.DataFrame.from_records(cleaned, columns=list(headers)) if cleaned else pd.DataFrame(columns=list(headers))
    df.to_excel(path, sheet_name=sheet_name, index=False)
    return path
