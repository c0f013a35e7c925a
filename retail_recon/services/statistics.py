from __future__ import annotations

import math
import numbers
from collections import Counter
from typing import Any

import pandas as pd

from ..models.sheet import Sheet
from ..models.statistics import ColumnSummary, SheetStatistics
from .normalize import cell_text

"""Column statistics of an uploaded sheet: value frequencies and numeric summaries."""

__all__ = [
    "numeric_values",
    "sheet_statistics",
]


def _is_blank(value: Any) -> bool:
    return not cell_text(value).strip()


def numeric_values(values: list[Any]) -> list[float]:
    """Values usable as numbers: numeric cells and numeric text ("1,000" is not)."""
    candidates = [
        v for v in values
        if not isinstance(v, bool) and (isinstance(v, numbers.Real) or isinstance(v, str))
    ]
    if not candidates:
        return []
    parsed = pd.to_numeric(pd.Series(candidates, dtype=object).astype(str).str.strip(), errors="coerce")
    return [float(x) for x in parsed if not pd.isna(x) and math.isfinite(x)]


def sheet_statistics(sheet: Sheet) -> SheetStatistics:
    columns = list(sheet.headers)
    numeric_columns: list[str] = []
    summary_stats: dict[str, ColumnSummary] = {}
    value_counts: dict[str, dict[str, int]] = {}
    for col in columns:
        values = [v for v in (row.get(col) for row in sheet.rows) if not _is_blank(v)]
        value_counts[col] = dict(Counter(cell_text(v) for v in values))
        nums = numeric_values(values)
        if not nums:
            continue
        numeric_columns.append(col)
        total = math.fsum(nums)
        summary_stats[col] = ColumnSummary(
            min=min(nums),
            max=max(nums),
            avg=total / len(nums),
            sum=total,
            count=len(nums),
        )
    return SheetStatistics(
        total_rows=len(sheet.rows),
        total_columns=len(columns),
        column_names=columns,
        numeric_columns=numeric_columns,
        summary_stats=summary_stats,
        value_counts=value_counts,
    )
