from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "ColumnSummary",
    "SheetStatistics",
]


@dataclass(frozen=True)
class ColumnSummary:
    min: float
    max: float
    avg: float
    sum: float
    count: int


@dataclass(frozen=True)
class SheetStatistics:
    """Per-column statistics of one sheet.

    ``value_counts`` maps column -> cell text -> occurrences (missing cells
    are not counted). ``summary_stats`` only holds the numeric columns.
    """
    total_rows: int
    total_columns: int
    column_names: list[str] = field(default_factory=list)
    numeric_columns: list[str] = field(default_factory=list)
    summary_stats: dict[str, ColumnSummary] = field(default_factory=dict)
    value_counts: dict[str, dict[str, int]] = field(default_factory=dict)
