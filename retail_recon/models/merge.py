from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .sheet import Row

"""Merge/diff domain models for the stock merge workflow."""

__all__ = [
    "CHANGED_PREFIX",
    "PREV_PREFIX",
    "VendorSegment",
    "MergeMapping",
    "CellChange",
    "MergedRow",
    "MergeResult",
]

CHANGED_PREFIX = "__changed__"
PREV_PREFIX = "__prev__"


@dataclass(frozen=True)
class VendorSegment:
    """A store location whose export uses its own column names."""
    name: str
    vendor_label: str  # 기준 파일 업체 컬럼 값 (예: "라페어 논현점")
    qty_synonyms: tuple[str, ...]
    location_synonyms: tuple[str, ...]


@dataclass(frozen=True)
class MergeMapping:
    """Header mapping between a base sheet and an overlay sheet.

    ``source_qty_key`` / ``source_location_key`` are the generic overlay
    columns; ``segment_qty_keys`` / ``segment_location_keys`` hold the
    vendor-specific ones keyed by segment name (value ``None`` when the overlay
    lacks that column).
    """
    join_key: str | None = None
    base_qty_key: str | None = None
    base_location_key: str | None = None
    base_vendor_key: str | None = None
    source_qty_key: str | None = None
    source_location_key: str | None = None
    segment_qty_keys: dict[str, str | None] = field(default_factory=dict)
    segment_location_keys: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class CellChange:
    previous: Any
    current: Any


@dataclass(frozen=True)
class MergedRow:
    values: Row
    changes: dict[str, CellChange] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def flattened(self) -> Row:
        """Row with ``__changed__``/``__prev__`` bookkeeping keys for diff display."""
        out = dict(self.values)
        for col, change in self.changes.items():
            out[f"{CHANGED_PREFIX}{col}"] = True
            out[f"{PREV_PREFIX}{col}"] = change.previous
        return out


@dataclass(frozen=True)
class MergeResult:
    headers: list[str]
    rows: list[MergedRow]
    changed_cells: int
    changed_rows: int
    mapping: MergeMapping | None = None
    unmatched_rows: int = 0
