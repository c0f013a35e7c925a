from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.merge import CHANGED_PREFIX, PREV_PREFIX, CellChange, MergedRow, MergeMapping, MergeResult, VendorSegment
from ..models.sheet import Row, Sheet
from .headers import VENDOR_SEGMENTS, compute_field_mapping, resolve_header
from .normalize import normalize

"""Sheet merge/diff engine for the stock merge workflow.

Overlays the quantity and display-location values of a second stock export
onto the rows of a base export, matched by a detected join key. The source
column is chosen per base row from its vendor (store location) value.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "build_index",
    "choose_source_keys",
    "merge_sheets",
    "strip_bookkeeping",
    "merged_file_name",
]


def build_index(rows: Sequence[Row], key: str) -> dict[str, Row]:
    """Normalized join value -> first overlay row carrying it (empty values skipped)."""
    index: dict[str, Row] = {}
    for row in rows:
        k = normalize(row.get(key))
        if k and k not in index:
            index[k] = row
    return index


def _segment_for_vendor(vendor: str, segments: Sequence[VendorSegment]) -> VendorSegment | None:
    for seg in segments:
        if vendor == normalize(seg.vendor_label):
            return seg
    return None


def choose_source_keys(
    mapping: MergeMapping,
    vendor_value: object,
    segments: Sequence[VendorSegment] = VENDOR_SEGMENTS,
) -> tuple[str | None, str | None]:
    """Overlay (qty, location) columns to read for a base row of this vendor.

    Known vendor: own segment column -> generic column -> other segments' columns.
    Unknown vendor: generic column -> segments in declared order.
    """
    vendor = normalize(vendor_value)
    own = _segment_for_vendor(vendor, segments)
    if own is None:
        order = [s.name for s in segments]
        qty_chain = [mapping.source_qty_key] + [mapping.segment_qty_keys.get(n) for n in order]
        loc_chain = [mapping.source_location_key] + [mapping.segment_location_keys.get(n) for n in order]
    else:
        others = [s.name for s in segments if s.name != own.name]
        qty_chain = (
            [mapping.segment_qty_keys.get(own.name), mapping.source_qty_key]
            + [mapping.segment_qty_keys.get(n) for n in others]
        )
        loc_chain = (
            [mapping.segment_location_keys.get(own.name), mapping.source_location_key]
            + [mapping.segment_location_keys.get(n) for n in others]
        )
    qty_key = next((k for k in qty_chain if k), None)
    loc_key = next((k for k in loc_chain if k), None)
    return qty_key, loc_key


def merge_sheets(
    base: Sheet,
    overlay: Sheet | None,
    mapping: MergeMapping | None = None,
    segments: Sequence[VendorSegment] = VENDOR_SEGMENTS,
) -> MergeResult:
    """Overlay quantity/location values onto the base rows.

    Base row order and header order are preserved. A cell is overwritten only
    when the overlay value differs under normalization; the prior value is
    kept on the MergedRow for diff display. Duplicate overlay keys are not an
    error, the first overlay row wins.
    """
    if overlay is not None and mapping is None:
        mapping = compute_field_mapping(base.headers, overlay.headers, segments)
    if overlay is None or mapping is None or not mapping.join_key:
        return MergeResult(
            headers=list(base.headers),
            rows=[MergedRow(values=dict(r)) for r in base.rows],
            changed_cells=0,
            changed_rows=0,
            mapping=mapping,
            unmatched_rows=len(base.rows) if overlay is not None else 0,
        )

    join_key = mapping.join_key
    overlay_key = resolve_header(overlay.headers, [join_key]) or join_key
    index = build_index(overlay.rows, overlay_key)

    changed_cells = 0
    changed_rows = 0
    unmatched = 0
    merged: list[MergedRow] = []
    for row in base.rows:
        src = index.get(normalize(row.get(join_key)))
        if src is None:
            unmatched += 1
            merged.append(MergedRow(values=dict(row)))
            continue

        vendor_raw = row.get(mapping.base_vendor_key) if mapping.base_vendor_key else None
        qty_src, loc_src = choose_source_keys(mapping, vendor_raw, segments)

        values = dict(row)
        changes: dict[str, CellChange] = {}
        for target, source in ((mapping.base_qty_key, qty_src), (mapping.base_location_key, loc_src)):
            if not target or not source:
                continue
            incoming = src.get(source)
            if incoming is None:
                continue
            current = row.get(target)
            if normalize(current) != normalize(incoming):
                values[target] = incoming
                changes[target] = CellChange(previous=current, current=incoming)
        if changes:
            changed_cells += len(changes)
            changed_rows += 1
        merged.append(MergedRow(values=values, changes=changes))

    logger.debug(
        "merge join_key=%s changed_cells=%d changed_rows=%d unmatched=%d",
        join_key, changed_cells, changed_rows, unmatched,
    )
    return MergeResult(
        headers=list(base.headers),
        rows=merged,
        changed_cells=changed_cells,
        changed_rows=changed_rows,
        mapping=mapping,
        unmatched_rows=unmatched,
    )


def strip_bookkeeping(row: Row) -> Row:
    """Drop ``__changed__``/``__prev__`` diff keys before re-export."""
    return {k: v for k, v in row.items() if not (k.startswith(CHANGED_PREFIX) or k.startswith(PREV_PREFIX))}


def merged_file_name(base_name: str) -> str:
    stem = base_name
    for ext in (".xlsx", ".xls", ".csv"):
        if stem.lower().endswith(ext):
            stem = stem[: -len(ext)]
            break
    return f"merged_{stem}.xlsx"
