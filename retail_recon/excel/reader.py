from __future__ import annotations

from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.sheet import Row, Sheet
from ..services.normalize import cell_text

"""Spreadsheet decoding boundary.

Only the first worksheet is read; its first row is the header row and the
remaining rows become ``header -> value`` dicts. Missing cells are ``""`` and
rows with no value at all are skipped. Repeated header names get a numeric
suffix so no column is lost. Header order is kept on the Sheet for
header-order-preserving re-export.
"""

__all__ = [
    "DecodeError",
    "read_first_sheet",
]

CSV_SUFFIXES = {".csv", ".txt"}


class DecodeError(Exception):
    """Raised when a file cannot be decoded into rows."""


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _as_text(value: Any) -> str:
    # 표시 형식 텍스트 (병합 비교용)
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.strftime("%Y-%m-%d")
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return cell_text(value)


def _header_names(values: list[Any]) -> list[str]:
    """Header row as unique names; repeats become ``name_1``, ``name_2``..."""
    names = []
    for i, v in enumerate(values):
        name = "" if _is_missing(v) else str(v).strip()
        names.append(name or f"Unnamed: {i}")
    reserved = set(names)
    headers: list[str] = []
    used: set[str] = set()
    for name in names:
        if name in used:
            n = 1
            # 실제 헤더와 겹치지 않는 접미사
            while f"{name}_{n}" in used or f"{name}_{n}" in reserved:
                n += 1
            name = f"{name}_{n}"
        used.add(name)
        headers.append(name)
    return headers


def _frame_to_sheet(df: pd.DataFrame, name: str, raw: bool) -> Sheet:
    if df.shape[0] == 0:
        return Sheet(name=name, headers=[], rows=[])
    headers = _header_names(df.iloc[0].tolist())
    rows: list[Row] = []
    for values in df.iloc[1:].itertuples(index=False, name=None):
        if all(_is_missing(v) or (isinstance(v, str) and not v.strip()) for v in values):
            continue
        row: Row = {}
        for col, val in zip(headers, values, strict=False):
            if _is_missing(val):
                row[col] = ""
            elif raw:
                row[col] = val
            else:
                row[col] = _as_text(val)
        rows.append(row)
    return Sheet(name=name, headers=headers, rows=rows)


def read_first_sheet(path: Path, *, raw: bool = True) -> Sheet:
    """Decode the first sheet of an xlsx/xls/csv file.

    Parameters
    ----------
    path: uploaded file
    raw: keep cell values as decoded (numbers, datetimes); ``False`` renders
         every cell as display text

    Raises
    ------
    DecodeError: file missing, unreadable or not a spreadsheet
    """
    path = Path(path)
    if not path.exists():
        raise DecodeError(f"file not found: {path}")
    try:
        if path.suffix.lower() in CSV_SUFFIXES:
            df = pd.read_csv(
                path,
                header=None,
                dtype=object,
                keep_default_na=False,
                encoding="utf-8-sig",
            )
        else:
            with pd.ExcelFile(path) as xls:
                if not xls.sheet_names:
                    raise DecodeError(f"no worksheet: {path.name}")
                df = xls.parse(xls.sheet_names[0], header=None, dtype=object)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"cannot read {path.name}: {e}") from e
    return _frame_to_sheet(df, path.name, raw)
