from __future__ import annotations

import math
import numbers
import re
from datetime import date, datetime
from typing import Any

import pandas as pd

"""Date key extraction for heterogeneous date/datetime cell values.

Every conversion is total: unparseable input yields ``None`` and processing
continues.
"""

__all__ = [
    "EXCEL_EPOCH",
    "EXCEL_MAX_SERIAL",
    "to_date_key",
    "to_month_key_from_purchase",
    "to_day_key_from_purchase",
]

# 1900 날짜 체계 엑셀 시리얼 기준일 (1900-02-29 버그 보정 포함)
EXCEL_EPOCH = "1899-12-30"
# 엑셀 날짜 범위: 1900-01-01 ~ 9999-12-31
EXCEL_MAX_SERIAL = 2958465

_YMD_RE = re.compile(r"(\d{4})[.\-/](\d{1,2})[.\-/](\d{1,2})")
_NON_DIGIT_RE = re.compile(r"[^0-9]")
_YEAR_RE = re.compile(r"^[0-9]{4}$")
_MONTH_RE = re.compile(r"^(0[1-9]|1[0-2])$")
_DAY_RE = re.compile(r"^(0[1-9]|[12][0-9]|3[01])$")


def _format_day(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _from_serial(serial: float) -> str | None:
    if not math.isfinite(serial) or not 0 < serial < EXCEL_MAX_SERIAL + 1:
        return None
    try:
        ts = pd.to_datetime(serial, unit="D", origin=EXCEL_EPOCH)
    except (ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return _format_day(ts)


def to_date_key(value: Any) -> str | None:
    """Normalize a payment date cell to ``YYYY-MM-DD``.

    - numbers are spreadsheet serial dates
    - datetime objects (already decoded by the reader) are formatted directly
    - strings are matched against ``YYYY.MM.DD`` / ``YYYY-MM-DD`` / ``YYYY/MM/DD``
      first, then handed to the pandas date parser
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return _from_serial(float(value))
    if isinstance(value, (datetime, date)):
        if pd.isna(value):
            return None
        return _format_day(value)
    text = str(value).strip()
    if not text:
        return None
    m = _YMD_RE.search(text)
    if m:
        return f"{m.group(1)}-{m.group(2).zfill(2)}-{m.group(3).zfill(2)}"
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return _format_day(parsed)


def _purchase_digits(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return None
        text = str(math.trunc(value))
    else:
        text = str(value).strip()
    return _NON_DIGIT_RE.sub("", text)


def to_month_key_from_purchase(value: Any) -> str | None:
    """``YYYY-MM`` from a compact ``yyyymmddhhmmss`` purchase timestamp."""
    digits = _purchase_digits(value)
    if digits is None or len(digits) < 6:
        return None
    yyyy, mm = digits[0:4], digits[4:6]
    if not _YEAR_RE.match(yyyy) or not _MONTH_RE.match(mm):
        return None
    return f"{yyyy}-{mm}"


def to_day_key_from_purchase(value: Any) -> str | None:
    """``YYYY-MM-DD`` from a compact purchase timestamp (range checks only)."""
    digits = _purchase_digits(value)
    if digits is None or len(digits) < 8:
        return None
    yyyy, mm, dd = digits[0:4], digits[4:6], digits[6:8]
    if not _YEAR_RE.match(yyyy) or not _MONTH_RE.match(mm) or not _DAY_RE.match(dd):
        return None
    return f"{yyyy}-{mm}-{dd}"
