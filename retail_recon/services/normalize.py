from __future__ import annotations

import math
import numbers
import re
from typing import Any

"""Value normalization used as the equality basis for all matching.

Two cell values are "the same" throughout the tools iff ``normalize`` returns
the same string for both.
"""

__all__ = [
    "cell_text",
    "normalize",
    "parse_amount",
    "normalize_approval_or_id",
]

_WHITESPACE_RE = re.compile(r"\s+")
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_NON_DIGIT_RE = re.compile(r"\D")


def cell_text(value: Any) -> str:
    """Render a raw cell value as text.

    Missing values (``None`` / NaN) become ``""``. Integral floats lose their
    ``.0`` so ``7.0`` read from a numeric cell compares equal to the text ``"7"``.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def normalize(value: Any) -> str:
    """Collapse whitespace runs to one space, trim and lower-case."""
    return _WHITESPACE_RE.sub(" ", cell_text(value)).strip().lower()


def parse_amount(value: Any) -> float:
    """Lossy money parser; always returns a finite number.

    Numbers are returned as-is (NaN/inf -> 0). Strings keep only digits, ``.``
    and ``-`` before parsing, so currency symbols, thousands separators and
    surrounding text are dropped. Anything else yields 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, numbers.Real):
        return value if math.isfinite(value) else 0
    if not isinstance(value, str):
        return 0
    cleaned = _NON_NUMERIC_RE.sub("", value).strip()
    try:
        num = float(cleaned)
    except ValueError:
        return 0
    return num if math.isfinite(num) else 0


def normalize_approval_or_id(value: Any) -> str:
    """Keep only the digits of an approval / transaction identifier."""
    return _NON_DIGIT_RE.sub("", cell_text(value).strip())
