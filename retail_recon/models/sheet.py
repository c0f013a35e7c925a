from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Sheet model shared by every workflow.

A Sheet is what the decoder hands to the engines: the original header order
plus a list of rows, each an ordered ``dict`` (header -> raw cell value).
Headers are not fixed; every uploaded sheet brings its own header set and
all lookups go through ``services.headers``.
"""

__all__ = [
    "Row",
    "Sheet",
]

Row = dict[str, Any]


@dataclass(frozen=True)
class Sheet:
    """Decoded first worksheet of an uploaded file.

    Rows are treated as immutable inputs; engines build new dicts instead of
    writing into them.
    """
    name: str  # 원본 파일명
    headers: list[str]  # 원본 헤더 순서 유지
    rows: list[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)
