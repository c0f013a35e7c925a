from __future__ import annotations

from ..models.compare import NameComparison
from ..models.sheet import Sheet
from .headers import resolve_header
from .normalize import normalize

"""Product-name presence comparison between two sheets."""

__all__ = [
    "extract_product_names",
    "compare_names",
]

# 상품이름 우선 (재고 파일 양식)
_COMPARE_NAME_SYNONYMS = ("상품이름", "상품명", "제품명", "name", "product", "title")


def extract_product_names(sheet: Sheet) -> list[str]:
    """Normalized, de-duplicated product names in first-seen order.

    Falls back to the first column when no name header is recognized.
    """
    column = resolve_header(sheet.headers, _COMPARE_NAME_SYNONYMS)
    if column is None and sheet.headers:
        column = sheet.headers[0]
    if column is None:
        return []
    names: dict[str, None] = {}
    for row in sheet.rows:
        n = normalize(row.get(column))
        if n:
            names.setdefault(n, None)
    return list(names)


def compare_names(left: Sheet, right: Sheet) -> NameComparison:
    left_names = extract_product_names(left)
    right_names = extract_product_names(right)
    right_set = set(right_names)
    left_set = set(left_names)
    return NameComparison(
        only_left=sorted(n for n in left_names if n not in right_set),
        only_right=sorted(n for n in right_names if n not in left_set),
        in_both=sorted(n for n in left_names if n in right_set),
    )
