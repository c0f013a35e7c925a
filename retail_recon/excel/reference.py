from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..models.product import ProductRef

"""Static product reference table (상품명,품번,품목코드).

Only the column positions matter; the header line is skipped. Rows with fewer
than three fields or an empty name are ignored, fields past the third are
dropped.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ReferenceTableError",
    "load_product_refs",
]


class ReferenceTableError(Exception):
    pass


def load_product_refs(path: Path) -> dict[str, ProductRef]:
    path = Path(path)
    if not path.exists():
        raise ReferenceTableError(f"reference table not found: {path}")
    try:
        df = pd.read_csv(
            path,
            header=0,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
            engine="python",
            # 필드 초과 행은 앞 3개만 사용
            on_bad_lines=lambda parts: parts[:3],
        )
    except Exception as e:
        raise ReferenceTableError(f"cannot read reference table {path.name}: {e}") from e
    if df.shape[1] < 3:
        raise ReferenceTableError(f"reference table needs 3 columns, got {df.shape[1]}: {path.name}")

    refs: dict[str, ProductRef] = {}
    skipped = 0
    for name, code, item_code in df.iloc[:, :3].itertuples(index=False, name=None):
        # 필드 수 부족 행은 NaN 으로 채워짐
        if pd.isna(name) or pd.isna(code) or pd.isna(item_code):
            skipped += 1
            continue
        name = name.strip()
        if not name:
            skipped += 1
            continue
        refs[name] = ProductRef(code=code.strip() or None, item_code=item_code.strip() or None)
    if skipped:
        logger.debug("reference rows skipped: %d", skipped)
    return refs
