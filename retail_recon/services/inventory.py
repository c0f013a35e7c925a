from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from ..models.product import ProductRecord, StockLevel
from ..models.sheet import Sheet
from .grouping import ALL_DAYS
from .headers import pick_value, resolve_headers
from .normalize import cell_text, parse_amount

"""Stock levels attached to the sales report.

The stock export is keyed by the raw product name (not normalized), the same
key the sales report uses.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "STOCK_NAME_HEADERS",
    "STOCK_QTY_HEADERS",
    "STOCK_LOCATION_HEADERS",
    "read_stock_levels",
    "adjust_stock_for_day",
]

STOCK_NAME_HEADERS = ("상품이름", "상품명", "제품명", "개별상품 명")
STOCK_QTY_HEADERS = ("재고수량", "재고 수량", "재고", "수량")
STOCK_LOCATION_HEADERS = ("상품 매장 진열 위치", "매장 진열 위치", "진열 위치", "진열위치")


def read_stock_levels(sheet: Sheet) -> dict[str, StockLevel]:
    """Map product name -> stock quantity and display location.

    Later rows overwrite earlier rows with the same name.
    """
    name_cols = resolve_headers(sheet.headers, STOCK_NAME_HEADERS)
    qty_cols = resolve_headers(sheet.headers, STOCK_QTY_HEADERS)
    loc_cols = resolve_headers(sheet.headers, STOCK_LOCATION_HEADERS)

    levels: dict[str, StockLevel] = {}
    for row in sheet.rows:
        name = cell_text(pick_value(row, name_cols)).strip()
        if not name:
            continue
        location = cell_text(pick_value(row, loc_cols)).strip()
        levels[name] = StockLevel(
            qty=parse_amount(pick_value(row, qty_cols)),
            location=location or None,
        )
    logger.debug("stock levels loaded: %d (%s)", len(levels), sheet.name)
    return levels


def adjust_stock_for_day(
    stock: Mapping[str, StockLevel],
    records: Iterable[ProductRecord],
    day: str | None,
) -> dict[str, StockLevel]:
    """Stock as of the end of ``day``.

    The uploaded stock snapshot already reflects every sale; quantities sold
    on later purchase days are added back. ``None`` / ``"ALL"`` returns the
    snapshot unchanged.
    """
    if not stock or not day or day == ALL_DAYS:
        return dict(stock)

    later_sales: dict[str, float] = {}
    for r in records:
        if r.purchase_day_key and r.purchase_day_key > day:
            later_sales[r.name] = later_sales.get(r.name, 0) + r.quantity

    adjusted: dict[str, StockLevel] = {}
    for name, level in stock.items():
        qty = None if level.qty is None else level.qty + later_sales.get(name, 0)
        adjusted[name] = StockLevel(qty=qty, location=level.location)
    return adjusted
