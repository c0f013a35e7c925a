from __future__ import annotations

from collections.abc import Mapping

from ..models.product import ProductRef, SalesReport, StockLevel
from ..models.sheet import Row

"""Flatten a SalesReport into export rows (one per base, one per variant)."""

__all__ = [
    "SALES_REPORT_HEADERS",
    "sales_report_rows",
]

SALES_REPORT_HEADERS = ["순위", "상품명", "품목코드", "품번", "판매 수량", "재고 수량", "진열 위치", "판매 금액"]


def sales_report_rows(
    report: SalesReport,
    refs: Mapping[str, ProductRef] | None = None,
    stock: Mapping[str, StockLevel] | None = None,
) -> list[Row]:
    refs = refs or {}
    stock = stock or {}
    rows: list[Row] = []
    for rank, group in enumerate(report.groups, start=1):
        base = group.base
        base_ref = refs.get(base.name, ProductRef())
        base_stock = stock.get(base.name, StockLevel())
        rows.append(
            {
                "순위": rank,
                "상품명": base.name,
                "품목코드": base_ref.item_code or "-",
                "품번": base_ref.code or "-",
                "판매 수량": base.quantity,
                "재고 수량": "-" if base_stock.qty is None else base_stock.qty,
                "진열 위치": base_stock.location or "-",
                "판매 금액": base.revenue,
            }
        )
        for variant in group.variants:
            ref = refs.get(variant.name, ProductRef())
            level = stock.get(variant.name, StockLevel())
            rows.append(
                {
                    "순위": "",
                    "상품명": f"- {variant.name}",
                    "품목코드": ref.item_code or "-",
                    # 사이즈 상품 품번이 없으면 메인 상품 품번 사용
                    "품번": ref.code or base_ref.code or "-",
                    "판매 수량": variant.quantity,
                    "재고 수량": "-" if level.qty is None else level.qty,
                    "진열 위치": level.location or "-",
                    "판매 금액": variant.revenue,
                }
            )
    return rows
