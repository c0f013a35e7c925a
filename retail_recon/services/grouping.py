from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace

from ..models.config_models import DEFAULT_FIXED_UNIT_PRICES
from ..models.product import GroupedProduct, GroupingResult, ProductRecord, SalesReport
from ..models.sheet import Sheet
from .dates import to_date_key, to_day_key_from_purchase, to_month_key_from_purchase
from .headers import pick_value, resolve_headers
from .normalize import cell_text, parse_amount

"""Product grouping engine for the daily sales report.

Source systems export one row per SKU variant (``가방_S``) and one aggregate
row per product family (``가방``); only the family row carries a reliable
per-unit price. This module rebuilds family-level rollups:

1. ``records_from_rows`` maps raw rows to ProductRecord
2. ``aggregate_by_product`` sums quantity/revenue per distinct name
3. ``group_products`` links variants to their base and recomputes revenue
4. ``build_sales_report`` adds the page totals for a day scope
"""

logger = logging.getLogger(__name__)

__all__ = [
    "SALES_NAME_HEADERS",
    "SALES_QTY_HEADERS",
    "SALES_REVENUE_HEADERS",
    "SALES_UNIT_PRICE_HEADERS",
    "SALES_TRANSACTION_HEADERS",
    "SALES_PAYMENT_DATE_HEADERS",
    "SALES_PURCHASE_HEADERS",
    "ALL_DAYS",
    "records_from_rows",
    "aggregate_by_product",
    "normalize_product_name",
    "is_variant",
    "is_sock_variant",
    "group_products",
    "bag_point_adjustment",
    "available_days",
    "records_for_day",
    "build_sales_report",
]

SALES_NAME_HEADERS = ("개별상품 명", "상품명")
SALES_QTY_HEADERS = ("개별상품 개수", "수량")
SALES_REVENUE_HEADERS = ("결제금액", "매출금액(배송비포함)", "매출금액")
SALES_UNIT_PRICE_HEADERS = ("개별상품 금액", "상품 개별 금액", "개별금액")
SALES_TRANSACTION_HEADERS = ("구매UID", "구매 UID", "주문번호")
SALES_PAYMENT_DATE_HEADERS = ("결제일시", "결제 일시", "결제일", "결제시간", "결제 시간")
SALES_PURCHASE_HEADERS = ("구매일시", "구매 일시")

ALL_DAYS = "ALL"

_NAME_NOISE_RE = re.compile(r"[\s_\-/]")


def records_from_rows(sheet: Sheet) -> tuple[list[ProductRecord], int]:
    """Map raw sales rows to ProductRecords.

    Returns the records and the number of rows dropped for lacking a name.
    """
    name_cols = resolve_headers(sheet.headers, SALES_NAME_HEADERS)
    qty_cols = resolve_headers(sheet.headers, SALES_QTY_HEADERS)
    revenue_cols = resolve_headers(sheet.headers, SALES_REVENUE_HEADERS)
    price_cols = resolve_headers(sheet.headers, SALES_UNIT_PRICE_HEADERS)
    txn_cols = resolve_headers(sheet.headers, SALES_TRANSACTION_HEADERS)
    payment_cols = resolve_headers(sheet.headers, SALES_PAYMENT_DATE_HEADERS)
    purchase_cols = resolve_headers(sheet.headers, SALES_PURCHASE_HEADERS)

    records: list[ProductRecord] = []
    dropped = 0
    for row in sheet.rows:
        name = cell_text(pick_value(row, name_cols)).strip()
        if not name:
            dropped += 1
            continue
        purchase_raw = pick_value(row, purchase_cols)
        records.append(
            ProductRecord(
                name=name,
                quantity=parse_amount(pick_value(row, qty_cols)),
                revenue=parse_amount(pick_value(row, revenue_cols)),
                unit_price=parse_amount(pick_value(row, price_cols)),
                transaction_id=cell_text(pick_value(row, txn_cols)).strip() or None,
                payment_date_key=to_date_key(pick_value(row, payment_cols)),
                purchase_month_key=to_month_key_from_purchase(purchase_raw),
                purchase_day_key=to_day_key_from_purchase(purchase_raw),
            )
        )
    if dropped:
        logger.debug("sales rows without product name dropped: %d (%s)", dropped, sheet.name)
    return records, dropped


def aggregate_by_product(records: Iterable[ProductRecord]) -> list[ProductRecord]:
    """One record per distinct name, quantity and revenue summed.

    The first record seen for a name supplies the remaining fields. Output is
    sorted descending by revenue; ties keep first-seen order so aggregating an
    aggregate is a no-op.
    """
    aggregated: dict[str, ProductRecord] = {}
    for item in records:
        prev = aggregated.get(item.name)
        if prev is None:
            aggregated[item.name] = item
        else:
            aggregated[item.name] = replace(
                prev,
                quantity=prev.quantity + item.quantity,
                revenue=prev.revenue + item.revenue,
            )
    return sorted(aggregated.values(), key=lambda r: r.revenue, reverse=True)


def normalize_product_name(name: str) -> str:
    """Lower-case and drop whitespace, ``_``, ``-`` and ``/`` for base-name matching."""
    return _NAME_NOISE_RE.sub("", name.lower()).strip()


def is_variant(name: str, delimiter: str = "_") -> bool:
    return delimiter in name


def is_sock_variant(name: str, delimiter: str = "_", sock_marker: str = "양말") -> bool:
    return delimiter in name and sock_marker in name


def _variant_base_key(name: str, delimiter: str) -> str:
    idx = name.rfind(delimiter)
    base_raw = name[:idx].strip() if idx > 0 else name.strip()
    return normalize_product_name(base_raw)


def group_products(
    records: Sequence[ProductRecord],
    *,
    sock_marker: str = "양말",
    delimiter: str = "_",
    fixed_unit_prices: Mapping[str, float] = DEFAULT_FIXED_UNIT_PRICES,
) -> GroupingResult:
    """Split aggregated records into base products with their matched variants.

    Matching:
    - regular variants: the text before the last delimiter, normalized, must
      equal the normalized base name
    - sock variants (name contains ``sock_marker``): matched to sock bases by
      raw substring containment of the base name in the variant name

    Revenue is recomputed after matching: each variant becomes
    ``base.unit_price * variant.quantity``; fixed-price bag bases become
    ``fixed price * quantity``; other bases with variants become the sum of
    their variants; bases without variants keep their aggregated revenue.
    Groups are ordered by the base revenue *before* recomputation.
    Variants whose base is absent are returned in ``unmatched_variants``.
    """
    bases: dict[str, ProductRecord] = {}
    variants_by_base_key: dict[str, list[ProductRecord]] = {}
    sock_variants: list[ProductRecord] = []
    variant_order: list[ProductRecord] = []

    for item in records:
        if is_variant(item.name, delimiter):
            variant_order.append(item)
            if sock_marker in item.name:
                # 양말 예외: 메인 상품명 포함 여부로 나중에 매칭
                sock_variants.append(item)
            else:
                variants_by_base_key.setdefault(_variant_base_key(item.name, delimiter), []).append(item)
        else:
            bases[item.name] = item

    groups: list[GroupedProduct] = []
    matched: set[str] = set()
    for base in sorted(bases.values(), key=lambda r: r.revenue, reverse=True):
        if sock_marker in base.name:
            raw_variants = [v for v in sock_variants if base.name in v.name]
        else:
            raw_variants = variants_by_base_key.get(normalize_product_name(base.name), [])
        matched.update(v.name for v in raw_variants)

        unit_price = base.unit_price or 0
        variants = sorted(
            (replace(v, revenue=unit_price * v.quantity) for v in raw_variants),
            key=lambda r: r.quantity,
            reverse=True,
        )

        if base.name in fixed_unit_prices:
            fixed = fixed_unit_prices[base.name]
            recomputed = replace(base, unit_price=fixed, revenue=fixed * base.quantity)
        elif variants:
            recomputed = replace(base, revenue=sum(v.revenue for v in variants))
        else:
            recomputed = base
        groups.append(GroupedProduct(base=recomputed, variants=variants))

    unmatched = [v for v in variant_order if v.name not in matched]
    if unmatched:
        logger.debug(
            "variants without base dropped: %d (%s)",
            len(unmatched),
            ", ".join(v.name for v in unmatched[:5]),
        )
    return GroupingResult(groups=groups, unmatched_variants=unmatched)


def bag_point_adjustment(
    records: Iterable[ProductRecord],
    fixed_unit_prices: Mapping[str, float] = DEFAULT_FIXED_UNIT_PRICES,
) -> float:
    """Point amount attributable to bags in transactions whose totals disagree.

    Records are grouped by transaction id. When the sum of unit price times
    quantity differs from the sum of positive paid amounts, every fixed-price
    item in that transaction contributes its fixed price times quantity.
    """
    by_txn: dict[str, list[ProductRecord]] = {}
    for item in records:
        uid = (item.transaction_id or "").strip()
        if not uid:
            continue
        by_txn.setdefault(uid, []).append(item)

    adjustment = 0.0
    for items in by_txn.values():
        individual = sum((it.unit_price or 0) * it.quantity for it in items)
        paid = sum(it.revenue for it in items if it.revenue > 0)
        if individual != paid:
            for it in items:
                if it.name in fixed_unit_prices:
                    adjustment += fixed_unit_prices[it.name] * it.quantity
    return adjustment


def available_days(records: Iterable[ProductRecord]) -> list[str]:
    return sorted({r.purchase_day_key for r in records if r.purchase_day_key})


def records_for_day(records: Sequence[ProductRecord], day: str | None) -> list[ProductRecord]:
    if not day or day == ALL_DAYS:
        return list(records)
    return [r for r in records if r.purchase_day_key == day]


def build_sales_report(
    records: Sequence[ProductRecord],
    *,
    day: str | None = None,
    sock_marker: str = "양말",
    delimiter: str = "_",
    fixed_unit_prices: Mapping[str, float] = DEFAULT_FIXED_UNIT_PRICES,
    dropped_rows: int = 0,
) -> SalesReport:
    """Compute the grouped report and page totals for one day scope."""
    scoped = records_for_day(records, day)
    grouping = group_products(
        aggregate_by_product(scoped),
        sock_marker=sock_marker,
        delimiter=delimiter,
        fixed_unit_prices=fixed_unit_prices,
    )
    return SalesReport(
        groups=grouping.groups,
        total_paid=sum(r.revenue for r in scoped),
        total_sale=sum(g.base.revenue for g in grouping.groups),
        bag_point_adjustment=bag_point_adjustment(scoped, fixed_unit_prices),
        total_quantity=sum(g.base.quantity for g in grouping.groups),
        unmatched_variants=len(grouping.unmatched_variants),
        dropped_rows=dropped_rows,
        day=None if not day or day == ALL_DAYS else day,
        available_days=available_days(records),
    )
