from __future__ import annotations

from dataclasses import dataclass, field

"""Product domain models for the sales report workflow.

ProductRecord is built from one raw sales row, then aggregated per distinct
name and grouped into base/variant pairs by ``services.grouping``.
"""

__all__ = [
    "ProductRecord",
    "GroupedProduct",
    "GroupingResult",
    "StockLevel",
    "ProductRef",
    "SalesReport",
]


@dataclass(frozen=True)
class ProductRecord:
    """One sold product line (or the per-name aggregate of several lines)."""
    name: str  # 상품명
    quantity: float  # 수량
    revenue: float  # 매출금액
    unit_price: float | None = None  # 개별금액 (base rows carry the reliable price)
    transaction_id: str | None = None  # 구매UID / 주문번호
    payment_date_key: str | None = None  # YYYY-MM-DD
    purchase_month_key: str | None = None  # YYYY-MM
    purchase_day_key: str | None = None  # YYYY-MM-DD


@dataclass(frozen=True)
class GroupedProduct:
    """A base product with the size/sub-SKU variants matched to it.

    After recomputation every variant revenue equals
    ``base.unit_price * variant.quantity`` and the base revenue is either the
    fixed bag price times quantity or the sum of the variant revenues.
    """
    base: ProductRecord
    variants: list[ProductRecord] = field(default_factory=list)


@dataclass(frozen=True)
class GroupingResult:
    groups: list[GroupedProduct]
    unmatched_variants: list[ProductRecord] = field(default_factory=list)  # base 미매칭 (출력 제외)


@dataclass(frozen=True)
class StockLevel:
    qty: float | None = None
    location: str | None = None


@dataclass(frozen=True)
class ProductRef:
    """Row of the static reference table (상품명,품번,품목코드)."""
    code: str | None = None  # 품번
    item_code: str | None = None  # 품목코드


@dataclass(frozen=True)
class SalesReport:
    """Everything the sales page shows for one day scope.

    ``point_usage`` is derived: ``total_sale - total_paid + bag_point_adjustment``.
    """
    groups: list[GroupedProduct]
    total_paid: float  # 결제금액 합계 (원본)
    total_sale: float  # 재계산된 판매금액 합계
    bag_point_adjustment: float
    total_quantity: float
    unmatched_variants: int = 0
    dropped_rows: int = 0
    day: str | None = None  # None = 전체
    available_days: list[str] = field(default_factory=list)

    @property
    def point_usage(self) -> float:
        return self.total_sale - self.total_paid + self.bag_point_adjustment
