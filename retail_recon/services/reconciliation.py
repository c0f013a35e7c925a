from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from ..models.reconciliation import (
    KeyAggregate,
    ReconciliationRow,
    ReconciliationStatus,
    ReconciliationSummary,
    SettlementEntry,
)
from ..models.sheet import Row, Sheet
from .headers import find_header_containing
from .normalize import cell_text, normalize_approval_or_id, parse_amount

"""Transaction reconciliation between two settlement sources.

Side A is the card settlement report, side B the admin sales export. Both
are reduced to (approval number, amount) pairs; approval numbers are compared
digits-only because the sources disagree on dashes and spaces.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_TOLERANCE",
    "EMPTY_REMARK",
    "RECONCILIATION_HEADERS",
    "settlement_entries",
    "sales_entries",
    "aggregate_by_key",
    "reconcile",
    "filter_rows",
    "summarize",
    "remark_options",
    "reconciliation_rows",
]

T = TypeVar("T")

DEFAULT_TOLERANCE = 1.0  # 1원 미만 차이는 동일로 간주
EMPTY_REMARK = "__EMPTY__"

RECONCILIATION_HEADERS = ["승인번호", "승인일", "결제일시", "정산금액", "매출금액", "차액", "상태", "비고"]

_STATUS_LABELS = {
    ReconciliationStatus.MATCHED: "일치",
    ReconciliationStatus.MISMATCHED: "불일치",
    ReconciliationStatus.ONLY_A: "정산만 있음",
    ReconciliationStatus.ONLY_B: "매출만 있음",
}


def _entries(
    sheet: Sheet,
    approval_col: str | None,
    amount_col: str | None,
    date_col: str | None,
    remark_col: str | None,
) -> list[SettlementEntry]:
    entries: list[SettlementEntry] = []
    skipped = 0
    for row in sheet.rows:
        approval = cell_text(row.get(approval_col) if approval_col else "").strip()
        if not normalize_approval_or_id(approval):
            skipped += 1
            continue
        entries.append(
            SettlementEntry(
                approval_no=approval,
                amount=parse_amount(row.get(amount_col) if amount_col else 0),
                date=cell_text(row.get(date_col)).strip() if date_col else None,
                remark=cell_text(row.get(remark_col)).strip() if remark_col else None,
            )
        )
    if skipped:
        logger.debug("rows without approval number skipped: %d (%s)", skipped, sheet.name)
    return entries


def settlement_entries(sheet: Sheet) -> list[SettlementEntry]:
    """Side A: settlement report columns found by header containment."""
    headers = sheet.headers
    return _entries(
        sheet,
        approval_col=find_header_containing(headers, "승인번호"),
        amount_col=find_header_containing(headers, "거래금액"),
        date_col=find_header_containing(headers, "승인일"),
        remark_col=find_header_containing(headers, "비고"),
    )


def sales_entries(sheet: Sheet) -> list[SettlementEntry]:
    """Side B: admin sales export; amount column by fixed preference."""
    headers = sheet.headers
    return _entries(
        sheet,
        approval_col=find_header_containing(headers, "승인번호"),
        amount_col=find_header_containing(headers, "매출금액(배송비포함)", "주문금액", "결제금액"),
        date_col=find_header_containing(headers, "결제일시", "구매일시"),
        remark_col=None,
    )


def aggregate_by_key(
    rows: Iterable[T],
    amount_of: Callable[[T], float],
    key_of: Callable[[T], Any] = lambda r: r.approval_no,  # type: ignore[attr-defined]
) -> dict[str, KeyAggregate]:
    """Sum amounts per digits-only key.

    Rows whose normalized key is empty are discarded. The first row seen for a
    key is kept as the sample for display fields.
    """
    result: dict[str, KeyAggregate] = {}
    dropped = 0
    for row in rows:
        key = normalize_approval_or_id(key_of(row))
        if not key:
            dropped += 1
            continue
        amount = amount_of(row)
        prev = result.get(key)
        if prev is None:
            result[key] = KeyAggregate(amount=amount, sample=row)
        else:
            prev.amount += amount
            prev.count += 1
    if dropped:
        logger.debug("rows with empty key dropped: %d", dropped)
    return result


def reconcile(
    side_a: Mapping[str, KeyAggregate],
    side_b: Mapping[str, KeyAggregate],
    tolerance: float = DEFAULT_TOLERANCE,
) -> list[ReconciliationRow]:
    """Classify every key present on either side; sorted ascending by key."""
    rows: list[ReconciliationRow] = []
    for key in sorted(set(side_a) | set(side_b)):
        a = side_a.get(key)
        b = side_b.get(key)
        a_amount = a.amount if a is not None else None
        b_amount = b.amount if b is not None else None
        difference = (a_amount or 0) - (b_amount or 0)
        if a is not None and b is not None:
            status = (
                ReconciliationStatus.MATCHED
                if abs(difference) < tolerance
                else ReconciliationStatus.MISMATCHED
            )
        elif a is not None:
            status = ReconciliationStatus.ONLY_A
        else:
            status = ReconciliationStatus.ONLY_B
        rows.append(
            ReconciliationRow(
                key=key,
                side_a_amount=a_amount,
                side_b_amount=b_amount,
                difference=difference,
                status=status,
                side_a_sample=a.sample if a is not None else None,
                side_b_sample=b.sample if b is not None else None,
            )
        )
    return rows


def filter_rows(
    rows: Sequence[ReconciliationRow],
    *,
    only_discrepancies: bool = False,
    remark: str | None = None,
) -> list[ReconciliationRow]:
    """Display filters: discrepancies only, and/or remark (``EMPTY_REMARK`` = none)."""
    out = [r for r in rows if r.status is not ReconciliationStatus.MATCHED] if only_discrepancies else list(rows)
    if not remark:
        return out
    if remark == EMPTY_REMARK:
        return [r for r in out if not (r.remark and r.remark.strip())]
    target = remark.strip()
    return [r for r in out if (r.remark or "").strip() == target]


def summarize(
    rows: Sequence[ReconciliationRow],
    excluded_keys: Collection[str] = frozenset(),
) -> ReconciliationSummary:
    """Totals over displayed rows minus the excluded keys.

    Excluded keys stay in the displayed list; they only leave the totals.
    """
    included = [r for r in rows if r.key not in excluded_keys]

    def count(status: ReconciliationStatus) -> int:
        return sum(1 for r in included if r.status is status)

    return ReconciliationSummary(
        total_a=sum(r.side_a_amount or 0 for r in included),
        total_b=sum(r.side_b_amount or 0 for r in included),
        total_keys=len(included),
        matched=count(ReconciliationStatus.MATCHED),
        mismatched=count(ReconciliationStatus.MISMATCHED),
        only_a=count(ReconciliationStatus.ONLY_A),
        only_b=count(ReconciliationStatus.ONLY_B),
        total_difference=sum(r.difference for r in included),
    )


def remark_options(entries: Iterable[SettlementEntry]) -> list[str]:
    return sorted({(e.remark or "").strip() for e in entries} - {""})


def reconciliation_rows(rows: Iterable[ReconciliationRow]) -> list[Row]:
    """Export shape of the comparison table."""
    out: list[Row] = []
    for r in rows:
        a = r.side_a_sample
        b = r.side_b_sample
        out.append(
            {
                "승인번호": r.key,
                "승인일": getattr(a, "date", None) or "",
                "결제일시": getattr(b, "date", None) or "",
                "정산금액": "" if r.side_a_amount is None else r.side_a_amount,
                "매출금액": "" if r.side_b_amount is None else r.side_b_amount,
                "차액": r.difference,
                "상태": _STATUS_LABELS[r.status],
                "비고": r.remark or "",
            }
        )
    return out
