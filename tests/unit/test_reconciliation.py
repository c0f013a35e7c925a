from __future__ import annotations

import pytest

from retail_recon.models.reconciliation import ReconciliationStatus, SettlementEntry
from retail_recon.models.sheet import Sheet
from retail_recon.services.reconciliation import (
    EMPTY_REMARK,
    RECONCILIATION_HEADERS,
    aggregate_by_key,
    filter_rows,
    reconcile,
    reconciliation_rows,
    remark_options,
    sales_entries,
    settlement_entries,
    summarize,
)


def _entry(key: str, amount: float, remark: str | None = None, date: str | None = None) -> SettlementEntry:
    return SettlementEntry(approval_no=key, amount=amount, remark=remark, date=date)


def _agg(entries):
    return aggregate_by_key(entries, lambda e: e.amount)


def _sheet(headers, rows):
    return Sheet(name="x.xlsx", headers=headers, rows=[dict(zip(headers, r)) for r in rows])


def test_normalized_keys_match_across_sides():
    rows = reconcile(_agg([_entry("123-456", 1000)]), _agg([_entry("123456", 1000)]))
    assert len(rows) == 1
    row = rows[0]
    assert row.key == "123456"
    assert row.status is ReconciliationStatus.MATCHED
    assert row.difference == 0


@pytest.mark.parametrize(
    "a, b, status",
    [
        (1000.99, 1000, ReconciliationStatus.MATCHED),
        (1001, 1000, ReconciliationStatus.MISMATCHED),
        (1000, 1001, ReconciliationStatus.MISMATCHED),
    ],
)
def test_tolerance_boundary(a, b, status):
    rows = reconcile(_agg([_entry("1", a)]), _agg([_entry("1", b)]))
    assert rows[0].status is status


def test_tolerance_is_configurable():
    rows = reconcile(_agg([_entry("1", 1005)]), _agg([_entry("1", 1000)]), tolerance=10)
    assert rows[0].status is ReconciliationStatus.MATCHED


def test_one_sided_keys_and_sorting():
    a = _agg([_entry("300", 10), _entry("100", 5)])
    b = _agg([_entry("200", 7), _entry("100", 5)])
    rows = reconcile(a, b)
    assert [r.key for r in rows] == ["100", "200", "300"]
    by_key = {r.key: r for r in rows}
    assert by_key["200"].status is ReconciliationStatus.ONLY_B
    assert by_key["200"].side_a_amount is None
    assert by_key["200"].difference == -7
    assert by_key["300"].status is ReconciliationStatus.ONLY_A
    assert by_key["300"].difference == 10


def test_status_counts_cover_union_of_keys():
    a = _agg([_entry(str(k), k) for k in (1, 2, 3, 4)])
    b = _agg([_entry(str(k), k + (5 if k == 2 else 0)) for k in (2, 3, 5)])
    summary = summarize(reconcile(a, b))
    assert summary.total_keys == len({"1", "2", "3", "4"} | {"2", "3", "5"})
    assert summary.matched + summary.mismatched + summary.only_a + summary.only_b == summary.total_keys
    assert (summary.matched, summary.mismatched, summary.only_a, summary.only_b) == (1, 1, 2, 1)


def test_aggregate_by_key_sums_and_drops_empty_keys():
    result = _agg([_entry("12-34", 100, date="d1"), _entry("1234", 50, date="d2"), _entry("--", 999), _entry("", 1)])
    assert list(result) == ["1234"]
    agg = result["1234"]
    assert agg.amount == 150
    assert agg.count == 2
    assert agg.sample.date == "d1"


def test_aggregate_by_key_custom_key():
    rows = [{"id": "A-1", "v": 2}, {"id": "A1", "v": 3}]
    result = aggregate_by_key(rows, lambda r: r["v"], key_of=lambda r: r["id"])
    assert result["1"].amount == 5


def test_summarize_excludes_keys_from_totals():
    rows = reconcile(
        _agg([_entry("1", 100), _entry("2", 200)]),
        _agg([_entry("1", 100), _entry("2", 150)]),
    )
    full = summarize(rows)
    assert full.total_a == 300
    assert full.total_b == 250
    assert full.total_difference == 50

    partial = summarize(rows, excluded_keys={"2"})
    assert partial.total_a == 100
    assert partial.total_keys == 1
    assert partial.mismatched == 0
    assert partial.total_difference == 0


def test_filter_rows_by_status_and_remark():
    a = _agg([_entry("1", 100, remark="환불"), _entry("2", 200, remark=" "), _entry("3", 300)])
    b = _agg([_entry("1", 100), _entry("2", 100)])
    rows = reconcile(a, b)

    assert [r.key for r in filter_rows(rows, only_discrepancies=True)] == ["2", "3"]
    assert [r.key for r in filter_rows(rows, remark="환불")] == ["1"]
    assert [r.key for r in filter_rows(rows, remark=EMPTY_REMARK)] == ["2", "3"]
    assert [r.key for r in filter_rows(rows, only_discrepancies=True, remark=EMPTY_REMARK)] == ["2", "3"]
    assert len(filter_rows(rows)) == 3


def test_remark_options_sorted_distinct():
    entries = [_entry("1", 0, "환불"), _entry("2", 0, " 취소 "), _entry("3", 0, "환불"), _entry("4", 0, "")]
    assert remark_options(entries) == ["취소", "환불"]


def test_settlement_entries_find_columns_by_containment():
    sheet = _sheet(
        ["카드 승인번호", "거래금액(원)", "승인일자", "비고 사항"],
        [
            ["123-456", "1,000", "2024-03-05", "환불"],
            ["", 500, "2024-03-05", ""],
            ["999", 200, "", ""],
        ],
    )
    entries = settlement_entries(sheet)
    assert [(e.approval_no, e.amount) for e in entries] == [("123-456", 1000), ("999", 200)]
    assert entries[0].date == "2024-03-05"
    assert entries[0].remark == "환불"
    assert entries[1].remark == ""


def test_sales_entries_amount_preference():
    sheet = _sheet(
        ["승인번호", "결제금액", "주문금액", "결제일시"],
        [["77", 100, 120, "2024-03-05 10:00"]],
    )
    entries = sales_entries(sheet)
    assert entries[0].amount == 120
    assert entries[0].date == "2024-03-05 10:00"
    assert entries[0].remark is None


def test_reconciliation_rows_export_shape():
    a = _agg([_entry("1", 100, remark="메모", date="2024-03-05")])
    b = _agg([_entry("2", 50, date="2024-03-06 12:00")])
    exported = reconciliation_rows(reconcile(a, b))
    assert all(list(r) == RECONCILIATION_HEADERS for r in exported)
    first, second = exported
    assert first["상태"] == "정산만 있음"
    assert first["매출금액"] == ""
    assert first["비고"] == "메모"
    assert second["상태"] == "매출만 있음"
    assert second["결제일시"] == "2024-03-06 12:00"
