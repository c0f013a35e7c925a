from __future__ import annotations

from datetime import datetime

import pytest

from retail_recon.models.sheet import Sheet
from retail_recon.models.statistics import ColumnSummary
from retail_recon.services.statistics import numeric_values, sheet_statistics
from retail_recon.services.summary import render_stats_summary


def _sheet(headers, rows):
    return Sheet(name="s.xlsx", headers=headers, rows=[dict(zip(headers, r)) for r in rows])


def test_sheet_statistics_numeric_and_text_columns():
    sheet = _sheet(
        ["상품명", "재고", "가격"],
        [["가방", 3, "1000"], ["모자", "", "2500.5"], ["가방", 7.0, "무료"]],
    )
    stats = sheet_statistics(sheet)
    assert stats.total_rows == 3
    assert stats.total_columns == 3
    assert stats.column_names == ["상품명", "재고", "가격"]
    assert stats.numeric_columns == ["재고", "가격"]
    assert stats.summary_stats["재고"] == ColumnSummary(min=3, max=7, avg=5, sum=10, count=2)
    assert stats.summary_stats["가격"].sum == pytest.approx(3500.5)
    assert stats.summary_stats["가격"].count == 2
    assert stats.value_counts["상품명"] == {"가방": 2, "모자": 1}
    # 빈 칸은 집계하지 않음
    assert stats.value_counts["재고"] == {"3": 1, "7": 1}


def test_sheet_statistics_empty_sheet():
    stats = sheet_statistics(Sheet(name="e", headers=[], rows=[]))
    assert stats.total_rows == 0
    assert stats.total_columns == 0
    assert stats.numeric_columns == []
    assert render_stats_summary(stats) == "SUMMARY stats rows=0 columns=0 numeric_columns=0"


@pytest.mark.parametrize(
    "values, expected",
    [
        ([1, 2.5, "3", " 4 "], [1.0, 2.5, 3.0, 4.0]),
        (["1,000", "abc", "nan", "inf"], []),
        ([True, False, datetime(2024, 3, 5)], []),
        ([float("nan"), -2], [-2.0]),
        ([], []),
    ],
)
def test_numeric_values(values, expected):
    assert numeric_values(values) == expected


def test_render_stats_summary():
    sheet = _sheet(["a", "b"], [["x", 1], ["y", 2]])
    assert render_stats_summary(sheet_statistics(sheet)) == "SUMMARY stats rows=2 columns=2 numeric_columns=1"
