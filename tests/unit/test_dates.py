from __future__ import annotations

import re
from datetime import date, datetime

import pytest

from retail_recon.services.dates import to_date_key, to_day_key_from_purchase, to_month_key_from_purchase


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024.3.5", "2024-03-05"),
        ("2024-03-05 14:22:01", "2024-03-05"),
        ("결제: 2024/12/31", "2024-12-31"),
        ("March 5, 2024", "2024-03-05"),
        (45356, "2024-03-05"),
        (45356.75, "2024-03-05"),
        (datetime(2024, 3, 5, 10, 30), "2024-03-05"),
        (date(2024, 3, 5), "2024-03-05"),
    ],
)
def test_to_date_key(value, expected):
    assert to_date_key(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", "not a date", float("nan"), 1e12, True, 0, -45356, 2958466])
def test_to_date_key_unparseable_returns_none(value):
    assert to_date_key(value) is None


@pytest.mark.parametrize("serial", [1, 60, 61, 100000, 2958465, 2958465.9])
def test_to_date_key_serial_in_range_is_day_key_or_none(serial):
    # pandas 버전에 따라 범위 밖 Timestamp 처리 다름
    key = to_date_key(serial)
    assert key is None or re.fullmatch(r"\d{4}-\d{2}-\d{2}", key)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("20240305142201", "2024-03"),
        (20240305142201, "2024-03"),
        ("2024-03", "2024-03"),
        ("202412", "2024-12"),
    ],
)
def test_to_month_key_from_purchase(value, expected):
    assert to_month_key_from_purchase(value) == expected


@pytest.mark.parametrize("value", [None, "20241", "202413", "202400", "abc", ""])
def test_to_month_key_from_purchase_invalid(value):
    assert to_month_key_from_purchase(value) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("20240305142201", "2024-03-05"),
        (20240305142201.0, "2024-03-05"),
        ("2024-03-31 23:59", "2024-03-31"),
        # 달력 검증 없이 범위만 확인
        ("20240231", "2024-02-31"),
    ],
)
def test_to_day_key_from_purchase(value, expected):
    assert to_day_key_from_purchase(value) == expected


@pytest.mark.parametrize("value", [None, "2024030", "20240300", "20240332", "20241305", "x"])
def test_to_day_key_from_purchase_invalid(value):
    assert to_day_key_from_purchase(value) is None
