from __future__ import annotations

from pathlib import Path

import pytest

from retail_recon.excel.reader import read_first_sheet
from retail_recon.excel.reference import ReferenceTableError, load_product_refs
from retail_recon.excel.writer import write_sheet
from retail_recon.models.product import ProductRef


def test_write_sheet_keeps_header_order_and_strips_bookkeeping(tmp_path: Path):
    rows = [
        {"재고": 7, "상품명": "가방", "__changed__재고": True, "__prev__재고": 1, "extra": "x"},
        {"상품명": "모자"},
    ]
    out = write_sheet(tmp_path / "out" / "merged.xlsx", ["상품명", "재고"], rows)
    assert out.exists()
    sheet = read_first_sheet(out)
    assert sheet.headers == ["상품명", "재고"]
    assert sheet.rows[0] == {"상품명": "가방", "재고": 7}
    assert sheet.rows[1] == {"상품명": "모자", "재고": ""}


def test_write_sheet_without_rows_writes_header_only(tmp_path: Path):
    out = write_sheet(tmp_path / "empty.xlsx", ["a", "b"], [])
    sheet = read_first_sheet(out)
    assert sheet.headers == ["a", "b"]
    assert sheet.rows == []


def test_load_product_refs(tmp_path: Path):
    path = tmp_path / "refs.csv"
    path.write_text(
        "상품명,품번,품목코드\n가방,BAG-01,1001\n 모자 ,,2002\n,X,3\n",
        encoding="utf-8",
    )
    refs = load_product_refs(path)
    assert refs == {
        "가방": ProductRef(code="BAG-01", item_code="1001"),
        "모자": ProductRef(code=None, item_code="2002"),
    }


def test_load_product_refs_errors(tmp_path: Path):
    with pytest.raises(ReferenceTableError, match="not found"):
        load_product_refs(tmp_path / "missing.csv")

    narrow = tmp_path / "narrow.csv"
    narrow.write_text("상품명,품번\n가방,BAG\n", encoding="utf-8")
    with pytest.raises(ReferenceTableError, match="needs 3 columns"):
        load_product_refs(narrow)


def test_load_product_refs_row_with_extra_fields_keeps_first_three(tmp_path: Path):
    path = tmp_path / "refs.csv"
    path.write_text("상품명,품번,품목코드\n가방,BAG-01,1001\n모자,HAT,2002,extra\n", encoding="utf-8")
    refs = load_product_refs(path)
    assert refs == {
        "가방": ProductRef(code="BAG-01", item_code="1001"),
        "모자": ProductRef(code="HAT", item_code="2002"),
    }
