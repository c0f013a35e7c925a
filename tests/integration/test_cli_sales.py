from __future__ import annotations

from pathlib import Path

import pytest

from retail_recon.cli import main as cli_main
from retail_recon.excel.reader import read_first_sheet

SALES_HEADER = ["상품명", "수량", "결제금액", "개별금액", "구매UID", "구매일시"]


@pytest.fixture()
def sales_file(workbook) -> Path:
    return workbook(
        "sales.xlsx",
        [
            SALES_HEADER,
            ["가방", 0, 0, 1000, None, "20240305100000"],
            ["가방_S", 2, 2000, None, "U1", "20240305100000"],
            ["가방_M", 3, 3000, None, "U2", "20240306100000"],
            ["쇼핑백 중", 1, 0, 100, "U2", "20240306100000"],
            [None, 1, 500, None, "U3", "20240306100000"],
        ],
    )


def test_sales_all_days(temp_workdir: Path, sales_file: Path, capsys):
    code = cli_main(["sales", str(sales_file)])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO sales file: sales.xlsx rows=4" in out
    assert (
        "SUMMARY sales day=ALL products=2 quantity=1 sale=5100 paid=5000 points=200 "
        "unmatched_variants=0 dropped_rows=1"
    ) in out

    report = read_first_sheet(temp_workdir / "output" / "sales_ALL.xlsx")
    assert report.headers[:2] == ["순위", "상품명"]
    assert [r["상품명"] for r in report.rows] == ["가방", "- 가방_M", "- 가방_S", "쇼핑백 중"]
    assert [r["판매 금액"] for r in report.rows] == [5000, 3000, 2000, 100]


def test_sales_single_day_drops_variants_without_base(temp_workdir: Path, sales_file: Path, capsys):
    code = cli_main(["sales", str(sales_file), "--day", "2024-03-06"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY sales day=2024-03-06 products=1" in out
    assert "unmatched_variants=1" in out
    assert (temp_workdir / "output" / "sales_2024-03-06.xlsx").exists()


def test_sales_with_stock_and_reference(temp_workdir: Path, sales_file: Path, workbook, capsys):
    stock = workbook("stock.xlsx", [["상품명", "재고수량", "진열 위치"], ["가방_M", 10, "A-1"], ["가방", 4, "A"]])
    refs = temp_workdir / "data" / "refs.csv"
    refs.write_text("상품명,품번,품목코드\n가방,BAG-01,1001\n", encoding="utf-8")
    output = temp_workdir / "out.xlsx"

    code = cli_main([
        "sales", str(sales_file),
        "--day", "2024-03-05",
        "--stock", str(stock),
        "--reference", str(refs),
        "--output", str(output),
    ])
    capsys.readouterr()
    assert code == 0

    rows = {r["상품명"]: r for r in read_first_sheet(output, raw=False).rows}
    assert rows["가방"]["품번"] == "BAG-01"
    assert rows["가방"]["품목코드"] == "1001"
    assert rows["가방"]["진열 위치"] == "A"
    # 03-06 판매분(가방_M 3개)은 03-05 기준 재고에 다시 더함
    assert "- 가방_M" not in rows
    assert rows["- 가방_S"]["품번"] == "BAG-01"


def test_sales_adds_back_later_sales_to_stock(temp_workdir: Path, workbook, capsys):
    sales = workbook(
        "sales.xlsx",
        [
            SALES_HEADER,
            ["모자", 1, 500, 500, "U1", "20240305100000"],
            ["모자", 2, 1000, 500, "U2", "20240306100000"],
        ],
    )
    stock = workbook("stock.xlsx", [["상품명", "재고"], ["모자", 10]])
    code = cli_main(["sales", str(sales), "--day", "2024-03-05", "--stock", str(stock)])
    capsys.readouterr()
    assert code == 0
    report = read_first_sheet(temp_workdir / "output" / "sales_2024-03-05.xlsx")
    assert report.rows[0]["재고 수량"] == 12


def test_sales_unknown_day_warns(temp_workdir: Path, sales_file: Path, capsys):
    code = cli_main(["sales", str(sales_file), "--day", "2024-01-01"])
    out = capsys.readouterr().out
    assert code == 0
    assert "WARN no sales on day 2024-01-01 (available: 2024-03-05, 2024-03-06)" in out
    assert "products=0" in out


def test_sales_config_reference_missing_is_fatal(temp_workdir: Path, sales_file: Path, capsys):
    cfg = temp_workdir / "config" / "retail_recon.yml"
    cfg.write_text("reference_csv: data/missing.csv\n", encoding="utf-8")
    code = cli_main(["sales", str(sales_file)])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR reference: reference table not found" in out
