# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from retail_recon.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "output").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("RETAIL_RECON_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """reconciliation_tolerance: 1
sock_marker: 양말
variant_delimiter: _
fixed_unit_prices:
  쇼핑백 중: 100
  쇼핑백 대: 200
output_directory: ./output
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "retail_recon.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_workbook(path: Path, rows: list[list[object]]) -> Path:
    """Write a single-sheet xlsx; the first row is the header row."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
    return path


@pytest.fixture()
def workbook(temp_workdir: Path):
    def _make(name: str, rows: list[list[object]]) -> Path:
        return make_workbook(temp_workdir / "data" / name, rows)
    return _make
