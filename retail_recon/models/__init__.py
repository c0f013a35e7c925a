"""Domain models for the retail spreadsheet reconciliation tools.

Every model is a plain dataclass; most are frozen so engines return new
objects instead of mutating their inputs.
"""

from .compare import NameComparison
from .config_models import AppConfig
from .merge import CellChange, MergedRow, MergeMapping, MergeResult, VendorSegment
from .product import GroupedProduct, GroupingResult, ProductRecord, ProductRef, SalesReport, StockLevel
from .reconciliation import (
    KeyAggregate,
    ReconciliationRow,
    ReconciliationStatus,
    ReconciliationSummary,
    SettlementEntry,
)
from .sheet import Row, Sheet
from .statistics import ColumnSummary, SheetStatistics

__all__ = [
    # Configuration models
    "AppConfig",
    # Input shape
    "Row",
    "Sheet",
    # Sales report
    "GroupedProduct",
    "GroupingResult",
    "ProductRecord",
    "ProductRef",
    "SalesReport",
    "StockLevel",
    # Settlement
    "KeyAggregate",
    "ReconciliationRow",
    "ReconciliationStatus",
    "ReconciliationSummary",
    "SettlementEntry",
    # Stock merge
    "CellChange",
    "MergedRow",
    "MergeMapping",
    "MergeResult",
    "VendorSegment",
    # Name compare
    "NameComparison",
    # Column statistics
    "ColumnSummary",
    "SheetStatistics",
]
