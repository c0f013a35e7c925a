from __future__ import annotations

from ..models.compare import NameComparison
from ..models.merge import MergeResult
from ..models.product import SalesReport
from ..models.reconciliation import ReconciliationSummary
from ..models.statistics import SheetStatistics

"""SUMMARY line rendering, one line per CLI command.

Format: ``SUMMARY <command> key=value key=value ...``. Numbers are rendered
without a trailing ``.0`` and never in scientific notation.
"""

__all__ = [
    "format_number",
    "render_sales_summary",
    "render_settlement_summary",
    "render_merge_summary",
    "render_compare_summary",
    "render_stats_summary",
]


def format_number(value: float) -> str:
    """Render a number for a SUMMARY line.

    Examples:
        >>> format_number(5000.0)
        '5000'
        >>> format_number(0.5)
        '0.5'
        >>> format_number(-12.25)
        '-12.25'
    """
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        # 지수 표기 방지
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 2))


def render_sales_summary(report: SalesReport) -> str:
    return (
        f"SUMMARY sales day={report.day or 'ALL'} "
        f"products={len(report.groups)} "
        f"quantity={format_number(report.total_quantity)} "
        f"sale={format_number(report.total_sale)} "
        f"paid={format_number(report.total_paid)} "
        f"points={format_number(report.point_usage)} "
        f"unmatched_variants={report.unmatched_variants} "
        f"dropped_rows={report.dropped_rows}"
    )


def render_settlement_summary(summary: ReconciliationSummary) -> str:
    return (
        f"SUMMARY settle keys={summary.total_keys} "
        f"matched={summary.matched} "
        f"mismatched={summary.mismatched} "
        f"only_a={summary.only_a} "
        f"only_b={summary.only_b} "
        f"total_a={format_number(summary.total_a)} "
        f"total_b={format_number(summary.total_b)} "
        f"difference={format_number(summary.total_difference)}"
    )


def render_merge_summary(result: MergeResult) -> str:
    join_key = result.mapping.join_key if result.mapping and result.mapping.join_key else "-"
    return (
        f"SUMMARY merge rows={len(result.rows)} "
        f"changed_rows={result.changed_rows} "
        f"changed_cells={result.changed_cells} "
        f"unmatched_rows={result.unmatched_rows} "
        f"join_key={join_key}"
    )


def render_compare_summary(comparison: NameComparison) -> str:
    return (
        f"SUMMARY compare only_left={len(comparison.only_left)} "
        f"only_right={len(comparison.only_right)} "
        f"in_both={len(comparison.in_both)}"
    )


def render_stats_summary(stats: SheetStatistics) -> str:
    return (
        f"SUMMARY stats rows={stats.total_rows} "
        f"columns={stats.total_columns} "
        f"numeric_columns={len(stats.numeric_columns)}"
    )
