from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, default_config, load_config
from ..excel.reader import DecodeError, read_first_sheet
from ..excel.reference import ReferenceTableError, load_product_refs
from ..excel.writer import write_sheet
from ..logging.init import log_summary, setup_logging
from ..models.config_models import AppConfig
from ..models.product import ProductRecord
from ..models.reconciliation import ReconciliationStatus
from ..services.compare import compare_names
from ..services.grouping import build_sales_report, records_from_rows
from ..services.headers import MappingCache
from ..services.inventory import adjust_stock_for_day, read_stock_levels
from ..services.merge import merge_sheets, merged_file_name
from ..services.normalize import normalize_approval_or_id
from ..services.progress import ProgressTracker
from ..services.reconciliation import (
    RECONCILIATION_HEADERS,
    aggregate_by_key,
    filter_rows,
    reconcile,
    reconciliation_rows,
    sales_entries,
    settlement_entries,
    summarize,
)
from ..services.report import SALES_REPORT_HEADERS, sales_report_rows
from ..services.statistics import sheet_statistics
from ..services.summary import (
    format_number,
    render_compare_summary,
    render_merge_summary,
    render_sales_summary,
    render_settlement_summary,
    render_stats_summary,
)

"""CLI entrypoint.

Commands:
- sales: daily sales export(s) -> grouped product report (+ stock, reference codes)
- settle: card settlement report vs admin sales export by approval number
- merge: overlay stock quantities/locations from a second export onto a base export
- compare: product-name presence between two sheets
- stats: per-column value counts and min/max/avg/sum of numeric columns
- inspect: print headers and first rows of a file

Fatal conditions (config, decode, reference table) end with a single ERROR
line and exit code 1.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

CONFIG_ENV = "RETAIL_RECON_CONFIG"

logger = logging.getLogger("retail_recon.cli")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="retail-recon", description="Retail spreadsheet reconciliation tools")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=None, help="YAML config file")
    sub = p.add_subparsers(dest="command", required=True)

    sales = sub.add_parser("sales", help="Grouped product sales report")
    sales.add_argument("files", nargs="+", type=Path, help="Sales export file(s)")
    sales.add_argument("--stock", type=Path, default=None, help="Stock export file")
    sales.add_argument("--day", default=None, help="Purchase day YYYY-MM-DD (default: all days)")
    sales.add_argument("--reference", type=Path, default=None, help="Product reference CSV")
    sales.add_argument("--output", type=Path, default=None, help="Output xlsx path")

    settle = sub.add_parser("settle", help="Settlement report vs sales export")
    settle.add_argument("--report", type=Path, required=True, help="Card settlement report (side A)")
    settle.add_argument("--sales", type=Path, required=True, help="Admin sales export (side B)")
    settle.add_argument("--exclude", nargs="*", default=[], help="Approval numbers left out of totals")
    settle.add_argument("--only-discrepancies", action="store_true", help="Show mismatched/missing keys only")
    settle.add_argument("--remark", default=None, help="Remark filter (__EMPTY__ = rows without remark)")
    settle.add_argument("--output", type=Path, default=None, help="Output xlsx path")

    merge = sub.add_parser("merge", help="Overlay stock values onto a base stock export")
    merge.add_argument("base", type=Path, help="Base file (row order and headers kept)")
    merge.add_argument("overlay", type=Path, help="File whose values are merged in")
    merge.add_argument("--output", type=Path, default=None, help="Output xlsx path")

    compare = sub.add_parser("compare", help="Compare product names of two files")
    compare.add_argument("left", type=Path)
    compare.add_argument("right", type=Path)

    stats = sub.add_parser("stats", help="Per-column statistics of a file")
    stats.add_argument("file", type=Path)
    stats.add_argument("--top", type=int, default=0, help="Also list the N most frequent values per column")

    inspect = sub.add_parser("inspect", help="Print headers and first rows")
    inspect.add_argument("file", type=Path)
    inspect.add_argument("--rows", type=int, default=3)
    return p.parse_args(argv)


def _resolve_config(arg_path: Path | None) -> AppConfig:
    """--config, then $RETAIL_RECON_CONFIG, then config/retail_recon.yml, then defaults."""
    if arg_path is not None:
        return load_config(arg_path)
    env_path = os.getenv(CONFIG_ENV)
    if env_path:
        return load_config(Path(env_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return default_config()


def _run_sales(args: argparse.Namespace, cfg: AppConfig) -> int:
    records: list[ProductRecord] = []
    dropped = 0
    with ProgressTracker(len(args.files), description="Reading sales") as progress:
        for path in args.files:
            sheet = read_first_sheet(path)
            recs, skipped = records_from_rows(sheet)
            records.extend(recs)
            dropped += skipped
            progress.advance(path, rows=len(recs))
            logger.info(f"sales file: {path.name} rows={len(recs)}")

    report = build_sales_report(
        records,
        day=args.day,
        sock_marker=cfg.sock_marker,
        delimiter=cfg.variant_delimiter,
        fixed_unit_prices=cfg.fixed_unit_prices,
        dropped_rows=dropped,
    )
    if report.day and report.day not in report.available_days:
        logger.warning(f"no sales on day {report.day} (available: {', '.join(report.available_days) or '-'})")

    stock = {}
    if args.stock is not None:
        levels = read_stock_levels(read_first_sheet(args.stock))
        stock = adjust_stock_for_day(levels, records, report.day)
        logger.info(f"stock file: {args.stock.name} products={len(levels)}")

    reference_path = args.reference or (Path(cfg.reference_csv) if cfg.reference_csv else None)
    refs = load_product_refs(reference_path) if reference_path is not None else {}

    output = args.output or Path(cfg.output_directory) / f"sales_{report.day or 'ALL'}.xlsx"
    write_sheet(output, SALES_REPORT_HEADERS, sales_report_rows(report, refs, stock))
    logger.info(f"written: {output}")
    log_summary(render_sales_summary(report).removeprefix("SUMMARY "))
    return EXIT_SUCCESS


def _run_settle(args: argparse.Namespace, cfg: AppConfig) -> int:
    side_a = settlement_entries(read_first_sheet(args.report))
    side_b = sales_entries(read_first_sheet(args.sales))
    logger.info(f"settlement rows={len(side_a)} sales rows={len(side_b)}")

    rows = reconcile(
        aggregate_by_key(side_a, lambda e: e.amount),
        aggregate_by_key(side_b, lambda e: e.amount),
        tolerance=cfg.reconciliation_tolerance,
    )
    shown = filter_rows(rows, only_discrepancies=args.only_discrepancies, remark=args.remark)
    excluded = {normalize_approval_or_id(k) for k in args.exclude} - {""}
    summary = summarize(shown, excluded)

    for r in shown:
        if r.status is not ReconciliationStatus.MATCHED:
            logger.debug(f"{r.status.value} key={r.key} a={r.side_a_amount} b={r.side_b_amount} diff={r.difference}")

    output = args.output or Path(cfg.output_directory) / "settlement_review.xlsx"
    write_sheet(output, RECONCILIATION_HEADERS, reconciliation_rows(shown))
    logger.info(f"written: {output}")
    log_summary(render_settlement_summary(summary).removeprefix("SUMMARY "))
    return EXIT_SUCCESS


def _run_merge(args: argparse.Namespace, cfg: AppConfig) -> int:
    base = read_first_sheet(args.base, raw=False)
    overlay = read_first_sheet(args.overlay, raw=False)
    mapping = MappingCache().get(base.headers, overlay.headers)
    logger.info(
        f"join_key={mapping.join_key or '-'} qty={mapping.base_qty_key or '-'} "
        f"location={mapping.base_location_key or '-'} vendor={mapping.base_vendor_key or '-'}"
    )
    result = merge_sheets(base, overlay, mapping)
    for row in result.rows:
        for col, change in row.changes.items():
            logger.debug(f"{row.values.get(mapping.join_key)}: {col} {change.previous!r} -> {change.current!r}")

    output = args.output or Path(cfg.output_directory) / merged_file_name(base.name)
    write_sheet(output, result.headers, [r.values for r in result.rows])
    logger.info(f"written: {output}")
    log_summary(render_merge_summary(result).removeprefix("SUMMARY "))
    return EXIT_SUCCESS


def _run_compare(args: argparse.Namespace, cfg: AppConfig) -> int:
    left = read_first_sheet(args.left, raw=False)
    right = read_first_sheet(args.right, raw=False)
    comparison = compare_names(left, right)
    for name in comparison.only_left:
        logger.info(f"only {args.left.name}: {name}")
    for name in comparison.only_right:
        logger.info(f"only {args.right.name}: {name}")
    log_summary(render_compare_summary(comparison).removeprefix("SUMMARY "))
    return EXIT_SUCCESS


def _run_stats(args: argparse.Namespace, cfg: AppConfig) -> int:
    stats = sheet_statistics(read_first_sheet(args.file))
    for col in stats.numeric_columns:
        s = stats.summary_stats[col]
        logger.info(
            f"{col}: min={format_number(s.min)} max={format_number(s.max)} "
            f"avg={format_number(s.avg)} sum={format_number(s.sum)}"
        )
    if args.top > 0:
        for col in stats.column_names:
            counts = sorted(stats.value_counts[col].items(), key=lambda kv: (-kv[1], kv[0]))[: args.top]
            logger.info(f"{col}: " + ", ".join(f"{v}={n}" for v, n in counts))
    log_summary(render_stats_summary(stats).removeprefix("SUMMARY "))
    return EXIT_SUCCESS


def _run_inspect(args: argparse.Namespace, cfg: AppConfig) -> int:
    sheet = read_first_sheet(args.file)
    print(f"FILE: {sheet.name} rows={len(sheet)}")
    print(f"  cols={sheet.headers}")
    for r in sheet.rows[: args.rows]:
        # datetime 포함 시 isoformat 으로 표시
        print("  ", {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()})
    return EXIT_SUCCESS


_COMMANDS = {
    "sales": _run_sales,
    "settle": _run_settle,
    "merge": _run_merge,
    "compare": _run_compare,
    "stats": _run_stats,
    "inspect": _run_inspect,
}


def main(argv: list[str] | None = None) -> int:
    # NOTE: 빈 리스트 [] 를 그대로 쓰기 위해 None 일 때만 sys.argv 사용
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    app_logger = setup_logging(debug=args.debug)
    if args.debug:
        app_logger.debug("debug mode enabled")

    load_dotenv(dotenv_path=Path(".env"), override=True)
    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        app_logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        return _COMMANDS[args.command](args, cfg)
    except DecodeError as e:
        app_logger.error(f"decode: {e}")
        return EXIT_FATAL
    except ReferenceTableError as e:
        app_logger.error(f"reference: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
