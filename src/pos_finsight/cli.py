# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for POS FinSight.

This module wires together the building blocks of POS FinSight:

- global configuration (store currency, snapshot directory, report and
  display defaults),
- CSV snapshot reading (sales, returns, invoices, products, customers),
- date-range resolution (quick-filter presets or custom dates),
- report orchestration (revenue figures, rankings, report-type tables),
- document pagination (invoices, BOQs and delivery notes),
- view helpers (currency formatting and plain-text rendering).

The CLI does not compute any figure itself. It orchestrates the underlying
modules based on command-line arguments and the configuration file.


High-level pipeline
-------------------

1) Load the TOML configuration (``pos_finsight_config.toml`` by default,
   or the file given with ``--config``). When no file is given and the
   default one does not exist, built-in defaults are used.

2) Read the CSV snapshot from the configured data directory, or from
   ``--data-dir`` when provided.

3) Resolve the reporting window:

   - ``--from-date`` / ``--to-date`` define a custom window (either bound
     may be omitted for an open-ended window) and take precedence,
   - otherwise ``--preset`` selects a quick filter,
   - otherwise ``reports.default_preset`` from the configuration is used.

4) Build the report of the requested type (``--report``) and render it as
   console tables and/or CSV files depending on the display mode.


Report types
------------

- ``sales``:      summary, top lists, monthly trend, by status, by payment
- ``customers``:  summary, top lists, monthly trend, customer segments
- ``products``:   summary, top lists, monthly trend, product performance,
                  category breakdown
- ``financial``:  summary, top lists, monthly trend, profit analysis,
                  revenue breakdown
- ``inventory``:  summary, top lists, monthly trend, inventory status


Display modes and output
------------------------

``display.mode`` (or ``--display-mode``) is one of:

- ``table``: print tables to stdout (pandas.DataFrame.to_string),
- ``csv``:   write CSV files only,
- ``both``:  do both.

CSV files are written to ``--output DIR`` (default ``data/output``) with a
timestamp-based name, e.g. ``top_products_YYYY-MM-DD-HH-MM-SS.csv``.


Subcommands
-----------

dashboard
    Today's and this month's net revenue with the month's top lists. The
    top lists follow ``--display-mode`` and ``--output`` like a report.

paginate ITEMS_CSV
    Split document line items (description, quantity, rate [, amount])
    into printable pages and print each page. ``--per-page`` overrides
    ``documents.items_per_page``; ``--delivery-note`` switches to the
    delivery-note layout (``--template compact|standard|detailed``).


Examples
--------

    python -m pos_finsight.cli --preset lastMonth --report products
    python -m pos_finsight.cli --from-date 2025-01-01 --to-date 2025-03-31 \\
        --report financial --display-mode both --output reports/q1
    python -m pos_finsight.cli dashboard
    python -m pos_finsight.cli paginate invoice_items.csv --per-page 8
    python -m pos_finsight.cli paginate items.csv --delivery-note --template detailed
"""

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .config import DISPLAY_MODES, REPORT_TYPES, AppConfig, load_app_config
from .currency import format_currency
from .io import read_document_items, read_store_snapshot
from .models import StoreData
from .pagination import (
    DELIVERY_NOTE_LAYOUTS,
    Document,
    DocumentPage,
    delivery_note_page_title,
    layout_document,
    paginate_delivery_note,
)
from .periods import PRESETS, DateRange, custom_range, resolve_preset
from .report import Report, build_dashboard, build_report
from .views import (
    customer_value_label,
    format_money_columns,
    render_document_page,
    summary_to_dataframe,
)

DEFAULT_CONFIG_FILE = "pos_finsight_config.toml"

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m pos_finsight.cli",
        description=(
            "POS FinSight - Revenue reconciliation & reporting for point-of-sale "
            "data. Reads a CSV snapshot of sales, returns and invoices, computes "
            "net revenue and rankings for a date range and paginates printable "
            "documents."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of pos_finsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when present."
        ),
    )
    ap.add_argument(
        "--data-dir",
        dest="data_dir",
        help="Override the snapshot directory defined in the configuration.",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    # Period selection
    ap.add_argument(
        "--preset",
        choices=list(PRESETS),
        help=(
            "Quick-filter preset for the reporting window. "
            "If omitted, reports.default_preset from config is used."
        ),
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help="Custom window start date (YYYY-MM-DD). Overrides --preset when set.",
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help="Custom window end date (YYYY-MM-DD). Overrides --preset when set.",
    )

    # Report
    ap.add_argument(
        "--report",
        dest="report_type",
        choices=list(REPORT_TYPES),
        help="Report type. If omitted, reports.default_type from config is used.",
    )
    ap.add_argument(
        "--top",
        dest="top_n",
        type=int,
        help="Length of the top products / top customers lists.",
    )

    # Display options
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints results to stdout, "
            "'csv' writes CSV files only, "
            "'both' does both."
        ),
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help=(
            "Output directory where CSV files will be written when display "
            "mode includes 'csv'. If omitted, 'data/output' is used."
        ),
    )

    # ------------------------------------------------------------------
    # Subcommands
    # ------------------------------------------------------------------
    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Optional subcommands ('dashboard', 'paginate').",
    )

    subparsers.add_parser(
        "dashboard",
        help="Show today's and this month's revenue with the month's top lists.",
    )

    paginate_parser = subparsers.add_parser(
        "paginate",
        help="Split document line items into printable pages.",
    )
    paginate_parser.add_argument(
        "items_path",
        metavar="ITEMS_CSV",
        help="CSV file with description, quantity, rate [, amount] columns.",
    )
    paginate_parser.add_argument(
        "--per-page",
        dest="per_page",
        type=int,
        help="Items per page. Defaults to documents.items_per_page.",
    )
    paginate_parser.add_argument(
        "--title",
        default="Invoice",
        help="Document title printed on every page (default: Invoice).",
    )
    paginate_parser.add_argument(
        "--delivery-note",
        dest="delivery_note",
        action="store_true",
        help="Use the delivery-note layout (reduced first and last pages).",
    )
    paginate_parser.add_argument(
        "--template",
        choices=sorted(DELIVERY_NOTE_LAYOUTS),
        help="Delivery-note template. Defaults to documents.delivery_note_template.",
    )

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _load_config(args: argparse.Namespace) -> AppConfig:
    if args.config_path:
        return load_app_config(args.config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    logger.debug("No %s found, using built-in defaults", DEFAULT_CONFIG_FILE)
    return AppConfig()


def _resolve_window(args: argparse.Namespace, config: AppConfig) -> DateRange:
    """Custom dates win over --preset, which wins over the configured preset."""
    from_date = _parse_optional_date(args.from_date)
    to_date = _parse_optional_date(args.to_date)
    if from_date or to_date:
        return custom_range(from_date, to_date)
    return resolve_preset(args.preset or config.reports.default_preset)


def _report_tables(report: Report, config: AppConfig) -> dict[str, pd.DataFrame]:
    """Ordered tables to render for a report, keyed by output name."""
    top_customers = report.top_customers.copy()
    if not top_customers.empty:
        top_customers["value"] = top_customers.apply(
            customer_value_label, axis=1, currency_code=config.currency
        )

    tables = {
        "summary": summary_to_dataframe(report.summary, config.display.decimals),
        "top_products": report.top_products,
        "top_customers": top_customers,
        "sales_by_month": report.sales_by_month,
    }
    tables.update(report.tables)
    return tables


def _render_tables(
    tables: dict[str, pd.DataFrame],
    config: AppConfig,
    display_mode: str,
    output_dir: Optional[str],
) -> None:
    if display_mode in {"table", "both"}:
        for name, df in tables.items():
            print()
            print(f"=== {name.replace('_', ' ').capitalize()} ===")
            if df.empty:
                print("No data for the selected period.")
                continue
            shown = format_money_columns(df, config.currency, config.display.decimals)
            print(shown.to_string(index=False))

    if display_mode in {"csv", "both"}:
        out = Path(output_dir) if output_dir else Path("data/output")
        out.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
        for name, df in tables.items():
            path = out / f"{name}_{timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _money(amount: float, config: AppConfig) -> str:
    return format_currency(amount, config.currency, config.display.decimals)


def _handle_dashboard(
    args: argparse.Namespace, config: AppConfig, data: StoreData
) -> None:
    dashboard = build_dashboard(data, top_n=config.reports.dashboard_top_n)

    print(f"Today's revenue:     {_money(dashboard.today_revenue, config)}")
    print(f"This month revenue:  {_money(dashboard.month_revenue, config)}")
    print(f"This month sales:    {dashboard.month_sale_count}")

    tables = {
        "top_products": dashboard.top_products,
        "top_customers": dashboard.top_customers,
    }
    display_mode = args.display_mode or config.display.mode
    _render_tables(tables, config, display_mode, args.output_dir)


def _handle_paginate(
    args: argparse.Namespace, config: AppConfig, parser: argparse.ArgumentParser
) -> None:
    """
    Handle the 'paginate' subcommand.

    Regular documents are split with a fixed capacity and rendered page by
    page. Delivery notes use the template-specific capacities and print one
    title per page.
    """
    items_path = Path(args.items_path)
    if not items_path.is_file():
        parser.error(f"Items CSV file not found: {items_path}")

    items = read_document_items(items_path)
    total = sum(item.amount for item in items)

    if args.delivery_note:
        template = args.template or config.documents.delivery_note_template
        pages = paginate_delivery_note(items, template)
        document = Document(
            title="Delivery Note",
            items=items,
            closing_sections=("Delivery confirmation / Signature",),
        )
        for page in pages:
            print()
            print(delivery_note_page_title(page))
            print(render_document_page(DocumentPage(document, page), config.currency))
        return

    per_page = args.per_page or config.documents.items_per_page
    if per_page < 1:
        parser.error("--per-page must be at least 1.")

    document = Document(
        title=args.title,
        items=items,
        totals={"Total": total},
        closing_sections=("Authorized signature",),
    )
    for doc_page in layout_document(document, per_page):
        print()
        print(render_document_page(doc_page, config.currency))


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the POS FinSight CLI.

    This function parses command-line arguments, loads the configuration,
    reads the CSV snapshot, resolves the reporting window and renders the
    requested report (or runs the requested subcommand) as console tables
    and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"pos_finsight version {__version__}")
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 1) Load configuration.
    config = _load_config(args)

    # 2) Pagination does not need the snapshot.
    if args.command == "paginate":
        _handle_paginate(args, config, parser)
        return

    # 3) Read the snapshot.
    data_dir = Path(args.data_dir) if args.data_dir else config.data_dir
    if not data_dir.is_dir():
        parser.error(f"Data directory not found: {data_dir}")
    data = read_store_snapshot(data_dir)

    if args.command == "dashboard":
        _handle_dashboard(args, config, data)
        return

    # 4) Resolve the reporting window.
    try:
        window = _resolve_window(args, config)
    except ValueError as exc:
        parser.error(str(exc))

    top_n = args.top_n if args.top_n is not None else config.reports.top_n
    if top_n < 1:
        parser.error("--top must be at least 1.")

    # 5) Build the report.
    report = build_report(
        data,
        window,
        report_type=args.report_type or config.reports.default_type,
        top_n=top_n,
        segment_thresholds=(config.reports.segment_low, config.reports.segment_high),
    )

    print(f"Applied period: {window.label}")
    print(
        f"Sales: {report.sale_count} "
        f"({report.sales_growth:+.1f}% vs previous period) | "
        f"Net revenue: {_money(report.summary.net_revenue, config)} "
        f"({report.revenue_growth:+.1f}% vs previous period)"
    )

    # 6) Render.
    display_mode = args.display_mode or config.display.mode
    _render_tables(_report_tables(report, config), config, display_mode, args.output_dir)


if __name__ == "__main__":
    main()
