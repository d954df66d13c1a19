# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report orchestration for POS FinSight.

This module provides the high-level entry points used by the CLI (or any
other front end) to compute everything a reports page or a dashboard shows,
in a single call.

Overview
--------
``build_report()`` takes a loaded StoreData snapshot, a DateRange and a
report type, and:

1. filters sales, returns and invoices to the date range,
2. computes the headline revenue figures (``revenue.summarize_revenue``),
3. computes revenue and sale-count growth against the previous period of
   the same length (0 when the range is open-ended),
4. builds the ranked lists shared by every report type (top products, top
   customers) and the month-by-month revenue trend,
5. adds the report-type specific tables:

   - ``sales``:      sales by status, sales by payment method
   - ``customers``:  customer segments
   - ``products``:   product performance, category breakdown
   - ``financial``:  profit analysis, revenue breakdown, 12-month trend
   - ``inventory``:  inventory status

``build_dashboard()`` computes the smaller set of figures shown on the
dashboard: today's and this month's revenue, and top-5 lists for the month.

Each call re-runs the whole computation; callers simply discard results
they no longer need.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

import pandas as pd

from .aggregation import (
    category_breakdown,
    customer_segments,
    inventory_status,
    product_performance,
    sales_by_month,
    sales_by_payment_method,
    sales_by_status,
    top_customers,
    top_products,
)
from .config import REPORT_TYPES
from .models import StoreData
from .periods import DateRange, filter_by_date_range, previous_period, resolve_preset
from .revenue import (
    RevenueSummary,
    calculate_gross_revenue,
    calculate_net_revenue,
    calculate_return_impact,
    growth_rate,
    monthly_trends,
    revenue_breakdown,
    summarize_revenue,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Report:
    """
    Result of ``build_report``.

    Attributes
    ----------
    report_type :
        One of 'sales', 'customers', 'products', 'financial', 'inventory'.
    date_range :
        The window the figures were computed for.
    summary :
        Headline revenue figures for the window.
    sale_count :
        Number of sales in the window (all statuses).
    revenue_growth / sales_growth :
        Percent change of net revenue / sale count against the previous
        period of the same length.
    top_products / top_customers / sales_by_month :
        Tables shared by every report type.
    tables :
        Report-type specific tables, keyed by name.
    """

    report_type: str
    date_range: DateRange
    summary: RevenueSummary
    sale_count: int
    revenue_growth: float
    sales_growth: float
    top_products: pd.DataFrame
    top_customers: pd.DataFrame
    sales_by_month: pd.DataFrame
    tables: dict[str, pd.DataFrame] = field(default_factory=dict)


@dataclass(frozen=True)
class Dashboard:
    today_revenue: float
    month_revenue: float
    month_sale_count: int
    top_products: pd.DataFrame
    top_customers: pd.DataFrame


def _net_revenue_for(data: StoreData, window: DateRange) -> tuple[float, int]:
    sales = filter_by_date_range(data.sales, window)
    gross = calculate_gross_revenue(sales, filter_by_date_range(data.invoices, window))
    impact = calculate_return_impact(filter_by_date_range(data.returns, window))
    return calculate_net_revenue(gross, impact), len(sales)


def _profit_analysis(summary: RevenueSummary) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"measure": "net_revenue", "value": round(summary.net_revenue, 2)},
            {"measure": "total_cost", "value": round(summary.total_cost, 2)},
            {"measure": "net_profit", "value": round(summary.profit_margin, 2)},
            {
                "measure": "profit_margin_percent",
                "value": round(summary.profit_margin_percent, 2),
            },
        ],
        columns=["measure", "value"],
    )


def build_report(
    data: StoreData,
    date_range: DateRange,
    report_type: str = "sales",
    top_n: int = 10,
    segment_thresholds: tuple[float, float] = (500.0, 1000.0),
) -> Report:
    """
    Compute a full report for one date range.

    Raises:
        ValueError: if ``report_type`` is unknown.
    """
    if report_type not in REPORT_TYPES:
        raise ValueError(
            f"Unknown report type {report_type!r}. "
            f"Expected one of: {', '.join(REPORT_TYPES)}."
        )

    # 1) Scope every collection to the window.
    sales = filter_by_date_range(data.sales, date_range)
    returns = filter_by_date_range(data.returns, date_range)
    invoices = filter_by_date_range(data.invoices, date_range)
    logger.debug(
        "Report %s for %s: %d sales, %d returns, %d invoices in range",
        report_type,
        date_range.label,
        len(sales),
        len(returns),
        len(invoices),
    )

    # 2) Headline figures.
    summary = summarize_revenue(sales, invoices, returns, data.products)

    # 3) Growth against the previous period of the same length.
    revenue_growth = 0.0
    sales_growth = 0.0
    previous = previous_period(date_range)
    if previous is not None:
        previous_revenue, previous_count = _net_revenue_for(data, previous)
        revenue_growth = growth_rate(summary.net_revenue, previous_revenue)
        sales_growth = growth_rate(len(sales), previous_count)

    # 4) Report-type specific tables.
    tables: dict[str, pd.DataFrame] = {}
    if report_type == "sales":
        tables["sales_by_status"] = sales_by_status(sales, returns)
        tables["sales_by_payment_method"] = sales_by_payment_method(sales, returns)
    elif report_type == "customers":
        low, high = segment_thresholds
        tables["customer_segments"] = customer_segments(sales, returns, low, high)
    elif report_type == "products":
        tables["product_performance"] = product_performance(
            data.products, sales, returns
        )
        tables["category_breakdown"] = category_breakdown(sales, returns, data.products)
    elif report_type == "financial":
        tables["profit_analysis"] = _profit_analysis(summary)
        breakdown = revenue_breakdown(sales, invoices, returns)
        tables["revenue_breakdown"] = pd.DataFrame(
            [
                {"source": name, "amount": round(value, 2)}
                for name, value in asdict(breakdown).items()
            ],
            columns=["source", "amount"],
        )
        # Trend over the full snapshot, ending with the window's last month.
        tables["monthly_trends"] = monthly_trends(
            data.sales, data.invoices, data.returns, now=date_range.end
        )
    elif report_type == "inventory":
        status = inventory_status(data.products)
        tables["inventory_status"] = pd.DataFrame(
            [{"measure": name, "value": value} for name, value in asdict(status).items()],
            columns=["measure", "value"],
        )

    return Report(
        report_type=report_type,
        date_range=date_range,
        summary=summary,
        sale_count=len(sales),
        revenue_growth=revenue_growth,
        sales_growth=sales_growth,
        top_products=top_products(sales, returns, top_n),
        top_customers=top_customers(sales, returns, top_n),
        sales_by_month=sales_by_month(sales, returns),
        tables=tables,
    )


def build_dashboard(
    data: StoreData, now: Optional[datetime] = None, top_n: int = 5
) -> Dashboard:
    """Today's and this month's net revenue with the month's top lists."""
    today = resolve_preset("today", now)
    month = resolve_preset("thisMonth", now)

    today_revenue, _ = _net_revenue_for(data, today)
    month_revenue, month_count = _net_revenue_for(data, month)

    month_sales = filter_by_date_range(data.sales, month)
    month_returns = filter_by_date_range(data.returns, month)

    return Dashboard(
        today_revenue=today_revenue,
        month_revenue=month_revenue,
        month_sale_count=month_count,
        top_products=top_products(month_sales, month_returns, top_n),
        top_customers=top_customers(month_sales, month_returns, top_n),
    )
