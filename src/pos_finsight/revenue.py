# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Revenue reconciliation for POS FinSight.

This module is the single place where revenue figures are derived from
sales, invoices and returns, so that every report and dashboard agrees on
the same numbers.

Reconciliation rules
--------------------
- Only ``completed`` and ``pending`` sales carry revenue. ``cancelled`` and
  ``refunded`` sales never contribute, in any figure.
- An invoice derived from a sale (``sale_id`` set) is already represented
  by that sale's total and never contributes to revenue. Only independent
  invoices with status ``paid`` are added to gross revenue.
- Only ``approved`` and ``completed`` returns reduce revenue.
- Net revenue is floored at zero: a negative net figure is treated as a
  data anomaly and shown as 0.

Main entry points
-----------------
- calculate_gross_revenue(sales, invoices)
- calculate_return_impact(returns)
- calculate_net_revenue(gross, return_impact)
- growth_rate(current, previous)
- summarize_revenue(sales, invoices, returns, products)
- monthly_trends(sales, invoices, returns, now, months)
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pandas as pd

from .models import (
    APPROVED_RETURN_STATUSES,
    REVENUE_REDUCING_REFUND_METHODS,
    Invoice,
    Product,
    Return,
    Sale,
)
from .periods import filter_by_date_range, month_range

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


@dataclass(frozen=True)
class RevenueBreakdown:
    """Where revenue came from, and which returns took it back."""

    sales_revenue: float
    independent_invoice_revenue: float
    revenue_reducing_returns: float
    non_revenue_reducing_returns: float


@dataclass(frozen=True)
class RevenueSummary:
    """All headline revenue figures for one set of transactions."""

    gross_revenue: float
    pending_revenue: float
    realized_revenue: float
    return_impact: float
    net_revenue: float
    total_cost: float
    profit_margin: float
    profit_margin_percent: float


def month_label(value: datetime) -> str:
    """Format a timestamp as a month bucket label, e.g. 'Mar 2025'."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]} {value.year:04d}"


def _sales_total(sales: Iterable[Sale], statuses: frozenset[str]) -> float:
    return sum(sale.total for sale in sales if sale.status in statuses)


def _independent_invoices_total(invoices: Iterable[Invoice], status: str) -> float:
    return sum(
        invoice.total
        for invoice in invoices
        if invoice.status == status and invoice.is_independent
    )


def calculate_gross_revenue(sales: Iterable[Sale], invoices: Iterable[Invoice]) -> float:
    """
    Gross revenue = revenue-bearing sale totals + paid independent invoices.

    Invoices linked to a sale are excluded whatever their status, otherwise
    the same money would be counted twice.
    """
    sales_revenue = sum(sale.total for sale in sales if sale.is_revenue)
    invoice_revenue = _independent_invoices_total(invoices, "paid")
    return sales_revenue + invoice_revenue


def calculate_return_impact(returns: Iterable[Return]) -> float:
    """Sum of refund amounts over approved/completed returns."""
    return sum(ret.refund_amount for ret in returns if ret.is_approved)


def calculate_net_revenue(gross_revenue: float, return_impact: float) -> float:
    """Net revenue, floored at zero."""
    return max(0.0, gross_revenue - return_impact)


def growth_rate(current: float, previous: float) -> float:
    """
    Percentage change from ``previous`` to ``current``.

    Returns 0 when there is no positive baseline to compare against.
    """
    if previous > 0:
        return (current - previous) / previous * 100.0
    return 0.0


def calculate_pending_revenue(
    sales: Iterable[Sale], invoices: Iterable[Invoice]
) -> float:
    """Revenue not yet received: pending sales and sent independent invoices."""
    return _sales_total(sales, frozenset({"pending"})) + _independent_invoices_total(
        invoices, "sent"
    )


def calculate_realized_revenue(
    sales: Iterable[Sale], invoices: Iterable[Invoice]
) -> float:
    """Revenue actually received: completed sales and paid independent invoices."""
    return _sales_total(sales, frozenset({"completed"})) + _independent_invoices_total(
        invoices, "paid"
    )


def calculate_total_cost(sales: Iterable[Sale], products: Iterable[Product]) -> float:
    """
    Cost of goods sold over revenue-bearing sales.

    Items whose product is unknown or has no cost are left out of the total.
    """
    cost_by_id = {p.id: p.cost for p in products}
    total = 0.0
    uncosted: set[str] = set()
    for sale in sales:
        if not sale.is_revenue:
            continue
        for item in sale.items:
            cost = cost_by_id.get(item.product_id)
            if cost is None:
                uncosted.add(item.product_name)
                continue
            total += cost * item.quantity
    for name in sorted(uncosted):
        logger.warning(
            "Product %s has no cost data - excluded from cost calculation", name
        )
    return total


def calculate_profit_margin(revenue: float, total_cost: float) -> tuple[float, float]:
    """Return (margin, margin percent of revenue); percent is 0 without revenue."""
    margin = revenue - total_cost
    percent = margin / revenue * 100.0 if revenue > 0 else 0.0
    return margin, percent


def revenue_breakdown(
    sales: Iterable[Sale], invoices: Iterable[Invoice], returns: Iterable[Return]
) -> RevenueBreakdown:
    """
    Split revenue by origin and approved returns by refund method.

    Cash and original-payment refunds hand money back; store credit and
    exchanges keep it in the shop.
    """
    approved = [ret for ret in returns if ret.status in APPROVED_RETURN_STATUSES]
    reducing = sum(
        ret.refund_amount
        for ret in approved
        if ret.refund_method in REVENUE_REDUCING_REFUND_METHODS
    )
    non_reducing = sum(
        ret.refund_amount
        for ret in approved
        if ret.refund_method not in REVENUE_REDUCING_REFUND_METHODS
    )
    return RevenueBreakdown(
        sales_revenue=sum(sale.total for sale in sales if sale.is_revenue),
        independent_invoice_revenue=_independent_invoices_total(invoices, "paid"),
        revenue_reducing_returns=reducing,
        non_revenue_reducing_returns=non_reducing,
    )


def summarize_revenue(
    sales: Sequence[Sale],
    invoices: Sequence[Invoice],
    returns: Sequence[Return],
    products: Sequence[Product] = (),
) -> RevenueSummary:
    """
    Compute every headline figure for already date-filtered collections.

    The profit margin is measured against net revenue (after returns).
    """
    gross = calculate_gross_revenue(sales, invoices)
    impact = calculate_return_impact(returns)
    net = calculate_net_revenue(gross, impact)
    total_cost = calculate_total_cost(sales, products) if products else 0.0
    margin, percent = calculate_profit_margin(net, total_cost)

    return RevenueSummary(
        gross_revenue=gross,
        pending_revenue=calculate_pending_revenue(sales, invoices),
        realized_revenue=calculate_realized_revenue(sales, invoices),
        return_impact=impact,
        net_revenue=net,
        total_cost=total_cost,
        profit_margin=margin,
        profit_margin_percent=percent,
    )


def monthly_trends(
    sales: Sequence[Sale],
    invoices: Sequence[Invoice],
    returns: Sequence[Return],
    now: Optional[datetime] = None,
    months: int = 12,
) -> pd.DataFrame:
    """
    Net revenue for each of the last ``months`` calendar months.

    The window ends with the month containing ``now`` and rows are ordered
    oldest first.

    Returns:
        DataFrame with columns: month, gross_revenue, return_impact,
        net_revenue.
    """
    current = now if now is not None else datetime.now()

    rows: list[dict[str, object]] = []
    for offset in range(months - 1, -1, -1):
        # Walk back `offset` months from the current one.
        index = current.year * 12 + (current.month - 1) - offset
        year, month = divmod(index, 12)
        window = month_range(year, month + 1)

        gross = calculate_gross_revenue(
            filter_by_date_range(sales, window),
            filter_by_date_range(invoices, window),
        )
        impact = calculate_return_impact(filter_by_date_range(returns, window))
        rows.append(
            {
                "month": month_label(window.start),
                "gross_revenue": round(gross, 2),
                "return_impact": round(impact, 2),
                "net_revenue": round(calculate_net_revenue(gross, impact), 2),
            }
        )

    return pd.DataFrame(
        rows, columns=["month", "gross_revenue", "return_impact", "net_revenue"]
    )
