# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for POS FinSight.

This module prepares computed results for display: it never computes
figures itself. It provides:

- ``format_money_columns``: copy of a table with monetary columns rendered
  in the store currency,
- ``summary_to_dataframe``: the headline revenue figures as a two-column
  table,
- ``customer_value_label``: the display value of a top-customer row
  (refund-only customers are shown with their refund total),
- ``render_document_page``: plain-text rendering of one paginated document
  page, with the shared sections on every page and the closing sections on
  the last one.
"""

from collections.abc import Iterable

import pandas as pd

from .currency import format_currency
from .pagination import DocumentPage, LineItem
from .revenue import RevenueSummary

MONEY_COLUMNS = frozenset(
    {
        "revenue",
        "gross_revenue",
        "return_impact",
        "net_revenue",
        "returns",
        "return_amount",
        "gross_spent",
        "total_returns",
        "net_spent",
        "total_spent",
        "avg_spent",
        "amount",
    }
)


def format_money_columns(
    df: pd.DataFrame,
    currency_code: str,
    decimals: int = 2,
    columns: Iterable[str] = MONEY_COLUMNS,
) -> pd.DataFrame:
    """Return a copy of ``df`` with the monetary columns formatted as text."""
    out = df.copy()
    for col in columns:
        if col in out.columns:
            out[col] = out[col].map(
                lambda v: format_currency(float(v), currency_code, decimals)
            )
    return out


def summary_to_dataframe(summary: RevenueSummary, decimals: int = 2) -> pd.DataFrame:
    rows = [
        ("Gross revenue", summary.gross_revenue),
        ("Pending revenue", summary.pending_revenue),
        ("Realized revenue", summary.realized_revenue),
        ("Returns", summary.return_impact),
        ("Net revenue", summary.net_revenue),
        ("Cost of goods sold", summary.total_cost),
        ("Profit", summary.profit_margin),
    ]
    df = pd.DataFrame(
        [{"measure": label, "amount": round(value, decimals)} for label, value in rows],
        columns=["measure", "amount"],
    )
    return df


def customer_value_label(row: pd.Series, currency_code: str) -> str:
    if row["net_spent"] == 0 and row["has_returns"]:
        refunds = format_currency(row["total_returns"], currency_code)
        return f"Returns: {refunds}"
    return format_currency(row["net_spent"], currency_code)


def render_document_page(doc_page: DocumentPage, currency_code: str) -> str:
    """Render one page of a document as plain text."""
    document = doc_page.document
    page = doc_page.page
    lines: list[str] = [f"=== {document.title} ==="]

    for key, value in document.header.items():
        lines.append(f"{key}: {value}")
    if document.recipient:
        lines.append("Bill to:")
        lines.extend(f"  {key}: {value}" for key, value in document.recipient.items())

    lines.append("")
    for position, item in enumerate(page.items, start=page.items_range.start):
        if isinstance(item, LineItem):
            lines.append(
                f"{position:>3}. {item.description:<30} "
                f"{item.quantity:>8g} x {format_currency(item.rate, currency_code)}"
                f" = {format_currency(item.amount, currency_code)}"
            )
        else:
            lines.append(f"{position:>3}. {item}")
    lines.append("")

    for key, value in document.totals.items():
        if isinstance(value, (int, float)):
            value = format_currency(value, currency_code)
        lines.append(f"{key}: {value}")

    for section in doc_page.closing_sections:
        lines.append("")
        lines.append(f"[{section}]")

    for key, value in document.footer.items():
        lines.append(f"{key}: {value}")
    if page.footer_label:
        lines.append(page.footer_label)

    return "\n".join(lines)
