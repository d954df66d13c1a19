# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Aggregation engine for POS FinSight.

Every ranking and breakdown shown by the reports (top products, top
customers, revenue by month, by status, by payment method, by category)
follows the same pattern, implemented once here:

1. Initialize an accumulator per grouping key.
2. For each revenue-bearing sale, extract its contributions ("lines") and
   add their amount and units to the key's accumulator.
3. For each approved/completed return, extract its lines and record the
   returned amount and units against the same keys.
4. Derive the net figures per key, floored at zero.
5. Rank by net amount, descending. Ties keep first-seen order (Python's
   sort is stable), so results are deterministic for a given input order.

The grouping is driven by extractor functions: a grouping is defined by
how a sale (and a return) is turned into ``Line`` objects. The public
helpers below are thin wrappers that define those extractors and shape the
result as a pandas DataFrame.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from .models import Product, Return, Sale
from .revenue import month_label

UNCATEGORIZED = "Uncategorized"

SEGMENT_LOW = "Low Value"
SEGMENT_MEDIUM = "Medium Value"
SEGMENT_HIGH = "High Value"


@dataclass(frozen=True)
class Line:
    """One contribution of a sale or a return to a grouping key."""

    key: str
    label: str
    amount: float
    units: float = 1.0
    sort_key: Any = None


@dataclass
class GroupTotal:
    """Running totals for one grouping key."""

    key: str
    label: str
    order: int
    count: int = 0
    units: float = 0.0
    gross_amount: float = 0.0
    return_amount: float = 0.0
    returned_units: float = 0.0
    sort_key: Any = None

    @property
    def net_amount(self) -> float:
        return max(0.0, round(self.gross_amount - self.return_amount, 2))

    @property
    def net_units(self) -> float:
        return max(0.0, self.units - self.returned_units)

    @property
    def has_returns(self) -> bool:
        return self.return_amount > 0


SaleLines = Callable[[Sale], Iterable[Line]]
ReturnLines = Callable[[Return], Iterable[Line]]


def _is_revenue_sale(sale: Sale) -> bool:
    return sale.is_revenue


def group_totals(
    sales: Iterable[Sale],
    returns: Iterable[Return],
    sale_lines: SaleLines,
    return_lines: ReturnLines,
    returns_open_keys: bool = False,
    sale_filter: Optional[Callable[[Sale], bool]] = _is_revenue_sale,
) -> list[GroupTotal]:
    """
    Accumulate sales and returns per grouping key.

    Args:
        sales: In-scope sales. Only those accepted by ``sale_filter``
            (revenue-bearing by default; ``None`` accepts all) contribute.
        returns: In-scope returns. Only approved/completed ones contribute.
        sale_lines: Turns a sale into its contributions.
        return_lines: Turns a return into its contributions.
        returns_open_keys: When False, a return line whose key was never
            seen in sales is ignored; when True it creates the key.

    Returns:
        GroupTotal objects in first-seen order.
    """
    groups: dict[str, GroupTotal] = {}

    def _get(line: Line, create: bool) -> Optional[GroupTotal]:
        group = groups.get(line.key)
        if group is None and create:
            group = GroupTotal(
                key=line.key,
                label=line.label,
                order=len(groups),
                sort_key=line.sort_key,
            )
            groups[line.key] = group
        return group

    for sale in sales:
        if sale_filter is not None and not sale_filter(sale):
            continue
        for line in sale_lines(sale):
            group = _get(line, create=True)
            group.count += 1
            group.units += line.units
            group.gross_amount += line.amount

    for ret in returns:
        if not ret.is_approved:
            continue
        for line in return_lines(ret):
            group = _get(line, create=returns_open_keys)
            if group is None:
                continue
            group.return_amount += line.amount
            group.returned_units += line.units

    return list(groups.values())


def rank_groups(
    groups: Iterable[GroupTotal], limit: Optional[int] = None
) -> list[GroupTotal]:
    """Sort by net amount, descending (stable); optionally keep the top ``limit``."""
    ranked = sorted(groups, key=lambda g: -g.net_amount)
    return ranked[:limit] if limit is not None else ranked


def _customer_rank_key(group: GroupTotal) -> tuple[float, int, float]:
    # Zero-net customers with returns go before zero-net customers without,
    # larger refunds first.
    refund_only = group.net_amount == 0 and group.has_returns
    return (
        -group.net_amount,
        0 if refund_only else 1,
        -group.return_amount if refund_only else 0.0,
    )


# ---------------------------------------------------------------------------
# Line extractors
# ---------------------------------------------------------------------------


def _product_sale_lines(sale: Sale) -> Iterator[Line]:
    for item in sale.items:
        yield Line(item.key, item.product_name, item.total, item.quantity)


def _product_return_lines(ret: Return) -> Iterator[Line]:
    for item in ret.items:
        yield Line(item.key, item.product_name, item.total, item.quantity)


def _customer_sale_lines(sale: Sale) -> Iterator[Line]:
    key = sale.customer_id or sale.customer_name
    if key:
        yield Line(key, sale.customer_name or key, sale.total)


def _customer_return_lines(ret: Return) -> Iterator[Line]:
    key = ret.customer_id or ret.customer_name
    if key:
        yield Line(key, ret.customer_name or key, ret.refund_amount)


def _month_sale_lines(sale: Sale) -> Iterator[Line]:
    ts = sale.created_at
    yield Line(month_label(ts), month_label(ts), sale.total, sort_key=(ts.year, ts.month))


def _month_return_lines(ret: Return) -> Iterator[Line]:
    ts = ret.created_at
    yield Line(month_label(ts), month_label(ts), ret.refund_amount)


def _linked_sale_breakdown(
    sales: Sequence[Sale],
    returns: Iterable[Return],
    attribute: Callable[[Sale], str],
) -> list[GroupTotal]:
    """
    Group all in-scope sales by a sale attribute (status, payment method).

    Every sale is counted, but only revenue-bearing sales add revenue. A
    return is charged to the bucket of the in-scope sale it is linked to.
    """
    by_id = {sale.id: sale for sale in sales}

    def sale_lines(sale: Sale) -> Iterator[Line]:
        value = attribute(sale)
        yield Line(value, value, sale.total if sale.is_revenue else 0.0)

    def return_lines(ret: Return) -> Iterator[Line]:
        linked = by_id.get(ret.sale_id) if ret.sale_id else None
        if linked is not None:
            value = attribute(linked)
            yield Line(value, value, ret.refund_amount, units=0.0)

    return group_totals(sales, returns, sale_lines, return_lines, sale_filter=None)


def _category_lines(products: Iterable[Product]):
    category_by_id = {p.id: (p.category or UNCATEGORIZED) for p in products}

    def _category(product_id: str) -> str:
        return category_by_id.get(product_id) or UNCATEGORIZED

    def sale_lines(sale: Sale) -> Iterator[Line]:
        for item in sale.items:
            category = _category(item.product_id)
            yield Line(category, category, item.total, item.quantity)

    def return_lines(ret: Return) -> Iterator[Line]:
        for item in ret.items:
            category = _category(item.product_id)
            yield Line(category, category, item.total, item.quantity)

    return sale_lines, return_lines


# ---------------------------------------------------------------------------
# Public views
# ---------------------------------------------------------------------------


def top_products(
    sales: Iterable[Sale], returns: Iterable[Return], limit: Optional[int] = 10
) -> pd.DataFrame:
    """
    Best-selling products by revenue net of returned lines.

    Products are keyed by product id, falling back to the product name when
    the id is missing.

    Returns:
        DataFrame with columns: product_id, product_name, units_sold,
        revenue, returned_units, return_amount.
    """
    groups = group_totals(sales, returns, _product_sale_lines, _product_return_lines)
    rows = [
        {
            "product_id": g.key,
            "product_name": g.label,
            "units_sold": g.net_units,
            "revenue": g.net_amount,
            "returned_units": g.returned_units,
            "return_amount": round(g.return_amount, 2),
        }
        for g in rank_groups(groups, limit)
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "product_id",
            "product_name",
            "units_sold",
            "revenue",
            "returned_units",
            "return_amount",
        ],
    )


def customer_totals(
    sales: Iterable[Sale], returns: Iterable[Return]
) -> list[GroupTotal]:
    """Per-customer spend and refunds; a refund alone is enough to list a customer."""
    return group_totals(
        sales,
        returns,
        _customer_sale_lines,
        _customer_return_lines,
        returns_open_keys=True,
    )


def top_customers(
    sales: Iterable[Sale], returns: Iterable[Return], limit: Optional[int] = 10
) -> pd.DataFrame:
    """
    Customers ranked by net spend (sales minus refunds, floored at zero).

    Customers whose refunds cancel out their purchases are kept and flagged
    with ``has_returns``; they rank ahead of other zero-spend customers,
    larger refunds first.

    Returns:
        DataFrame with columns: customer_id, customer_name, order_count,
        gross_spent, total_returns, net_spent, has_returns.
    """
    ranked = sorted(customer_totals(sales, returns), key=_customer_rank_key)
    if limit is not None:
        ranked = ranked[:limit]

    rows = [
        {
            "customer_id": g.key,
            "customer_name": g.label,
            "order_count": g.count,
            "gross_spent": round(g.gross_amount, 2),
            "total_returns": round(g.return_amount, 2),
            "net_spent": g.net_amount,
            "has_returns": g.has_returns,
        }
        for g in ranked
    ]
    return pd.DataFrame(
        rows,
        columns=[
            "customer_id",
            "customer_name",
            "order_count",
            "gross_spent",
            "total_returns",
            "net_spent",
            "has_returns",
        ],
    )


def sales_by_month(sales: Iterable[Sale], returns: Iterable[Return]) -> pd.DataFrame:
    """
    Revenue per calendar month, net of refunds issued in that month.

    Buckets are labelled 'Mon YYYY' and ordered chronologically (not
    alphabetically). Refunds only reduce months that have sales.

    Returns:
        DataFrame with columns: month, sales, gross_revenue, returns, revenue.
    """
    groups = group_totals(sales, returns, _month_sale_lines, _month_return_lines)
    groups.sort(key=lambda g: g.sort_key)
    rows = [
        {
            "month": g.label,
            "sales": g.count,
            "gross_revenue": round(g.gross_amount, 2),
            "returns": round(g.return_amount, 2),
            "revenue": g.net_amount,
        }
        for g in groups
    ]
    return pd.DataFrame(
        rows, columns=["month", "sales", "gross_revenue", "returns", "revenue"]
    )


def sales_by_status(sales: Sequence[Sale], returns: Iterable[Return]) -> pd.DataFrame:
    """
    Sale count and net revenue per sale status.

    Returns:
        DataFrame with columns: status, count, revenue.
    """
    groups = _linked_sale_breakdown(sales, returns, lambda s: s.status)
    rows = [{"status": g.key, "count": g.count, "revenue": g.net_amount} for g in groups]
    return pd.DataFrame(rows, columns=["status", "count", "revenue"])


def sales_by_payment_method(
    sales: Sequence[Sale], returns: Iterable[Return]
) -> pd.DataFrame:
    """
    Sale count and net revenue per payment method.

    Returns:
        DataFrame with columns: method, count, revenue.
    """
    groups = _linked_sale_breakdown(sales, returns, lambda s: s.payment_method)
    rows = [{"method": g.key, "count": g.count, "revenue": g.net_amount} for g in groups]
    return pd.DataFrame(rows, columns=["method", "count", "revenue"])


def category_breakdown(
    sales: Iterable[Sale], returns: Iterable[Return], products: Iterable[Product]
) -> pd.DataFrame:
    """
    Net revenue per product category, highest first.

    Returns:
        DataFrame with columns: category, line_count, units_sold, revenue.
    """
    sale_lines, return_lines = _category_lines(products)
    groups = group_totals(sales, returns, sale_lines, return_lines)
    rows = [
        {
            "category": g.key,
            "line_count": g.count,
            "units_sold": g.net_units,
            "revenue": g.net_amount,
        }
        for g in rank_groups(groups)
    ]
    return pd.DataFrame(rows, columns=["category", "line_count", "units_sold", "revenue"])


def segment_for(net_spent: float, low: float = 500.0, high: float = 1000.0) -> str:
    """Segment label for a positive net spend."""
    if net_spent > high:
        return SEGMENT_HIGH
    if net_spent >= low:
        return SEGMENT_MEDIUM
    return SEGMENT_LOW


def customer_segments(
    sales: Iterable[Sale],
    returns: Iterable[Return],
    low: float = 500.0,
    high: float = 1000.0,
) -> pd.DataFrame:
    """
    Bucket customers by net spend: Low (< low), Medium (<= high), High.

    Customers with no positive net spend are left out of every bucket.

    Returns:
        DataFrame with one row per segment (Low, Medium, High) and columns:
        segment, count, total_spent, avg_spent.
    """
    buckets: dict[str, list[float]] = {
        SEGMENT_LOW: [],
        SEGMENT_MEDIUM: [],
        SEGMENT_HIGH: [],
    }
    for group in customer_totals(sales, returns):
        net = group.net_amount
        if net > 0:
            buckets[segment_for(net, low, high)].append(net)

    rows = []
    for segment, values in buckets.items():
        total = round(sum(values), 2)
        rows.append(
            {
                "segment": segment,
                "count": len(values),
                "total_spent": total,
                "avg_spent": round(total / len(values), 2) if values else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=["segment", "count", "total_spent", "avg_spent"])


def product_performance(
    products: Iterable[Product], sales: Iterable[Sale], returns: Iterable[Return]
) -> pd.DataFrame:
    """
    Sales performance of every catalogue product, including unsold ones.

    ``profit_margin_percent`` is the unit margin (price - cost) / price, 0
    when either figure is missing.

    Returns:
        DataFrame sorted by revenue (descending) with columns: product_id,
        product_name, category, stock, units_sold, revenue,
        profit_margin_percent.
    """

    def sale_lines(sale: Sale) -> Iterator[Line]:
        for item in sale.items:
            yield Line(item.product_id, item.product_name, item.total, item.quantity)

    def return_lines(ret: Return) -> Iterator[Line]:
        for item in ret.items:
            yield Line(item.product_id, item.product_name, item.total, item.quantity)

    by_product = {g.key: g for g in group_totals(sales, returns, sale_lines, return_lines)}

    rows = []
    for product in products:
        group = by_product.get(product.id)
        if product.cost and product.price:
            margin = (product.price - product.cost) / product.price * 100.0
        else:
            margin = 0.0
        rows.append(
            {
                "product_id": product.id,
                "product_name": product.name,
                "category": product.category or UNCATEGORIZED,
                "stock": product.stock,
                "units_sold": group.net_units if group else 0.0,
                "revenue": group.net_amount if group else 0.0,
                "profit_margin_percent": round(margin, 2),
            }
        )

    df = pd.DataFrame(
        rows,
        columns=[
            "product_id",
            "product_name",
            "category",
            "stock",
            "units_sold",
            "revenue",
            "profit_margin_percent",
        ],
    )
    return df.sort_values("revenue", ascending=False, kind="stable").reset_index(
        drop=True
    )


@dataclass(frozen=True)
class InventoryStatus:
    total_items: int
    low_stock: int
    out_of_stock: int
    total_value: float


def inventory_status(products: Iterable[Product]) -> InventoryStatus:
    """
    Stock health of the catalogue.

    A product is low on stock when it defines a minimum, still has stock,
    and is at or below that minimum. Stock value is measured at cost.
    """
    items = list(products)
    low = sum(
        1 for p in items if p.min_stock and 0 < p.stock <= p.min_stock
    )
    out = sum(1 for p in items if not p.stock)
    value = sum((p.cost or 0.0) * (p.stock or 0) for p in items)
    return InventoryStatus(
        total_items=len(items),
        low_stock=low,
        out_of_stock=out,
        total_value=round(value, 2),
    )
