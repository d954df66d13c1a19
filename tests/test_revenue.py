from datetime import datetime

import pytest

from pos_finsight.models import Invoice, Product, Return, Sale, SaleItem
from pos_finsight.revenue import (
    calculate_gross_revenue,
    calculate_net_revenue,
    calculate_pending_revenue,
    calculate_realized_revenue,
    calculate_return_impact,
    calculate_total_cost,
    growth_rate,
    month_label,
    monthly_trends,
    revenue_breakdown,
    summarize_revenue,
)

DAY = datetime(2025, 3, 10, 12, 0)


def _sale(sale_id, total, status="completed", items=(), created_at=DAY) -> Sale:
    return Sale(
        id=sale_id,
        items=tuple(items),
        subtotal=total,
        tax=0.0,
        discount=0.0,
        total=total,
        status=status,
        payment_method="cash",
        created_at=created_at,
    )


def _return(
    return_id, amount, status="approved", method="cash", sale_id=None, created_at=DAY
) -> Return:
    return Return(
        id=return_id,
        items=(),
        refund_amount=amount,
        refund_method=method,
        status=status,
        created_at=created_at,
        sale_id=sale_id,
    )


def _invoice(invoice_id, total, status="paid", sale_id=None, created_at=DAY) -> Invoice:
    return Invoice(
        id=invoice_id,
        total=total,
        status=status,
        created_at=created_at,
        sale_id=sale_id,
    )


def test_gross_and_net_revenue_with_linked_return() -> None:
    """Three sales and one approved return: gross 600, impact 50, net 550."""
    sales = [_sale("s1", 100), _sale("s2", 200), _sale("s3", 300)]
    returns = [_return("r1", 50, sale_id="s2")]

    gross = calculate_gross_revenue(sales, [])
    impact = calculate_return_impact(returns)

    assert gross == pytest.approx(600)
    assert impact == pytest.approx(50)
    assert calculate_net_revenue(gross, impact) == pytest.approx(550)


def test_sale_linked_invoice_is_never_counted() -> None:
    sales = [_sale("s1", 75)]
    invoices = [_invoice("i1", 150), _invoice("i2", 75, sale_id="s1")]

    assert calculate_gross_revenue([], invoices) == pytest.approx(150)
    assert calculate_gross_revenue(sales, invoices) == pytest.approx(225)


def test_only_paid_independent_invoices_count() -> None:
    invoices = [
        _invoice("i1", 100, status="draft"),
        _invoice("i2", 100, status="sent"),
        _invoice("i3", 100, status="overdue"),
        _invoice("i4", 40, status="paid"),
    ]

    assert calculate_gross_revenue([], invoices) == pytest.approx(40)


def test_cancelled_and_refunded_sales_carry_no_revenue() -> None:
    sales = [
        _sale("s1", 100, status="completed"),
        _sale("s2", 50, status="pending"),
        _sale("s3", 500, status="cancelled"),
        _sale("s4", 700, status="refunded"),
    ]

    assert calculate_gross_revenue(sales, []) == pytest.approx(150)


def test_only_approved_and_completed_returns_reduce_revenue() -> None:
    returns = [
        _return("r1", 10, status="approved"),
        _return("r2", 20, status="completed"),
        _return("r3", 40, status="pending"),
        _return("r4", 80, status="rejected"),
    ]

    assert calculate_return_impact(returns) == pytest.approx(30)


def test_net_revenue_is_floored_at_zero() -> None:
    assert calculate_net_revenue(100, 250) == 0.0


def test_empty_window_yields_zero_without_errors() -> None:
    summary = summarize_revenue([], [], [])

    assert summary.gross_revenue == 0
    assert summary.net_revenue == 0
    assert summary.profit_margin_percent == 0
    assert growth_rate(0, 0) == 0


def test_growth_rate() -> None:
    assert growth_rate(150, 100) == pytest.approx(50)
    assert growth_rate(50, 100) == pytest.approx(-50)
    assert growth_rate(100, 0) == 0
    assert growth_rate(100, -5) == 0


def test_pending_and_realized_revenue() -> None:
    sales = [_sale("s1", 100, status="completed"), _sale("s2", 30, status="pending")]
    invoices = [
        _invoice("i1", 20, status="sent"),
        _invoice("i2", 60, status="paid"),
        _invoice("i3", 999, status="sent", sale_id="s2"),
    ]

    assert calculate_pending_revenue(sales, invoices) == pytest.approx(50)
    assert calculate_realized_revenue(sales, invoices) == pytest.approx(160)


def test_total_cost_skips_products_without_cost(caplog) -> None:
    items = (
        SaleItem("p1", "Rice", 2, 10.0, 20.0),
        SaleItem("p2", "Oil", 1, 15.0, 15.0),
    )
    sales = [_sale("s1", 35, items=items), _sale("s2", 35, status="cancelled", items=items)]
    products = [Product("p1", "Rice", 10.0, cost=6.0), Product("p2", "Oil", 15.0)]

    with caplog.at_level("WARNING"):
        total = calculate_total_cost(sales, products)

    assert total == pytest.approx(12.0)
    assert "Oil" in caplog.text


def test_total_cost_warns_once_per_uncosted_product(caplog) -> None:
    """Repeated sales of a product without cost log a single warning for it."""
    items = (SaleItem("p2", "Oil", 1, 15.0, 15.0),)
    sales = [_sale(f"s{i}", 15, items=items) for i in range(5)]
    products = [Product("p2", "Oil", 15.0)]

    with caplog.at_level("WARNING"):
        total = calculate_total_cost(sales, products)

    assert total == 0
    assert len([r for r in caplog.records if "Oil" in r.getMessage()]) == 1


def test_summary_profit_margin_on_net_revenue() -> None:
    items = (SaleItem("p1", "Rice", 10, 10.0, 100.0),)
    sales = [_sale("s1", 100, items=items)]
    returns = [_return("r1", 20)]
    products = [Product("p1", "Rice", 10.0, cost=4.0)]

    summary = summarize_revenue(sales, [], returns, products)

    assert summary.net_revenue == pytest.approx(80)
    assert summary.total_cost == pytest.approx(40)
    assert summary.profit_margin == pytest.approx(40)
    assert summary.profit_margin_percent == pytest.approx(50)


def test_revenue_breakdown_by_refund_method() -> None:
    sales = [_sale("s1", 100)]
    invoices = [_invoice("i1", 50)]
    returns = [
        _return("r1", 10, method="cash"),
        _return("r2", 5, method="original_payment"),
        _return("r3", 7, method="store_credit"),
        _return("r4", 3, method="exchange"),
        _return("r5", 100, method="cash", status="rejected"),
    ]

    breakdown = revenue_breakdown(sales, invoices, returns)

    assert breakdown.sales_revenue == pytest.approx(100)
    assert breakdown.independent_invoice_revenue == pytest.approx(50)
    assert breakdown.revenue_reducing_returns == pytest.approx(15)
    assert breakdown.non_revenue_reducing_returns == pytest.approx(10)


def test_month_label() -> None:
    assert month_label(datetime(2025, 3, 1)) == "Mar 2025"
    assert month_label(datetime(2024, 12, 31)) == "Dec 2024"


def test_monthly_trends_oldest_first_across_year_boundary() -> None:
    sales = [
        _sale("s1", 100, created_at=datetime(2024, 12, 5)),
        _sale("s2", 200, created_at=datetime(2025, 2, 14)),
    ]
    returns = [_return("r1", 50, created_at=datetime(2025, 2, 20))]

    df = monthly_trends(sales, [], returns, now=datetime(2025, 2, 28), months=3)

    assert df["month"].tolist() == ["Dec 2024", "Jan 2025", "Feb 2025"]
    assert df["net_revenue"].tolist() == [100.0, 0.0, 150.0]
    assert df["return_impact"].tolist() == [0.0, 0.0, 50.0]
