import pandas as pd

from pos_finsight.pagination import Document, LineItem, layout_document
from pos_finsight.revenue import summarize_revenue
from pos_finsight.views import (
    customer_value_label,
    format_money_columns,
    render_document_page,
    summary_to_dataframe,
)


def test_format_money_columns_leaves_other_columns() -> None:
    df = pd.DataFrame({"product_name": ["Rice"], "units_sold": [3.0], "revenue": [1250.5]})

    out = format_money_columns(df, "USD")

    assert out.loc[0, "revenue"] == "$1,250.50"
    assert out.loc[0, "units_sold"] == 3.0
    # Input unchanged
    assert df.loc[0, "revenue"] == 1250.5


def test_summary_to_dataframe_rows() -> None:
    df = summary_to_dataframe(summarize_revenue([], [], []))

    assert df["measure"].tolist()[0] == "Gross revenue"
    assert "Net revenue" in df["measure"].tolist()
    assert (df["amount"] == 0).all()


def test_customer_value_label_refund_only() -> None:
    refund_only = pd.Series({"net_spent": 0.0, "has_returns": True, "total_returns": 200.0})
    paying = pd.Series({"net_spent": 75.0, "has_returns": False, "total_returns": 0.0})

    assert customer_value_label(refund_only, "NLe") == "Returns: NLe 200.00"
    assert customer_value_label(paying, "USD") == "$75.00"


def test_render_document_page_sections() -> None:
    items = [LineItem(f"Item {i}", 1, 5.0, 5.0) for i in range(1, 13)]
    document = Document(
        title="Invoice",
        items=items,
        header={"Invoice #": "INV-7"},
        recipient={"Name": "Aminata"},
        totals={"Total": 60.0},
        closing_sections=("Authorized signature",),
    )
    first, last = layout_document(document, items_per_page=10)

    first_text = render_document_page(first, "USD")
    last_text = render_document_page(last, "USD")

    assert "=== Invoice ===" in first_text
    assert "Invoice #: INV-7" in last_text
    assert "Total: $60.00" in first_text
    assert " 1. Item 1" in first_text
    assert "11. Item 11" in last_text
    assert "Page 1 of 2" in first_text
    assert "Page 2 of 2" in last_text
    assert "[Authorized signature]" not in first_text
    assert "[Authorized signature]" in last_text
