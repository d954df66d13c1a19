# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for POS FinSight.

This module reads a CSV snapshot of the shop's data and turns it into the
entities defined in ``models.py``. A snapshot is a directory containing:

    sales.csv         id, created_at, status, payment_method, subtotal,
                      tax, discount, total [, customer_id, customer_name]
    sale_items.csv    sale_id, product_id, product_name, quantity,
                      unit_price [, total]
    returns.csv       id, created_at, status, refund_amount, refund_method
                      [, sale_id, customer_id, customer_name]
    return_items.csv  return_id, product_id, product_name, quantity, total
    invoices.csv      id, created_at, status, total [, sale_id, paid_amount]
    products.csv      id, name, price [, cost, category, stock, min_stock]
    customers.csv     id, name

Column names are case-insensitive. Every file is optional: a missing file
simply yields an empty collection. A file that is present must contain its
required columns, and its dates and numbers must parse; otherwise a clear
ValueError is raised.

Line items for document pagination are read by ``read_document_items``:

    description, quantity, rate [, amount]

(``unit_price`` is accepted as an alias for ``rate``).
"""

import logging
import os
from collections import defaultdict
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from .models import (
    Customer,
    Invoice,
    Product,
    Return,
    ReturnItem,
    Sale,
    SaleItem,
    StoreData,
)
from .pagination import LineItem

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _read_csv(path: Path) -> pd.DataFrame:
    """Read a CSV file as text cells with lowercase, stripped column names."""
    df = pd.read_csv(path, dtype=str)
    df.columns = [c.lower().strip() for c in df.columns]
    return df


def _parse_frame(
    df: pd.DataFrame,
    name: str,
    required: set[str],
    numeric: tuple[str, ...] = (),
    dates: tuple[str, ...] = (),
) -> pd.DataFrame:
    """
    Check required columns and parse typed columns of a freshly read table.

    Dates are required and parsed strictly, then made naive
    (timezone-aware values are converted to UTC first). Blank numeric cells
    stay NaN; anything else that is not a number is an error.

    Raises:
        ValueError: if required columns are missing or values cannot be
            parsed.
    """
    missing = required - set(df.columns)
    if missing:
        raise ValueError(
            f"Invalid structure for {name}: missing column(s) "
            f"{', '.join(sorted(missing))}."
        )

    for col in dates:
        try:
            parsed = pd.to_datetime(df[col], errors="raise")
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Invalid values in '{col}' column of {name}.") from exc
        if parsed.isna().any():
            raise ValueError(f"Missing values in '{col}' column of {name}.")
        if parsed.dt.tz is not None:
            parsed = parsed.dt.tz_convert(None)
        df[col] = parsed

    for col in numeric:
        if col not in df.columns:
            continue
        raw = df[col]
        df[col] = pd.to_numeric(raw, errors="coerce")
        if (df[col].isna() & raw.notna()).any():
            raise ValueError(f"Invalid numeric values in '{col}' column of {name}.")

    return df


def _read_table(
    path: Path,
    required: set[str],
    numeric: tuple[str, ...] = (),
    dates: tuple[str, ...] = (),
) -> pd.DataFrame:
    return _parse_frame(_read_csv(path), path.name, required, numeric, dates)


def _text(value: Any) -> Optional[str]:
    """Optional string cell: NaN and blanks become None."""
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any, default: float = 0.0) -> float:
    if value is None or pd.isna(value):
        return default
    return float(value)


def _optional_number(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def _rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    return df.to_dict(orient="records")


def _load_sale_items(path: Path) -> dict[str, list[SaleItem]]:
    items: dict[str, list[SaleItem]] = defaultdict(list)
    if not path.is_file():
        return items

    df = _read_table(
        path,
        required={"sale_id", "product_id", "product_name", "quantity", "unit_price"},
        numeric=("quantity", "unit_price", "total"),
    )
    for row in _rows(df):
        quantity = _number(row["quantity"])
        unit_price = _number(row["unit_price"])
        total = _optional_number(row.get("total"))
        items[str(row["sale_id"])].append(
            SaleItem(
                product_id=_text(row["product_id"]) or "",
                product_name=_text(row["product_name"]) or "",
                quantity=quantity,
                unit_price=unit_price,
                total=quantity * unit_price if total is None else total,
            )
        )
    return items


def read_sales(directory: Path) -> list[Sale]:
    path = directory / "sales.csv"
    if not path.is_file():
        return []

    items_by_sale = _load_sale_items(directory / "sale_items.csv")
    df = _read_table(
        path,
        required={
            "id",
            "created_at",
            "status",
            "payment_method",
            "subtotal",
            "tax",
            "discount",
            "total",
        },
        numeric=("subtotal", "tax", "discount", "total"),
        dates=("created_at",),
    )
    sales = []
    for row in _rows(df):
        sale_id = str(row["id"])
        sales.append(
            Sale(
                id=sale_id,
                items=tuple(items_by_sale.get(sale_id, ())),
                subtotal=_number(row["subtotal"]),
                tax=_number(row["tax"]),
                discount=_number(row["discount"]),
                total=_number(row["total"]),
                status=str(row["status"]).strip().lower(),
                payment_method=_text(row["payment_method"]) or "other",
                created_at=row["created_at"].to_pydatetime(),
                customer_id=_text(row.get("customer_id")),
                customer_name=_text(row.get("customer_name")),
            )
        )
    return sales


def _load_return_items(path: Path) -> dict[str, list[ReturnItem]]:
    items: dict[str, list[ReturnItem]] = defaultdict(list)
    if not path.is_file():
        return items

    df = _read_table(
        path,
        required={"return_id", "product_id", "product_name", "quantity", "total"},
        numeric=("quantity", "total"),
    )
    for row in _rows(df):
        items[str(row["return_id"])].append(
            ReturnItem(
                product_id=_text(row["product_id"]) or "",
                product_name=_text(row["product_name"]) or "",
                quantity=_number(row["quantity"]),
                total=_number(row["total"]),
            )
        )
    return items


def read_returns(directory: Path) -> list[Return]:
    path = directory / "returns.csv"
    if not path.is_file():
        return []

    items_by_return = _load_return_items(directory / "return_items.csv")
    df = _read_table(
        path,
        required={"id", "created_at", "status", "refund_amount", "refund_method"},
        numeric=("refund_amount",),
        dates=("created_at",),
    )
    returns = []
    for row in _rows(df):
        return_id = str(row["id"])
        returns.append(
            Return(
                id=return_id,
                items=tuple(items_by_return.get(return_id, ())),
                refund_amount=_number(row["refund_amount"]),
                refund_method=str(row["refund_method"]).strip().lower(),
                status=str(row["status"]).strip().lower(),
                created_at=row["created_at"].to_pydatetime(),
                sale_id=_text(row.get("sale_id")),
                customer_id=_text(row.get("customer_id")),
                customer_name=_text(row.get("customer_name")),
            )
        )
    return returns


def read_invoices(directory: Path) -> list[Invoice]:
    path = directory / "invoices.csv"
    if not path.is_file():
        return []

    df = _read_table(
        path,
        required={"id", "created_at", "status", "total"},
        numeric=("total", "paid_amount"),
        dates=("created_at",),
    )
    return [
        Invoice(
            id=str(row["id"]),
            total=_number(row["total"]),
            status=str(row["status"]).strip().lower(),
            created_at=row["created_at"].to_pydatetime(),
            sale_id=_text(row.get("sale_id")),
            paid_amount=_number(row.get("paid_amount")),
        )
        for row in _rows(df)
    ]


def read_products(directory: Path) -> list[Product]:
    path = directory / "products.csv"
    if not path.is_file():
        return []

    df = _read_table(
        path,
        required={"id", "name", "price"},
        numeric=("price", "cost", "stock", "min_stock"),
    )
    products = []
    for row in _rows(df):
        min_stock = _optional_number(row.get("min_stock"))
        products.append(
            Product(
                id=str(row["id"]),
                name=_text(row["name"]) or "",
                price=_number(row["price"]),
                cost=_optional_number(row.get("cost")),
                category=_text(row.get("category")),
                stock=int(_number(row.get("stock"))),
                min_stock=int(min_stock) if min_stock is not None else None,
            )
        )
    return products


def read_customers(directory: Path) -> list[Customer]:
    path = directory / "customers.csv"
    if not path.is_file():
        return []

    df = _read_table(path, required={"id", "name"})
    return [
        Customer(id=str(row["id"]), name=_text(row["name"]) or "")
        for row in _rows(df)
    ]


def read_store_snapshot(directory: PathLike) -> StoreData:
    """
    Read every collection of a CSV snapshot directory.

    Parameters
    ----------
    directory:
        Directory containing the snapshot CSV files (see module docstring).

    Returns
    -------
    StoreData
        Sales (with their items), returns (with their items), invoices,
        products and customers.

    Raises
    ------
    FileNotFoundError
        If the directory does not exist.
    ValueError
        If a file is present but malformed.
    """
    base = Path(directory)
    if not base.is_dir():
        raise FileNotFoundError(f"Snapshot directory not found: {base}")

    data = StoreData(
        sales=read_sales(base),
        returns=read_returns(base),
        invoices=read_invoices(base),
        products=read_products(base),
        customers=read_customers(base),
    )
    logger.debug(
        "Loaded snapshot from %s: %d sales, %d returns, %d invoices, "
        "%d products, %d customers",
        base,
        len(data.sales),
        len(data.returns),
        len(data.invoices),
        len(data.products),
        len(data.customers),
    )
    return data


def read_document_items(path: PathLike) -> list[LineItem]:
    """
    Read printable line items from a CSV file.

    When the ``amount`` column is absent it is computed as quantity x rate.

    Raises:
        ValueError: if required columns are missing or not numeric.
    """
    file_path = Path(path)
    df = _read_csv(file_path)
    # Backward compat: 'unit_price' -> 'rate'
    if "unit_price" in df.columns and "rate" not in df.columns:
        df = df.rename(columns={"unit_price": "rate"})

    df = _parse_frame(
        df,
        file_path.name,
        required={"description", "quantity", "rate"},
        numeric=("quantity", "rate", "amount"),
    )

    items = []
    for row in _rows(df):
        quantity = _number(row["quantity"])
        rate = _number(row["rate"])
        amount = _optional_number(row.get("amount"))
        items.append(
            LineItem(
                description=_text(row["description"]) or "",
                quantity=quantity,
                rate=rate,
                amount=quantity * rate if amount is None else amount,
            )
        )
    return items
