# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Entity definitions for POS FinSight.

All entities are read-only inputs for the computation modules: they are
produced by the data-access layer (see ``io.py``) and never mutated by the
engine. Monetary amounts are plain floats, timestamps are naive datetimes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# ---------------------------------------------------------------------------
# Status vocabularies
# ---------------------------------------------------------------------------

SALE_STATUSES = ("pending", "completed", "refunded", "cancelled")

# Only these sale statuses ever contribute to revenue figures.
REVENUE_SALE_STATUSES = frozenset({"completed", "pending"})

RETURN_STATUSES = ("pending", "approved", "rejected", "completed")

# Returns in these statuses are authoritative for reconciliation.
APPROVED_RETURN_STATUSES = frozenset({"approved", "completed"})

REFUND_METHODS = ("cash", "store_credit", "original_payment", "exchange")
REVENUE_REDUCING_REFUND_METHODS = frozenset({"cash", "original_payment"})

INVOICE_STATUSES = ("draft", "pending", "sent", "paid", "overdue", "cancelled")


@dataclass(frozen=True)
class SaleItem:
    """One line of a sale."""

    product_id: str
    product_name: str
    quantity: float
    unit_price: float
    total: float

    @property
    def key(self) -> str:
        return self.product_id or self.product_name


@dataclass(frozen=True)
class Sale:
    """A point-of-sale transaction (total = subtotal + tax - discount)."""

    id: str
    items: tuple[SaleItem, ...]
    subtotal: float
    tax: float
    discount: float
    total: float
    status: str
    payment_method: str
    created_at: datetime
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def is_revenue(self) -> bool:
        """True when the sale counts toward revenue (completed or pending)."""
        return self.status in REVENUE_SALE_STATUSES


@dataclass(frozen=True)
class ReturnItem:
    product_id: str
    product_name: str
    quantity: float
    total: float

    @property
    def key(self) -> str:
        return self.product_id or self.product_name


@dataclass(frozen=True)
class Return:
    """A customer return, optionally linked to the sale it reverses."""

    id: str
    items: tuple[ReturnItem, ...]
    refund_amount: float
    refund_method: str
    status: str
    created_at: datetime
    sale_id: Optional[str] = None
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.status in APPROVED_RETURN_STATUSES


@dataclass(frozen=True)
class Invoice:
    """
    An invoice. When ``sale_id`` is set the invoice was derived from a sale
    and its amount is already represented by that sale's total.
    """

    id: str
    total: float
    status: str
    created_at: datetime
    sale_id: Optional[str] = None
    paid_amount: float = 0.0

    @property
    def is_independent(self) -> bool:
        return not self.sale_id


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    price: float
    cost: Optional[float] = None
    category: Optional[str] = None
    stock: int = 0
    min_stock: Optional[int] = None


@dataclass(frozen=True)
class Customer:
    id: str
    name: str


@dataclass(frozen=True)
class StoreData:
    """A snapshot of every collection the reports are computed from."""

    sales: list[Sale] = field(default_factory=list)
    returns: list[Return] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    customers: list[Customer] = field(default_factory=list)
