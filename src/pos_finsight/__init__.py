# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
POS FinSight
------------

A Python-based reconciliation and reporting engine for point-of-sale data
(sales, returns, invoices, products and customers). The package computes
revenue figures net of returns and turns raw transactions into the ranked
lists and breakdowns a small shop looks at every day.

Main capabilities:
- date-range filtering with quick-filter presets (today, this week, ...),
- gross / net revenue reconciliation without double counting invoices
  derived from sales,
- a generic aggregation engine (by product, customer, month, status,
  payment method, category) with a zero-floor on every aggregate,
- customer segmentation, product performance and inventory status,
- fixed-capacity pagination of printable documents (invoices, BOQs,
  delivery notes),
- currency formatting and conversion,
- a command-line interface reading CSV snapshots.

POS FinSight separates computation (periods, revenue, aggregation),
configuration (TOML) and presentation (CLI), making it suitable for
scripting and automation.


Version: 0.2.0

Usage:
    python -m pos_finsight.cli --help
"""

__all__ = ["periods", "revenue", "aggregation", "pagination", "report"]

__version__ = "0.2.0"
