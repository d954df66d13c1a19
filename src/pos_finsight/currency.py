# POS FinSight - Revenue reconciliation & reporting for point-of-sale data
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Currency helpers for POS FinSight.

Amounts are stored in the shop's base currency, the New Leone (NLe). This
module provides:
- the symbol lookup used when formatting amounts for display and documents,
- normalization of legacy Leone codes (SLL, SLE, NLE) to NLe,
- a small converter between the base currency and display currencies.

The currency code is always passed explicitly; nothing here reads global
settings.
"""

import logging
from collections.abc import Mapping
from typing import Optional

logger = logging.getLogger(__name__)

BASE_CURRENCY = "NLe"

LEGACY_LEONE_CODES = frozenset({"SLL", "SLE", "NLE"})

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
    "AUD": "A$",
    "NLe": "NLe ",
}

# Units of NLe per one unit of the currency.
DEFAULT_EXCHANGE_RATES: dict[str, float] = {
    "NLe": 1.0,
    "USD": 24.0,
    "EUR": 26.0,
    "GBP": 30.0,
}


def normalize_currency_code(code: str) -> str:
    """Map legacy Leone codes (SLL, SLE, NLE) to NLe; other codes unchanged."""
    code = code.strip()
    if code in LEGACY_LEONE_CODES or code == BASE_CURRENCY:
        return BASE_CURRENCY
    return code


def currency_symbol(code: str) -> str:
    """Return the display symbol for a currency code (the code itself if unknown)."""
    normalized = normalize_currency_code(code)
    return CURRENCY_SYMBOLS.get(normalized, normalized)


def format_currency(amount: float, currency_code: str, decimals: int = 2) -> str:
    """
    Format an amount with its currency symbol and thousands separators.

    Examples:
        format_currency(1234.5, "USD")  -> "$1,234.50"
        format_currency(10, "SLE")      -> "NLe 10.00"
        format_currency(-3, "EUR")      -> "-€3.00"
    """
    symbol = currency_symbol(currency_code)
    rounded = round(float(amount), decimals)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{abs(rounded):,.{decimals}f}"


class CurrencyConverter:
    """
    Convert amounts between the base currency (NLe) and other currencies.

    Exchange rates express how many NLe one unit of a currency is worth.
    Conversions involving a code without a known rate return the amount
    unchanged and log a warning.
    """

    def __init__(self, rates: Optional[Mapping[str, float]] = None) -> None:
        source = DEFAULT_EXCHANGE_RATES if rates is None else rates
        self._rates: dict[str, float] = {
            normalize_currency_code(code): float(rate) for code, rate in source.items()
        }
        self._rates[BASE_CURRENCY] = 1.0

    @property
    def rates(self) -> dict[str, float]:
        return dict(self._rates)

    def update_rates(self, rates: Mapping[str, float]) -> None:
        for code, rate in rates.items():
            normalized = normalize_currency_code(code)
            if normalized == BASE_CURRENCY:
                continue
            if rate <= 0:
                raise ValueError(f"Exchange rate for {code} must be positive.")
            self._rates[normalized] = float(rate)

    def convert(
        self, amount: float, from_currency: str, to_currency: str = BASE_CURRENCY
    ) -> float:
        source = normalize_currency_code(from_currency)
        target = normalize_currency_code(to_currency)
        if source == target:
            return amount

        from_rate = self._rates.get(source)
        to_rate = self._rates.get(target)
        if from_rate is None or to_rate is None:
            logger.warning("Exchange rate not found for %s or %s", source, target)
            return amount

        return amount * from_rate / to_rate

    def to_base(self, amount: float, from_currency: str) -> float:
        return self.convert(amount, from_currency, BASE_CURRENCY)

    def from_base(self, amount: float, to_currency: str) -> float:
        return self.convert(amount, BASE_CURRENCY, to_currency)
