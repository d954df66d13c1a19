import pytest

from pos_finsight.currency import (
    CurrencyConverter,
    currency_symbol,
    format_currency,
    normalize_currency_code,
)


@pytest.mark.parametrize("code", ["SLL", "SLE", "NLE", "NLe", " SLE "])
def test_legacy_leone_codes_normalize_to_nle(code) -> None:
    assert normalize_currency_code(code) == "NLe"


def test_currency_symbols() -> None:
    assert currency_symbol("USD") == "$"
    assert currency_symbol("EUR") == "€"
    assert currency_symbol("GBP") == "£"
    assert currency_symbol("CAD") == "C$"
    assert currency_symbol("AUD") == "A$"
    assert currency_symbol("SLL") == "NLe "
    # Unknown codes pass through
    assert currency_symbol("JPY") == "JPY"


def test_format_currency() -> None:
    assert format_currency(1234.5, "USD") == "$1,234.50"
    assert format_currency(10, "SLE") == "NLe 10.00"
    assert format_currency(-3, "EUR") == "-€3.00"
    assert format_currency(1234567.891, "GBP", decimals=0) == "£1,234,568"
    assert format_currency(0, "XOF") == "XOF0.00"


def test_converter_between_currencies() -> None:
    converter = CurrencyConverter()

    assert converter.to_base(10, "USD") == pytest.approx(240)
    assert converter.from_base(260, "EUR") == pytest.approx(10)
    assert converter.convert(30, "GBP", "USD") == pytest.approx(37.5)
    assert converter.convert(5, "SLL", "NLe") == 5


def test_converter_unknown_rate_returns_amount_and_warns(caplog) -> None:
    converter = CurrencyConverter()

    with caplog.at_level("WARNING"):
        assert converter.convert(42, "JPY", "USD") == 42

    assert "JPY" in caplog.text


def test_converter_update_rates() -> None:
    converter = CurrencyConverter({"USD": 20})
    converter.update_rates({"EUR": 25, "NLe": 99})

    assert converter.rates == {"USD": 20.0, "NLe": 1.0, "EUR": 25.0}

    with pytest.raises(ValueError):
        converter.update_rates({"USD": 0})
