"""Unit tests for currency formatting."""

from decimal import Decimal

import pytest

from invoice_builder.currency import (
    d2,
    format_currency,
    format_currency_pdf,
    format_quantity,
    get_currency_info,
    pdf_currency_prefix,
)


@pytest.mark.parametrize("amount, code, expected", [
    (1234.5, "USD", "$1,234.50"),
    (0, "EUR", "€0.00"),
    (99.999, "GBP", "£100.00"),
    (1500, "JPY", "¥1,500"),
    (12.5, "CHF", "CHF 12.50"),
    (3, "AUD", "A$3.00"),
    ("abc", "USD", "$0.00"),
])
def test_format_currency(amount, code, expected) -> None:
    """Symbols, grouping and minor units follow the currency."""
    assert format_currency(amount, code) == expected


def test_unknown_currency_uses_usd() -> None:
    """Unknown codes format as US dollars."""
    assert get_currency_info("ZZZ").code == "USD"
    assert format_currency(1, "ZZZ") == "$1.00"


def test_d2_rounds_half_up() -> None:
    """Money rounds half up to two places."""
    assert d2(2.675) == Decimal("2.68")
    assert d2(None) == Decimal("0.00")
    assert d2(7, 0) == Decimal("7")


class TestPdfCurrency:
    """Symbols limited to what the standard PDF fonts can draw."""

    def test_cp1252_symbols_kept(self) -> None:
        """Dollar, euro, pound and yen are drawable."""
        assert pdf_currency_prefix("USD") == "$"
        assert pdf_currency_prefix("EUR") == "€"
        assert format_currency_pdf(20, "GBP") == "£20.00"

    def test_other_symbols_use_code(self) -> None:
        """Rupee, won, lira and ruble fall back to the ISO code."""
        assert format_currency_pdf(1234.5, "INR") == "INR 1,234.50"
        assert format_currency_pdf(1000, "KRW") == "KRW 1,000"


@pytest.mark.parametrize("qty, expected", [(2, "2"), (2.0, "2"), (1.5, "1.5"), (0.25, "0.25"), (100, "100")])
def test_format_quantity(qty, expected) -> None:
    """Quantities drop trailing zeros without switching to exponent notation."""
    assert format_quantity(qty) == expected
