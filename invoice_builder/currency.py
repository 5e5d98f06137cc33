"""Supported currencies and money formatting shared by the preview and the PDF."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, NamedTuple

from .calculations import to_number

DEC_QUANT = Decimal("0.01")
DEFAULT_CURRENCY = "USD"


class CurrencyInfo(NamedTuple):
    code: str
    name: str
    symbol: str
    decimals: int = 2


CURRENCY_INFO: Dict[str, CurrencyInfo] = {c.code: c for c in [
    CurrencyInfo("USD", "US Dollar", "$"),
    CurrencyInfo("EUR", "Euro", "€"),
    CurrencyInfo("GBP", "British Pound", "£"),
    CurrencyInfo("JPY", "Japanese Yen", "¥", 0),
    CurrencyInfo("CNY", "Chinese Yuan", "¥"),
    CurrencyInfo("AUD", "Australian Dollar", "A$"),
    CurrencyInfo("CAD", "Canadian Dollar", "C$"),
    CurrencyInfo("CHF", "Swiss Franc", "CHF"),
    CurrencyInfo("HKD", "Hong Kong Dollar", "HK$"),
    CurrencyInfo("SGD", "Singapore Dollar", "S$"),
    CurrencyInfo("SEK", "Swedish Krona", "kr"),
    CurrencyInfo("KRW", "South Korean Won", "₩", 0),
    CurrencyInfo("NOK", "Norwegian Krone", "kr"),
    CurrencyInfo("NZD", "New Zealand Dollar", "NZ$"),
    CurrencyInfo("INR", "Indian Rupee", "₹"),
    CurrencyInfo("MXN", "Mexican Peso", "$"),
    CurrencyInfo("ZAR", "South African Rand", "R"),
    CurrencyInfo("BRL", "Brazilian Real", "R$"),
    CurrencyInfo("TRY", "Turkish Lira", "₺"),
    CurrencyInfo("RUB", "Russian Ruble", "₽"),
]}


def get_currency_info(code: str) -> CurrencyInfo:
    """Info for ``code``; unknown codes fall back to USD."""
    return CURRENCY_INFO.get((code or "").upper(), CURRENCY_INFO[DEFAULT_CURRENCY])


def all_currencies() -> List[CurrencyInfo]:
    return list(CURRENCY_INFO.values())


def currency_symbol(code: str) -> str:
    return get_currency_info(code).symbol


def d2(x: Any, places: int = 2) -> Decimal:
    value = to_number(x)
    if math.isnan(value):
        value = 0.0
    quant = DEC_QUANT if places == 2 else Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quant, rounding=ROUND_HALF_UP)


def _prefix(symbol: str) -> str:
    # Letter symbols (CHF, kr, R) read better with a gap before the digits.
    return f"{symbol} " if symbol[-1].isalpha() and len(symbol) > 1 else symbol


def format_currency(amount: Any, code: str = DEFAULT_CURRENCY) -> str:
    """``1234.5`` in USD -> ``$1,234.50``; JPY and KRW have no minor unit."""
    info = get_currency_info(code)
    value = d2(amount, info.decimals)
    return f"{_prefix(info.symbol)}{value:,.{info.decimals}f}"


def pdf_currency_prefix(code: str) -> str:
    """Symbol for the standard PDF fonts, which only cover cp1252 glyphs."""
    info = get_currency_info(code)
    try:
        info.symbol.encode("cp1252")
    except UnicodeEncodeError:
        return f"{info.code} "
    return _prefix(info.symbol)


def format_currency_pdf(amount: Any, code: str = DEFAULT_CURRENCY) -> str:
    info = get_currency_info(code)
    value = d2(amount, info.decimals)
    return f"{pdf_currency_prefix(code)}{value:,.{info.decimals}f}"


def format_quantity(qty: Any) -> str:
    """``2.0`` -> ``2``, ``1.5`` -> ``1.5``."""
    value = d2(qty).normalize()
    return f"{value:f}"
