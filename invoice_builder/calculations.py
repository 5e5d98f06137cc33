"""
Invoice arithmetic.

Form fields can hold half-typed text while the user edits them, so none of
these functions raise: anything that is not a finite number, and any
negative quantity, price, subtotal or rate, counts as 0.
"""

import math
from decimal import Decimal
from typing import Any, Iterable, Mapping

NAN = float("nan")


def to_number(x: Any) -> float:
    """Coerce a form value to float; NaN when it is not a usable number."""
    if x is None or isinstance(x, bool):
        return NAN
    if isinstance(x, (int, float, Decimal)):
        try:
            value = float(x)
        except (OverflowError, ValueError):
            return NAN
    else:
        s = str(x).strip().replace(",", "")
        if not s:
            return NAN
        try:
            value = float(s)
        except ValueError:
            return NAN
    return value if math.isfinite(value) else NAN


def _valid(x: Any) -> float:
    value = to_number(x)
    return 0.0 if math.isnan(value) else value


def non_negative(x: Any) -> float:
    """The value of ``x``, or 0 when it is invalid or negative."""
    value = _valid(x)
    return value if value > 0 else 0.0


def normalize_rate(x: Any) -> float:
    """A tax rate in [0, 100]; anything outside that range becomes 0."""
    value = _valid(x)
    return value if 0 <= value <= 100 else 0.0


def line_total(quantity: Any, unit_price: Any) -> float:
    return non_negative(quantity) * non_negative(unit_price)


def _item_total(item: Any) -> Any:
    if isinstance(item, Mapping):
        return item.get("total")
    return getattr(item, "total", None)


def subtotal(items: Iterable[Any]) -> float:
    """Sum of the items' ``total`` values (attribute or mapping key)."""
    if items is None:
        return 0.0
    return sum((_valid(_item_total(it)) for it in items), 0.0)


def tax_amount(subtotal_value: Any, rate: Any) -> float:
    """``subtotal * rate / 100`` with both operands clamped at 0."""
    return non_negative(subtotal_value) * non_negative(rate) / 100


def grand_total(subtotal_value: Any, tax: Any) -> float:
    return _valid(subtotal_value) + _valid(tax)
