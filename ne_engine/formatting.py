"""Display formatting for typed slot values.

Formatters never mutate their input and never raise: a value that cannot be
interpreted as the requested type comes back as ``str(value)``. ``None`` is
returned untouched so callers can still tell "missing" from "empty".
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Callable, Dict, Optional

from ne_engine.models.fields import FieldType

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "KRW": "₩",
    "INR": "₹",
    "CAD": "CA$",
    "AUD": "A$",
}
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW"})

FALSE_STRINGS = frozenset({"", "false", "0", "no", "off"})


def _to_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    if isinstance(value, str) and value.strip():
        try:
            result = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    return None


def _quantize(amount: Decimal, places: int) -> Optional[Decimal]:
    """Round half up to ``places`` fraction digits, widening precision as needed."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + places + 2)
        try:
            return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
        except InvalidOperation:
            return None


def format_date(value: Any, *, today: Optional[date] = None) -> Any:
    """Return "Today", "Tomorrow" or a short "Dec 1" style label."""
    if value is None:
        return None
    parsed = _to_date(value)
    if parsed is None:
        return str(value)
    current = today or date.today()
    if parsed == current:
        return "Today"
    if parsed == current + timedelta(days=1):
        return "Tomorrow"
    return f"{MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}"


def format_currency(value: Any, currency: str = "USD", decimal_places: int = 2) -> Any:
    """Format an amount with a currency symbol and grouped digits.

    >>> format_currency(-1234.5)
    '-$1,234.50'
    """
    if value is None:
        return None
    amount = _to_decimal(value)
    if amount is None:
        return str(value)
    code = currency.upper()
    places = 0 if code in ZERO_DECIMAL_CURRENCIES else decimal_places
    rounded = _quantize(amount, places)
    if rounded is None:
        return str(value)
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{rounded.copy_abs():,.{places}f}"


def format_number(value: Any) -> Any:
    """Comma-grouped number with at most three fraction digits."""
    if value is None:
        return None
    number = _to_decimal(value)
    if number is None:
        return str(value)
    rounded = _quantize(number, 3)
    if rounded is None:
        return str(value)
    text = f"{rounded:,.3f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_boolean(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return "No" if value.strip().lower() in FALSE_STRINGS else "Yes"
    return "Yes" if value else "No"


def _passthrough(value: Any) -> Any:
    return value


_FORMATTERS: Dict[FieldType, Callable[..., Any]] = {
    FieldType.TEXT: _passthrough,
    FieldType.SELECT: _passthrough,
    FieldType.REFERENCE: _passthrough,
    FieldType.NUMBER: format_number,
    FieldType.BOOLEAN: format_boolean,
}


def apply_formatting(
    value: Any,
    field_type: Optional[FieldType],
    *,
    currency: str = "USD",
    decimal_places: int = 2,
    today: Optional[date] = None,
) -> Any:
    """Format ``value`` according to ``field_type``; no type means no change."""
    if value is None or field_type is None:
        return value
    if field_type is FieldType.DATE:
        return format_date(value, today=today)
    if field_type is FieldType.CURRENCY:
        return format_currency(value, currency, decimal_places)
    formatter = _FORMATTERS.get(field_type)
    if formatter is None:
        logger.debug("No formatter for field type %s", field_type)
        return value
    return formatter(value)
