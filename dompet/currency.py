"""Display formatting for money amounts.

IDR is the home currency: "Rp 1.500.000", dot thousands, no decimals.
Foreign currencies keep two decimals with comma thousands, except JPY.
"""
import re
from typing import Any

from config import DEFAULT_CURRENCY
from dompet.errors import ValidationError


CURRENCY_SYMBOLS = {
    "IDR": "Rp",
    "USD": "$",
    "EUR": "€",
    "SGD": "S$",
    "MYR": "RM",
    "JPY": "¥",
}

ZERO_DECIMAL = ("IDR", "JPY")

_NUMERIC = re.compile(r"^-?\d+(\.\d+)?$")


def format_currency(amount: Any, currency: str = DEFAULT_CURRENCY) -> str:
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    currency = (currency or DEFAULT_CURRENCY).upper()
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    sign = "-" if value < 0 else ""

    if currency == "IDR":
        digits = "{:,.0f}".format(abs(value)).replace(",", ".")
        return f"{sign}{symbol} {digits}"
    if currency in ZERO_DECIMAL:
        return f"{sign}{symbol}{abs(value):,.0f}"
    return f"{sign}{symbol}{abs(value):,.2f}"


def parse_currency(text: Any, currency: str = DEFAULT_CURRENCY) -> float:
    """Turn user input like "Rp 1.500.000" or "1,500,000" back into a number"""
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    if not isinstance(text, str):
        raise ValidationError("Invalid currency format. Expected format: 1,000,000")

    currency = (currency or DEFAULT_CURRENCY).upper()
    cleaned = text.strip()
    for symbol in sorted(CURRENCY_SYMBOLS.values(), key=len, reverse=True):
        cleaned = cleaned.replace(symbol, "")
    cleaned = cleaned.replace(" ", "").replace(",", "")
    if currency in ZERO_DECIMAL:
        cleaned = cleaned.replace(".", "")

    if not _NUMERIC.match(cleaned):
        raise ValidationError("Invalid currency format. Expected format: 1,000,000")
    return float(cleaned)
