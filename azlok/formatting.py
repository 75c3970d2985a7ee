# azlok/formatting.py
"""
Display formatting for dates, money and sizes.
"""
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from .config import settings

Number = Union[int, float, Decimal]

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

FILE_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_currency(amount: Optional[Number], currency: Optional[str] = None) -> str:
    if amount is None:
        return "-"
    currency = (currency or settings.DEFAULT_CURRENCY).upper()
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    if currency == "INR":
        whole = _group_indian(whole)
    else:
        whole = f"{int(whole):,}"
    symbol = CURRENCY_SYMBOLS.get(currency, currency + " ")
    return f"{sign}{symbol}{whole}.{frac}"


def format_number(num: Optional[Number]) -> str:
    if num is None:
        return "-"
    if isinstance(num, int) or float(num).is_integer():
        return f"{int(num):,}"
    return f"{float(num):,.3f}".rstrip("0").rstrip(".")


def format_date(value: Optional[Union[date, datetime, str]]) -> str:
    """e.g. 'Oct 17, 2026'; '-' for missing values"""
    if not value:
        return "-"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_file_size(num_bytes: int, decimals: int = 2) -> str:
    if num_bytes == 0:
        return "0 Bytes"
    decimals = max(decimals, 0)
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(FILE_SIZE_UNITS) - 1)
    size = round(num_bytes / math.pow(1024, i), decimals)
    return f"{size:g} {FILE_SIZE_UNITS[i]}"


def format_tax_percentage(percentage: Number) -> str:
    return f"{float(percentage):.2f}%"
