from datetime import date
from decimal import Decimal, ROUND_HALF_UP

MONTH_ABBR = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _group_indian(digits: str) -> str:
    # last three digits, then pairs: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount) -> str:
    """Rupees with Indian digit grouping, e.g. 123456.5 -> '₹1,23,456.50'"""
    value = Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")
    return f"{sign}₹{_group_indian(whole)}.{fraction}"


def format_date(value) -> str:
    """'15 Apr 2024'"""
    if not value:
        return "N/A"
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.day:02d} {MONTH_ABBR[value.month - 1]} {value.year}"


def format_date_short(value: date) -> str:
    """'15/4/2024'"""
    return f"{value.day}/{value.month}/{value.year}"
