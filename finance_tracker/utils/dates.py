"""Date, month-key and currency helpers shared by the engine and the UI."""

import calendar
from datetime import date, datetime
from typing import Optional, Union

INVALID_DATE = "Invalid date"

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}


def month_key(value: Union[date, str]) -> str:
    """YYYY-MM month key of a date or an ISO date string."""
    if isinstance(value, date):
        return value.strftime("%Y-%m")
    return value[:7]


def current_month(today: Optional[date] = None) -> str:
    return month_key(today or date.today())


def parse_month(month: str) -> tuple[int, int]:
    """Split a YYYY-MM key into (year, month), validating it."""
    parsed = datetime.strptime(month, "%Y-%m")
    return parsed.year, parsed.month


def days_in_month(month: str) -> list[date]:
    """Every calendar day of a YYYY-MM month."""
    year, month_number = parse_month(month)
    _, last_day = calendar.monthrange(year, month_number)
    return [date(year, month_number, day) for day in range(1, last_day + 1)]


def format_date(value: Union[date, str]) -> str:
    """'Jan 05, 2024' style, or 'Invalid date'."""
    try:
        if isinstance(value, str):
            value = date.fromisoformat(value[:10])
        return value.strftime("%b %d, %Y")
    except (TypeError, ValueError):
        return INVALID_DATE


def format_month_year(value: Union[date, str]) -> str:
    """'January 2024' from a YYYY-MM key, an ISO date or a date."""
    try:
        if isinstance(value, str):
            if len(value) == 7:
                value = datetime.strptime(value, "%Y-%m").date()
            else:
                value = date.fromisoformat(value[:10])
        return value.strftime("%B %Y")
    except (TypeError, ValueError):
        return INVALID_DATE


def format_currency(amount: float, currency: str = "USD") -> str:
    """'$1,234.50'; negative amounts as '-$12.00'."""
    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
