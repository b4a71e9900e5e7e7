"""Utility helpers."""

from finance_tracker.utils.dates import (
    current_month,
    days_in_month,
    format_currency,
    format_date,
    format_month_year,
    month_key,
    parse_month,
)

__all__ = [
    "current_month",
    "days_in_month",
    "format_currency",
    "format_date",
    "format_month_year",
    "month_key",
    "parse_month",
]
