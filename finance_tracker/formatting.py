"""Formatting utilities for currency and date display."""

from __future__ import annotations

from datetime import date, datetime
from typing import Union

import pandas as pd

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'CNY': '¥',
    'INR': '₹',
    'KRW': '₩',
    'VND': '₫',
    'AUD': 'A$',
    'CAD': 'C$',
}

# Currencies that are displayed without minor units
ZERO_DECIMAL_CURRENCIES = {'JPY', 'KRW', 'VND'}


def format_currency(amount: Union[float, int], currency: str = 'USD') -> str:
    """Format a currency amount with thousands separators.

    Args:
        amount: The amount to format
        currency: ISO 4217 code; unknown codes are used as a prefix

    Returns:
        Formatted currency string

    Example:
        >>> format_currency(1234.56)
        '$1,234.56'
        >>> format_currency(-5, 'EUR')
        '-€5.00'
        >>> format_currency(250000, 'VND')
        '₫250,000'
        >>> format_currency(10, 'CHF')
        'CHF 10.00'
    """
    code = (currency or 'USD').upper()
    decimals = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    sign = '-' if amount < 0 else ''
    number = f"{abs(amount):,.{decimals}f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code} {number}"
    return f"{sign}{symbol}{number}"


def get_month_name(value: Union[str, date, datetime, pd.Timestamp]) -> str:
    """Full month name and year, e.g. ``'March 2024'``."""
    return pd.Timestamp(value).strftime('%B %Y')


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so markdown does not read them as LaTeX delimiters.

    Example:
        >>> escape_dollar_for_markdown('$1,234.56')
        '\\\\$1,234.56'
    """
    return text.replace("$", "\\$")
