"""Display formatting for MRR, percentages and reason tags.

Values are stored as plain numbers; formatting happens only here, at the
presentation boundary.
"""
from collections.abc import Sequence

from churnwatch.config import settings
from churnwatch.schemas.customer import UNKNOWN
from churnwatch.services.normalizer import safe_number

# Currency symbols for the currencies the dashboard is deployed with
currency_symbols = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "MXN": "MX$",
}

# Currencies grouped with "." and decimals with "," (pt-BR / es / de style)
comma_decimal_currencies = ["BRL", "EUR"]


def _group_thousands(whole: int, separator: str) -> str:
    return f"{whole:,}".replace(",", separator)


def format_currency(value: object, currency: str | None = None) -> str:
    """
    Format a revenue amount in whole currency units, without decimals.

    Args:
        value: Amount (anything non-numeric formats as zero)
        currency: ISO 4217 currency code (defaults to settings.display_currency)

    Returns:
        Formatted string with currency symbol

    Examples:
        >>> format_currency(1234567.4, "BRL")
        'R$ 1.234.567'
        >>> format_currency(-2500, "USD")
        '-$ 2,500'
    """
    currency_upper = (currency or settings.display_currency).upper()
    symbol = currency_symbols.get(currency_upper, currency_upper)
    separator = "." if currency_upper in comma_decimal_currencies else ","

    amount = round(safe_number(value))
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol} {_group_thousands(abs(amount), separator)}"


def format_percent(value: object, digits: int = 1) -> str:
    """
    Format a percentage with a fixed number of decimals.

    Examples:
        >>> format_percent(12.345)
        '12.3%'
        >>> format_percent(None)
        '0.0%'
    """
    return f"{safe_number(value):.{digits}f}%"


def format_reasons(reasons: Sequence[str]) -> str:
    """Join reason tags for a table cell, or the UNKNOWN placeholder when empty."""
    return ", ".join(reasons) if reasons else UNKNOWN
