"""Unit tests for display formatting."""
from churnwatch.schemas.customer import UNKNOWN
from churnwatch.utils.currency import format_currency, format_percent, format_reasons


def test_format_currency_brl_grouping() -> None:
    assert format_currency(1234567.4, "BRL") == "R$ 1.234.567"
    assert format_currency(0, "BRL") == "R$ 0"


def test_format_currency_negative_and_other_currency() -> None:
    assert format_currency(-2500, "USD") == "-$ 2,500"
    assert format_currency(990, "xyz") == "XYZ 990"


def test_format_currency_non_numeric_is_zero() -> None:
    assert format_currency(None, "BRL") == "R$ 0"
    assert format_currency("abc", "BRL") == "R$ 0"


def test_format_percent() -> None:
    assert format_percent(12.345) == "12.3%"
    assert format_percent(None) == "0.0%"
    assert format_percent(7, digits=0) == "7%"


def test_format_reasons() -> None:
    assert format_reasons(["preço", "suporte"]) == "preço, suporte"
    assert format_reasons([]) == UNKNOWN
