from decimal import Decimal

import pytest

from fxportal.services.money import amount_step, format_amount, quantize, to_decimal


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("12.50", Decimal("12.50")),
        (" 7 ", Decimal("7")),
        (3, Decimal("3")),
        (None, None),
        ("abc", None),
        ("NaN", None),
        ("Infinity", None),
        (True, None),
    ],
)
def test_to_decimal(raw, expected):
    assert to_decimal(raw) == expected


def test_quantize_rounds_half_up():
    assert quantize(Decimal("2.345"), 2) == Decimal("2.35")
    assert quantize(Decimal("2.5"), 0) == Decimal("3")


@pytest.mark.parametrize(
    "value,decimals,expected",
    [
        ("1234567.891", 2, "1,234,567.89"),
        ("1500", 0, "1,500"),
        ("0.5", 3, "0.500"),
        ("", 2, None),
        (None, 2, None),
    ],
)
def test_format_amount(value, decimals, expected):
    assert format_amount(value, decimals) == expected


def test_amount_step():
    assert amount_step(None) == Decimal("0.01")
    assert amount_step(0) == Decimal(1)
    assert amount_step(2) == Decimal("0.01")
    assert amount_step(3) == Decimal("0.001")
