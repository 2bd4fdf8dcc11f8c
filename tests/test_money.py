from decimal import Decimal

import pytest

from storefront.utils.money import format_price, parse_price, to_major_units, to_minor_units


def test_to_minor_units_uses_exact_decimal_arithmetic():
    assert to_minor_units(Decimal("1299.99")) == 129999
    assert to_minor_units(1299.99) == 129999
    assert to_minor_units("0.10") == 10
    assert to_minor_units(5) == 500


@pytest.mark.parametrize(
    "major, minor",
    [
        (Decimal("0.005"), 1),
        (Decimal("-0.005"), -1),
        (Decimal("2.675"), 268),
        (Decimal("0.004"), 0),
        (2.675, 268),
    ],
)
def test_half_rounds_away_from_zero(major, minor):
    assert to_minor_units(major) == minor


@pytest.mark.parametrize("value", ["0.01", "1.00", "79.99", "1299.99", "999999999.99"])
def test_decimal_prices_survive_the_kobo_round_trip(value):
    assert to_major_units(to_minor_units(Decimal(value))) == Decimal(value)


def test_to_major_units_is_exact():
    assert to_major_units(199998) == Decimal("1999.98")
    assert to_major_units(0) == Decimal("0.00")
    assert to_major_units(5) == Decimal("0.05")


def test_format_price():
    assert format_price(129999) == "₦1,299.99"
    assert format_price(129999, show_currency=True) == "₦1,299.99 NGN"
    assert format_price(129999, show_symbol=False) == "1,299.99"
    assert format_price(129999, show_symbol=False, decimals=0) == "1,300"


@pytest.mark.parametrize(
    "minor, decimals, text",
    [
        (125, 1, "1.3"),
        (250, 0, "3"),
        (350, 0, "4"),
        (-125, 1, "-1.3"),
    ],
)
def test_format_price_rounds_half_up(minor, decimals, text):
    assert format_price(minor, show_symbol=False, decimals=decimals) == text


@pytest.mark.parametrize(
    "text, minor",
    [
        ("₦1,299.99", 129999),
        ("1299.99", 129999),
        ("NGN 50", 5000),
        ("ngn 50", 5000),
        (" ₦ 1,000 NGN ", 100000),
    ],
)
def test_parse_price(text, minor):
    assert parse_price(text) == minor


@pytest.mark.parametrize("text", ["", "abc", "-5", "1.2.3", "NaN", "₦", "1_000", "1e3", "Infinity", "0x10"])
def test_parse_price_rejects_garbage(text):
    with pytest.raises(ValueError, match="Invalid price format"):
        parse_price(text)
