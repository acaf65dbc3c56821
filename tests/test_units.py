from decimal import Decimal

import pytest

from token_deployer.helpers.units import format_ether, format_units, parse_amount, parse_units


@pytest.mark.parametrize("amount,decimals,expected", [
    ("0.1", 18, 100000000000000000),
    ("1000000", 18, 10**24),
    ("5000000.5", 6, 5000000500000),
    ("7", 0, 7),
    ("0", 18, 0),
    (" 12.340 ", 3, 12340),
    ("1e3", 2, 100000),
    (42, 2, 4200),
    (Decimal("0.000001"), 6, 1),
    ("1.000000000000000000000000000000", 6, 1000000),
    ("1E+2", 0, 100),
])
def test_parse_units(amount, decimals, expected):
    assert parse_units(amount, decimals) == expected


@pytest.mark.parametrize("amount,decimals", [
    ("0.1234567", 6),
    ("1.5", 0),
    ("-1", 18),
    ("abc", 18),
    ("", 18),
    ("NaN", 18),
    ("Infinity", 18),
])
def test_parse_units_rejects_invalid_amounts(amount, decimals):
    with pytest.raises(ValueError):
        parse_units(amount, decimals)


def test_parse_units_rejects_floats_and_bools():
    with pytest.raises(ValueError):
        parse_units(0.1, 18)
    with pytest.raises(ValueError):
        parse_units(True, 18)


def test_format_units():
    assert format_units(10**21, 18) == "1000.0"
    assert format_units(250000000000000000, 18) == "0.25"
    assert format_units(1, 18) == "0.000000000000000001"
    assert format_units(5000000500000, 6) == "5000000.5"
    assert format_units(7, 0) == "7.0"
    assert format_units(0, 6) == "0.0"


def test_format_ether():
    assert format_ether(2 * 10**18) == "2.0"
    assert format_ether(1234500000000000000) == "1.2345"


@pytest.mark.parametrize("amount,decimals,expected", [
    ("1234567890123.123456789012345678", 18, 1234567890123123456789012345678),
    ("123456789012345678901234567890", 0, 123456789012345678901234567890),
    ("99999999999999999999999999999.999999", 6, 10**35 - 1),
])
def test_parse_units_is_exact_beyond_default_decimal_precision(amount, decimals, expected):
    assert parse_units(amount, decimals) == expected


def test_parse_units_rejects_long_fraction_beyond_default_precision():
    with pytest.raises(ValueError, match="fractional digits"):
        parse_units("1234567890123.1234567890123456789", 18)


def test_parse_amount_checks_syntax_only():
    assert parse_amount(" 2.50 ") == Decimal("2.50")
    assert parse_amount("0.0000000000000000000001") == Decimal("1E-22")
    for bad in ("abc", "-1", "NaN", 1.5):
        with pytest.raises(ValueError):
            parse_amount(bad)
