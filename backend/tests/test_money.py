# backend/tests/test_money.py
from decimal import Decimal

import pytest

from tippool.domain.money import (
    Money,
    MoneyError,
    cents_to_dollars,
    cents_to_str,
    coerce_amount,
    coerce_hours,
    decimal_to_cents,
    safe_sum_cents,
)


def test_coerce_amount_accepts_numbers_and_numeric_strings():
    assert coerce_amount(12) == Decimal("12")
    assert coerce_amount(33.33) == Decimal("33.33")
    assert coerce_amount("12.50") == Decimal("12.50")
    assert coerce_amount("  7 ") == Decimal("7")
    assert coerce_amount(Decimal("1.005")) == Decimal("1.005")


def test_coerce_amount_degrades_bad_values_to_zero():
    for bad in [None, "", "   ", "abc", "12..3", float("nan"), float("inf"), "-5", -0.01, True, [], {}]:
        assert coerce_amount(bad) == Decimal(0), bad


def test_coerce_amount_avoids_float_noise():
    # 0.1 + 0.2 is 0.30000000000000004 as floats
    assert coerce_amount(0.1) + coerce_amount(0.2) == Decimal("0.3")


def test_coerce_hours_distinguishes_blank_from_zero():
    assert coerce_hours(None) is None
    assert coerce_hours("") is None
    assert coerce_hours("  ") is None
    assert coerce_hours(0) == Decimal(0)
    assert coerce_hours("abc") == Decimal(0)
    assert coerce_hours(-3) == Decimal(0)
    assert coerce_hours("7.5") == Decimal("7.5")


def test_decimal_to_cents_rounds_half_up():
    assert decimal_to_cents("12.34") == 1234
    assert decimal_to_cents("12.345") == 1235
    assert decimal_to_cents("12.344") == 1234
    assert decimal_to_cents(Decimal("0.005")) == 1
    assert decimal_to_cents(100) == 10000


def test_decimal_to_cents_rejects_invalid_values():
    for bad in ["abc", "", "NaN", "Infinity", "1e999999"]:
        with pytest.raises(MoneyError):
            decimal_to_cents(bad)


def test_decimal_to_cents_safety_limit_can_be_disabled():
    with pytest.raises(MoneyError):
        decimal_to_cents("100000000.01")
    assert decimal_to_cents("100000000.01", max_abs_cents=None) == 10_000_000_001


def test_cents_to_dollars_has_two_places():
    assert cents_to_dollars(1234) == Decimal("12.34")
    assert str(cents_to_dollars(5000)) == "50.00"
    assert str(cents_to_dollars(0)) == "0.00"
    with pytest.raises(MoneyError):
        cents_to_dollars(12.5)  # type: ignore[arg-type]


def test_cents_to_str_and_money_format():
    assert cents_to_str(1234) == "$12.34"
    assert cents_to_str(5) == "$0.05"
    assert Money(cents=-250).format() == "-$2.50"
    assert Money(cents=99).dollars == Decimal("0.99")


def test_safe_sum_cents_rejects_floats():
    assert safe_sum_cents(1, 2, 3) == 6
    with pytest.raises(MoneyError):
        safe_sum_cents(1, 2.0)  # type: ignore[arg-type]


def test_out_of_range_exponents_degrade_to_zero():
    assert coerce_amount("1e999999") == Decimal(0)
    assert coerce_amount("1e-999999") == Decimal(0)
    assert coerce_amount(Decimal("1e13")) == Decimal(0)
    assert coerce_amount("999999999999.99") == Decimal("999999999999.99")
    assert coerce_hours("9e999999") == Decimal(0)
    assert coerce_hours("0.5") == Decimal("0.5")
