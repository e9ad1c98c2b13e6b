"""
Tests for the Money value type and validate_money().

These tests verify:
  - Accepted inputs (int, str, Decimal, float, Money) convert to exact cents
  - Rounding is half away from zero
  - Non-numeric, non-finite and non-positive amounts are rejected
  - positive=False allows zero but still rejects negatives
  - Nothing above MAX_AMOUNT is accepted
"""

from decimal import Decimal

import pytest

from marketing_ledger.exceptions import InvalidAmountError
from marketing_ledger.money import MAX_AMOUNT, Money, validate_money


class TestValidateMoney:

    @pytest.mark.parametrize(
        "value, cents",
        [
            (30, 3000),
            ("30.00", 3000),
            ("  12.5 ", 1250),
            (Decimal("0.01"), 1),
            (0.1 + 0.2, 30),
            (Money(4200), 4200),
        ],
    )
    def test_accepted_inputs(self, value, cents):
        assert validate_money(value).cents == cents

    def test_rounds_half_away_from_zero(self):
        assert validate_money("10.005").cents == 1001
        assert validate_money("10.004").cents == 1000
        assert validate_money(Decimal("0.015")).cents == 2

    def test_rejects_negative(self):
        with pytest.raises(InvalidAmountError):
            validate_money("-10.005")

    @pytest.mark.parametrize("value", ["abc", "", None, [], True, "1e"])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(InvalidAmountError):
            validate_money(value)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "NaN", "-Infinity"])
    def test_rejects_non_finite(self, value):
        with pytest.raises(InvalidAmountError):
            validate_money(value)

    @pytest.mark.parametrize("value", [0, "0.00", -5, "0.004"])
    def test_rejects_non_positive(self, value):
        with pytest.raises(InvalidAmountError):
            validate_money(value)

    def test_maximum_amount(self):
        assert validate_money("100000000000").cents == MAX_AMOUNT.cents
        assert validate_money("100000000000", positive=False) == MAX_AMOUNT

    @pytest.mark.parametrize("value", ["100000000000.01", 10**17, MAX_AMOUNT.cents + 1])
    def test_rejects_above_maximum(self, value):
        with pytest.raises(InvalidAmountError):
            validate_money(value)

    def test_rejects_money_above_maximum(self):
        with pytest.raises(InvalidAmountError):
            validate_money(Money(MAX_AMOUNT.cents + 1))

    def test_zero_allowed_when_not_positive(self):
        assert validate_money(0, positive=False) == Money(0)
        with pytest.raises(InvalidAmountError):
            validate_money("-0.01", positive=False)


class TestMoney:

    def test_decimal_and_str(self):
        assert Money(1050).to_decimal() == Decimal("10.50")
        assert str(Money(5)) == "0.05"
        assert str(Money(0)) == "0.00"
