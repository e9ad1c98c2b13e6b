"""
Money value type: an exact amount of currency held as integer cents.

Every balance, limit and transaction amount in the ledger is an integer
number of minor units. Conversions from user input happen exactly once, in
validate_money(), and from then on the engine only adds and compares ints.

Rounding:
  Inputs with more than two fraction digits are rounded to the nearest
  cent with ties going away from zero (Decimal ROUND_HALF_UP), so
  10.005 becomes 10.01 and -10.005 becomes -10.01.

Floats:
  A float is converted through its shortest repr (str(0.1) == "0.1"), so
  binary noise such as 0.1 + 0.2 == 0.30000000000000004 rounds to 0.30
  instead of leaking into the ledger.

Upper bound:
  No single amount, limit or opening balance may exceed MAX_AMOUNT
  (100 billion currency units). Columns are 64-bit, so sums of many
  such amounts still fit.
"""

import decimal
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from marketing_ledger.exceptions import InvalidAmountError


CENT = Decimal("0.01")


@dataclass(frozen=True)
class Money:
    """An immutable amount of money in integer cents."""

    cents: int

    def to_decimal(self) -> Decimal:
        """Two-fraction-digit Decimal view, e.g. Money(1050) -> Decimal('10.50')."""
        return (Decimal(self.cents) / 100).quantize(CENT)

    def __str__(self) -> str:
        return str(self.to_decimal())


MAX_AMOUNT = Money(10**13)


def _to_decimal(value) -> Decimal:
    """Convert raw input to a finite Decimal or raise InvalidAmountError."""
    # bool is an int subclass; True must not silently become 1.00
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}")

    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except decimal.InvalidOperation:
            raise InvalidAmountError(f"Amount must be numeric, got {value!r}")
    else:
        raise InvalidAmountError(f"Amount must be numeric, got {value!r}")

    if not number.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    return number


def validate_money(value, *, positive: bool = True) -> Money:
    """
    Parse and validate an amount into Money.

    Args:
        value: int, float, Decimal, numeric str, or Money. Plain numbers
               are in currency units (12.5 means 12.50), not cents.
        positive: When True (the default, used for transaction amounts)
                  the rounded amount must be > 0. When False it must be
                  >= 0, which suits limits and opening balances.

    Returns:
        The amount as Money, rounded to whole cents.

    Raises:
        InvalidAmountError: Non-numeric, NaN/infinite, above MAX_AMOUNT,
                            or out-of-range input.
    """
    if isinstance(value, Money):
        cents = value.cents
    else:
        number = _to_decimal(value)
        try:
            rounded = number.quantize(CENT, rounding=ROUND_HALF_UP)
        except decimal.InvalidOperation:
            raise InvalidAmountError(f"Amount is out of range: {value!r}")
        cents = int(rounded * 100)

    if cents > MAX_AMOUNT.cents:
        raise InvalidAmountError(f"Amount must not exceed {MAX_AMOUNT}, got {value!r}")
    if positive and cents <= 0:
        raise InvalidAmountError(f"Amount must be greater than zero, got {value!r}")
    if not positive and cents < 0:
        raise InvalidAmountError(f"Amount must not be negative, got {value!r}")
    return Money(cents)
