# backend/tippool/domain/money.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

ZERO = Decimal(0)
CENT = Decimal("0.01")

# amounts and hours beyond these exponents are treated as garbage
MAX_EXPONENT = 12
MIN_EXPONENT = -12


class MoneyError(ValueError):
    """Raised when currency/money conversion or formatting fails."""


@dataclass(frozen=True)
class Money:
    """
    Simple money value object using integer cents (USD only).
    No floats anywhere.
    """
    cents: int
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.cents, int) or isinstance(self.cents, bool):
            raise MoneyError("Money.cents must be an int")
        if not isinstance(self.currency, str) or not self.currency.strip():
            raise MoneyError("Money.currency must be a non-empty string")

    @property
    def dollars(self) -> Decimal:
        return cents_to_dollars(self.cents)

    def format(self, symbol: str = "$") -> str:
        """
        Format cents as a string like "$12.34".
        """
        sign = "-" if self.cents < 0 else ""
        abs_cents = abs(self.cents)
        dollars = abs_cents // 100
        cents = abs_cents % 100
        return f"{sign}{symbol}{dollars}.{cents:02d}"


def _to_decimal(value: Any) -> Optional[Decimal]:
    # bool is an int subclass; a checkbox value is not an amount
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, (int, float)):
        d = Decimal(str(value))
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return None
        try:
            d = Decimal(s)
        except InvalidOperation:
            return None
    else:
        return None

    if not d.is_finite():
        return None
    if d and not MIN_EXPONENT <= d.adjusted() <= MAX_EXPONENT:
        return None
    return d


def coerce_amount(value: Any) -> Decimal:
    """
    Coerce an untyped tip amount to a non-negative Decimal.

    Blank, missing, non-numeric, NaN/infinite, negative and absurdly large or
    small values all become 0.
    Never raises.

    Examples:
      "12.50" -> Decimal("12.50")
      33.33   -> Decimal("33.33")
      ""      -> Decimal("0")
      "abc"   -> Decimal("0")
      -5      -> Decimal("0")
    """
    d = _to_decimal(value)
    if d is None or d < 0:
        return ZERO
    return d


def coerce_hours(value: Any) -> Optional[Decimal]:
    """
    Coerce an hours value.

    None and blank strings mean "not entered yet" and return None. Anything
    else that is not a usable non-negative number returns 0, which keeps the
    employee out of the proportional split.
    """
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    d = _to_decimal(value)
    if d is None or d < 0:
        return ZERO
    return d


def decimal_to_cents(
    value: str | int | float | Decimal,
    *,
    rounding=ROUND_HALF_UP,
    max_abs_cents: Optional[int] = 10_000_000_00,
) -> int:
    """
    Convert a decimal-like value to cents with explicit rounding.

    Pass max_abs_cents=None to disable the safety bound.

    Examples:
      "12.34" -> 1234
      "12.345" -> 1235 (half-up)
    """
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise MoneyError(f"invalid decimal value: {value}") from e

    if not d.is_finite():
        raise MoneyError(f"invalid decimal value: {value}")

    try:
        cents = int((d * 100).to_integral_value(rounding=rounding))
    except ArithmeticError as e:
        raise MoneyError(f"invalid decimal value: {value}") from e

    if max_abs_cents is not None and abs(cents) > max_abs_cents:
        raise MoneyError("amount exceeds safety limit")

    return cents


def cents_to_dollars(cents: int) -> Decimal:
    """
    Convert integer cents to a two-place Decimal dollar amount.
    """
    if not isinstance(cents, int) or isinstance(cents, bool):
        raise MoneyError("cents must be an int")
    return (Decimal(cents) / Decimal(100)).quantize(CENT)


def cents_to_str(cents: int, *, symbol: str = "$") -> str:
    """
    Convert integer cents to a display string like "$12.34".
    """
    if not isinstance(cents, int):
        raise MoneyError("cents must be an int")
    return Money(cents=cents).format(symbol=symbol)


def safe_sum_cents(*values: int) -> int:
    """
    Sum cents with type checks (no floats).
    """
    total = 0
    for v in values:
        if not isinstance(v, int):
            raise MoneyError("all values must be int cents")
        total += v
    return total
