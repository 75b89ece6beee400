"""Decimal amount handling at the network's 7-decimal precision."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Union

from stellardex.errors import ValidationError

STROOP = Decimal("0.0000001")

# Amounts are int64 stroops on the ledger
MAX_AMOUNT = Decimal("922337203685.4775807")

AmountLike = Union[str, int, Decimal]


def to_decimal(value: AmountLike, field: str = "amount") -> Decimal:
    """Parse an amount, rejecting anything that is not a finite number."""
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid {field}: {value!r}") from e
    if not result.is_finite():
        raise ValidationError(f"Invalid {field}: {value!r}")
    return result


def format_amount(value: Decimal) -> str:
    """Plain (non-exponent) string form accepted by the SDK builders."""
    return format(value, "f")


def truncate(value: Decimal) -> Decimal:
    """Round toward zero to 7 decimal places."""
    return value.quantize(STROOP, rounding=ROUND_DOWN)


def min_amount_with_slippage(expected: AmountLike, slippage_percent: AmountLike) -> Decimal:
    """Minimum acceptable destination amount for a quoted path.

    ``floor(expected * (1 - slippage / 100))`` at 7 decimals.
    """
    expected_dec = to_decimal(expected, "destination amount")
    slippage = to_decimal(slippage_percent, "slippage")
    if slippage < 0 or slippage > 100:
        raise ValidationError(f"Slippage must be between 0 and 100 percent, got {slippage}")
    return truncate(expected_dec * (Decimal(1) - slippage / Decimal(100)))
