"""
Price conversion between major currency units and integer cents.

Prices arrive as decimal strings or numbers in major units ("12.5") and are
stored as integer minor units (1250). Decimal arithmetic avoids float
rounding surprises such as 0.29 * 100 == 28.999999999999996.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

Amount = Union[str, int, float, Decimal]

_CENTS = Decimal(100)

# Largest price the 32-bit price_cents column holds
MAX_CENTS = 2_147_483_647
_MAX_AMOUNT = Decimal(MAX_CENTS) / _CENTS


def parse_amount(value: Optional[Amount]) -> Optional[Decimal]:
    """
    Parse a major-unit amount.

    Returns:
        A finite Decimal, or None when the value is absent, blank,
        non-numeric or not finite.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            amount = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not amount.is_finite():
        return None
    return amount


def to_cents(value: Optional[Amount]) -> Optional[int]:
    """
    Convert a non-negative major-unit amount to integer cents.

    Rounds half up: "12.5" -> 1250, "0.005" -> 1.

    Returns:
        Cents, or None when the value is missing, unparseable, negative or
        above ``MAX_CENTS``.
    """
    amount = parse_amount(value)
    if amount is None or amount < 0:
        return None
    # Checked before quantizing, which fails past the context precision
    if amount > _MAX_AMOUNT:
        return None
    return int((amount * _CENTS).quantize(Decimal(1), rounding=ROUND_HALF_UP))
