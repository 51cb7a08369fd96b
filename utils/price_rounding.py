"""
Price rounding for guest blog site base prices.

Rule:
- Decimal part <= 0.50: round down
- Decimal part  > 0.50: round up

    123.40 -> 123
    123.50 -> 123
    123.51 -> 124
    123.99 -> 124

Note the boundary: exactly .50 rounds DOWN, unlike ROUND_HALF_UP.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

HALF = Decimal("0.50")


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Convert numbers and numeric strings to Decimal, None if not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            # str() keeps 123.51 from becoming 123.5099999...
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return None
    if not number.is_finite():
        return None
    return number


def auto_round_price(price: Any) -> int:
    """
    Round a price to a whole number.

    Args:
        price: int, float, Decimal or numeric string

    Returns:
        Non-negative integer (0 for non-numeric or negative input)
    """
    number = _to_decimal(price)
    if number is None or number < 0:
        return 0

    whole = int(number)  # truncation == floor for non-negative values
    fraction = number - whole

    if fraction <= HALF:
        return whole
    return whole + 1
