"""
Input validation shared by the physiology calculators.

The calculators are pure functions. They either return a value or reject the
input with InvalidInput; routers translate that into an HTTP 422.
"""
import math
from typing import Any, Optional


class InvalidInput(ValueError):
    """A calculator parameter is missing, non-numeric or out of its plausible range."""

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.field = field


def require_number(value: Any, field: str) -> float:
    """Return value as float, rejecting booleans, None, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidInput(f"{field} must be a number", field=field)
    number = float(value)
    if not math.isfinite(number):
        raise InvalidInput(f"{field} must be finite", field=field)
    return number


def require_range(
    value: Any,
    field: str,
    minimum: float,
    maximum: float,
    min_inclusive: bool = True,
) -> float:
    """
    Validate that value lies within [minimum, maximum].

    Set min_inclusive=False for quantities that must be strictly positive.
    """
    number = require_number(value, field)
    below = number < minimum if min_inclusive else number <= minimum
    if below or number > maximum:
        lower = "[" if min_inclusive else "("
        raise InvalidInput(
            f"{field} must be in {lower}{minimum:g}, {maximum:g}], got {number:g}",
            field=field,
        )
    return number
