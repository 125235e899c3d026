"""
Input validation helpers shared by the projection and budget plan engines.

Every caller-input problem raises ValidationError with a message naming the
offending field, e.g. "Invalid budget amount: expected finite number".
Values are never coerced from strings or booleans.
"""
from decimal import Decimal, InvalidOperation
from typing import Any


class ValidationError(ValueError):
    """Raised when an input record or argument is malformed."""

    def __init__(self, message: str, context: str = None):
        super().__init__(message)
        self.context = context


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def to_decimal(value: Any) -> Decimal:
    """Convert an int/float/Decimal to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value))


def ensure_finite_number(value: Any, context: str) -> Decimal:
    """Return value as a finite Decimal or raise ValidationError."""
    if not _is_number(value):
        raise ValidationError(f"Invalid {context}: expected finite number", context)

    try:
        number = to_decimal(value)
    except InvalidOperation:
        raise ValidationError(f"Invalid {context}: expected finite number", context)

    if not number.is_finite():
        raise ValidationError(f"Invalid {context}: expected finite number", context)

    return number


def ensure_integer(value: Any, context: str) -> int:
    """Return value as an int or raise ValidationError (2.0 is accepted)."""
    if not _is_number(value):
        raise ValidationError(f"Invalid {context}: expected integer", context)

    if isinstance(value, int):
        return value

    number = to_decimal(value)
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"Invalid {context}: expected integer", context)

    return int(number)


def normalize_zero(value: Decimal) -> Decimal:
    """Replace negative zero with zero."""
    if value.is_zero():
        return Decimal("0")
    return value
