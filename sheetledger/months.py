"""
Month-key utilities.

A month key is the integer ``year * 12 + (month - 1)``. All month ordering,
range iteration and equality in the engines goes through month keys, so
year boundaries need no special handling.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Tuple, Union

from sheetledger.validation import ValidationError

ISO_MONTH_PATTERN = re.compile(r"^([0-9]{4})-([0-9]{2})(?:-([0-9]{2}))?$")


@dataclass(frozen=True)
class ParsedMonth:
    """A date value reduced to its month, plus a UTC instant for recency checks."""
    month: int
    year: int
    month_key: int
    timestamp: datetime


def create_month_key(year: int, month: int) -> int:
    return year * 12 + (month - 1)


def month_key_to_parts(month_key: int) -> Tuple[int, int]:
    """Inverse of create_month_key, returns (year, month)."""
    year, month_index = divmod(month_key, 12)
    return year, month_index + 1


def month_key_from_date(value: date) -> int:
    return create_month_key(value.year, value.month)


def format_month_id(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def parse_date_to_month_parts(value: Union[str, date, None], context: str) -> ParsedMonth:
    """
    Parse a ``YYYY-MM`` or ``YYYY-MM-DD`` value into month parts.

    Args:
        value: Date string, or a date/datetime instance
        context: Description of the field, used in error messages

    Returns:
        ParsedMonth with month, year, month key and UTC timestamp

    Raises:
        ValidationError: If the value is missing or malformed
    """
    if isinstance(value, date):
        value = f"{value.year:04d}-{value.month:02d}-{value.day:02d}"

    if not value:
        raise ValidationError(f"Invalid {context}: missing date value", context)

    if not isinstance(value, str):
        raise ValidationError(f"Invalid {context}: expected YYYY-MM or YYYY-MM-DD", context)

    match = ISO_MONTH_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(f"Invalid {context}: expected YYYY-MM or YYYY-MM-DD", context)

    year = int(match.group(1))
    if year < 1:
        raise ValidationError(f"Invalid {context}: year must be a positive integer", context)

    month = int(match.group(2))
    day = int(match.group(3)) if match.group(3) else 1

    if month < 1 or month > 12:
        raise ValidationError(f"Invalid {context}: month must be between 1 and 12", context)

    if day < 1 or day > 31:
        raise ValidationError(f"Invalid {context}: day must be between 1 and 31", context)

    # Days past the end of the month roll into the next month (2025-02-31 -> 2025-03-03)
    timestamp = datetime(year, month, 1, tzinfo=timezone.utc) + timedelta(days=day - 1)

    return ParsedMonth(
        month=month,
        year=year,
        month_key=create_month_key(year, month),
        timestamp=timestamp,
    )
