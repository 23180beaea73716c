"""
Input validation for record fields.

Raises historian.errors.ValidationError with a message fit for showing in the
entry form; nothing is persisted when validation fails.
"""

from __future__ import annotations

import re

from historian.config import YEAR_MAX, YEAR_MIN
from historian.errors import ValidationError

# 1-4 digits, nothing else (no sign, no decimal point)
YEAR_PATTERN = re.compile(r"^[0-9]{1,4}$")

TIMELINE_REQUIRED = ("year", "title", "description")
LEARNING_REQUIRED = ("title", "year_range", "facts")

_LABELS = {
    "year": "Year",
    "title": "Title",
    "description": "Description",
    "year_range": "Year Range",
    "facts": "Facts",
}


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(fields: dict[str, object], required: tuple[str, ...]) -> None:
    """
    Check that every required field is present and non-blank.

    Raises:
        ValidationError: Naming all required fields, as the form dialog does
    """
    missing = [name for name in required if _is_blank(fields.get(name))]
    if missing:
        labels = ", ".join(_LABELS.get(name, name) for name in required)
        raise ValidationError(f"Please fill in all required fields ({labels}).")


def reject_blank_changes(changes: dict[str, object]) -> None:
    """Fields supplied on update may not be emptied."""
    blank = [name for name, value in changes.items() if _is_blank(value)]
    if blank:
        raise ValidationError(f"{_LABELS.get(blank[0], blank[0])} cannot be empty.")


def validate_year(value: str | int) -> int:
    """
    Parse a year typed as 1-4 digits into an int in [1, 9999].

    Raises:
        ValidationError: If the value is not such a string/integer
    """
    if isinstance(value, bool):
        raise ValidationError("Please enter a valid year between 1 and 9999.")

    text = str(value).strip()
    if not YEAR_PATTERN.match(text):
        raise ValidationError("Please enter a valid year between 1 and 9999.")

    year = int(text)
    if year < YEAR_MIN or year > YEAR_MAX:
        raise ValidationError("Please enter a valid year between 1 and 9999.")
    return year
