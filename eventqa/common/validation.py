"""
Input checks shared by the services.

Request bodies are arbitrary JSON, so a field that should be text may arrive
as a number, list or object. Those are rejected here with a ValidationError
before anything reaches the database.
"""

from typing import Any, Optional

from eventqa.common.errors import ValidationError

# Upper bound of a PostgreSQL INTEGER column
MAX_INT = 2147483647


def clean_text(
    value: Any,
    label: str,
    max_length: Optional[int] = None,
    missing_message: str = "All fields are required.",
    strip: bool = True,
) -> str:
    """
    Validate a required text field.

    Args:
        value: Raw value from the request body.
        label (str): Field name used in error messages.
        max_length (int, optional): Column length limit.
        missing_message (str): Error for a missing or blank value.
        strip (bool): Return the value without surrounding whitespace.

    Returns:
        str: The (optionally stripped) value.

    Raises:
        ValidationError: Missing, blank, not a string, or too long.
    """
    if value is None or value == "":
        raise ValidationError(missing_message)
    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string.")
    if not value.strip():
        raise ValidationError(missing_message)

    if strip:
        value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{label} must be {max_length} characters or less.")
    return value


def parse_positive_int(val: Any) -> Optional[int]:
    """
    Coerce an int-like value to a positive int that fits an INTEGER column.

    Returns:
        int: The parsed value, or None if invalid or out of range.
    """
    if isinstance(val, bool):
        return None
    try:
        number = int(val)
    except (ValueError, TypeError):
        return None
    if isinstance(val, float) and number != val:
        return None
    return number if 0 < number <= MAX_INT else None
