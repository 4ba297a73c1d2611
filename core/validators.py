"""
Core Validators

Shared validation functions for inbound request parameters.
"""

from typing import Any


def validate_required_field(value: Any, field_name: str) -> None:
    """
    Validate that a required field is present.

    Any falsy value (None, "", 0, empty container) counts as missing.

    Args:
        value: Value to validate
        field_name: Name of the field for error messages

    Raises:
        ValueError: If value is missing
    """
    if not value:
        raise ValueError(f"Missing '{field_name}' parameter")


def validate_text_length(text: Any, max_chars: int) -> None:
    """
    Validate that text length doesn't exceed maximum.

    Non-string values are not length-checked.

    Args:
        text: Text to validate
        max_chars: Maximum allowed characters

    Raises:
        ValueError: If text length exceeds maximum
    """
    if isinstance(text, str) and len(text) > max_chars:
        raise ValueError(f"Text too long (max {max_chars} chars)")
