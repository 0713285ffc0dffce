"""
Validation utilities for ChromaGen.

This module contains parameter validation helpers shared by the configuration
dataclasses and the public engine/learner entry points.
"""

import re
from typing import Any, Optional, Union

from ..core.exceptions import InvalidInputFormatError

HEX_PATTERN = re.compile(r"[0-9A-Fa-f]{6}")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_positive_integer(value: Any, param_name: str) -> int:
    """
    Validate that a parameter is a positive integer.

    Args:
        value: Value to validate
        param_name: Name of the parameter for error messages

    Returns:
        int: The validated integer value

    Raises:
        ValueError: If value is not a positive integer
    """
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"{param_name} must be a positive integer")
    return value


def validate_positive_number(value: Any, param_name: str) -> Union[int, float]:
    """
    Validate that a parameter is a positive number (int or float).

    Raises:
        ValueError: If value is not a positive number
    """
    if not _is_number(value) or value <= 0:
        raise ValueError(f"{param_name} must be positive")
    return value


def validate_non_negative_number(value: Any, param_name: str) -> Union[int, float]:
    """
    Validate that a parameter is a non-negative number (int or float).

    Raises:
        ValueError: If value is not a non-negative number
    """
    if not _is_number(value) or value < 0:
        raise ValueError(f"{param_name} cannot be negative")
    return value


def validate_range(
    value: Any, param_name: str, min_val: Union[int, float], max_val: Union[int, float]
) -> Union[int, float]:
    """
    Validate that a parameter is within a specified range.

    Args:
        value: Value to validate
        param_name: Name of the parameter for error messages
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive)

    Returns:
        Union[int, float]: The validated value

    Raises:
        ValueError: If value is not within the specified range
    """
    if not _is_number(value):
        raise ValueError(f"{param_name} must be a number")

    if not (min_val <= value <= max_val):
        raise ValueError(f"{param_name} must be between {min_val} and {max_val}")

    return value


def validate_optional_seed(value: Any, param_name: str) -> Optional[int]:
    """Validate a random seed, which is either None or a non-negative integer."""
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValueError(f"{param_name} must be None or a non-negative integer")
    return value


def normalize_hex_color(value: Any) -> str:
    """
    Validate a hex color string and return its six lower-case digits.

    Accepts ``#RRGGBB`` or ``RRGGBB`` in any case. Nothing else is accepted:
    three-digit shorthand, alpha channels and surrounding whitespace all fail.

    Args:
        value: Candidate hex color

    Returns:
        str: Six lower-case hex digits without the leading '#'

    Raises:
        InvalidInputFormatError: If value is not a valid hex color string
    """
    if not isinstance(value, str):
        raise InvalidInputFormatError(
            f"Invalid HEX format: {value!r}. Expected a string.", value
        )

    clean = value[1:] if value.startswith("#") else value
    if not HEX_PATTERN.fullmatch(clean):
        raise InvalidInputFormatError(
            f"Invalid HEX format: {value}. Expected 6 hex characters.", value
        )
    return clean.lower()
