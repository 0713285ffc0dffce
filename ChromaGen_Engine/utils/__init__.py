"""
Utility components for ChromaGen.

Modules:
    validation: Input validation functions and hex color parsing
    math: Numeric helpers and duration formatting
"""

from .math import (
    clamp_value,
    format_time_duration,
    hue_distance,
    round_half_up,
    wrap_degrees,
)
from .validation import (
    normalize_hex_color,
    validate_non_negative_number,
    validate_optional_seed,
    validate_positive_integer,
    validate_positive_number,
    validate_range,
)

__all__ = [
    # Validation functions
    "normalize_hex_color",
    "validate_non_negative_number",
    "validate_optional_seed",
    "validate_positive_integer",
    "validate_positive_number",
    "validate_range",
    # Mathematical functions
    "clamp_value",
    "format_time_duration",
    "hue_distance",
    "round_half_up",
    "wrap_degrees",
]
