"""
Mathematical utility functions for ChromaGen.

This module contains small numeric helpers and formatting functions.
"""

import math


def clamp_value(value: float, min_val: float, max_val: float) -> float:
    """Clamp value into the closed interval [min_val, max_val]."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded towards +infinity.

    Python's built-in round() uses banker's rounding, which would map
    127.5 and 128.5 to the same channel value.
    """
    return int(math.floor(value + 0.5))


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    wrapped = angle % 360.0
    # -1e-17 % 360 == 360.0 in floating point
    return 0.0 if wrapped >= 360.0 else wrapped


def hue_distance(h1: float, h2: float) -> float:
    """Shortest angular distance between two hues in degrees."""
    diff = abs(h1 - h2)
    return min(diff, 360.0 - diff)


def format_time_duration(seconds: float) -> str:
    """
    Format time duration in human-readable format.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted time string (e.g., "45.2 seconds" or "1 minute 8 seconds")

    Raises:
        ValueError: If seconds is negative
    """
    if seconds < 0:
        raise ValueError("Duration cannot be negative")

    if seconds < 60.0:
        return f"{seconds:.1f} seconds"

    total_seconds = round(seconds)
    minutes = total_seconds // 60
    remaining_seconds = total_seconds % 60

    minute_label = "1 minute" if minutes == 1 else f"{minutes} minutes"
    if remaining_seconds == 0:
        return minute_label
    return f"{minute_label} {remaining_seconds} seconds"
