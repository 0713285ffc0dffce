"""
Color feature extraction for the preference model.

A color maps to six features in roughly [0, 1]: normalized LAB
(L / 100, (a + 128) / 255, (b + 128) / 255) followed by HSV (h / 360, s, v).
"""

from dataclasses import astuple, dataclass
from typing import Optional

import numpy as np

from ..color.conversion import ColorSpaceConverter, rgb_to_lab
from ..core.types import RGBColor
from .tensor import Vector

FEATURE_NAMES = ("L", "a", "b", "h", "s", "v")


@dataclass(frozen=True)
class ColorFeatures:
    L: float
    a: float
    b: float
    h: float
    s: float
    v: float

    def to_vector(self) -> Vector:
        return np.array(astuple(self), dtype=np.float64)


def extract_features(hex_color: str, converter: Optional[ColorSpaceConverter] = None) -> ColorFeatures:
    """
    Compute the normalized LAB + HSV features of a hex color.

    Args:
        hex_color: Color as ``#RRGGBB`` or ``RRGGBB``
        converter: Optional caching converter; the result is the same without it

    Raises:
        InvalidInputFormatError: If hex_color is not a valid hex color
    """
    rgb = RGBColor.from_hex(hex_color)
    lab = converter.rgb_to_lab(rgb) if converter is not None else rgb_to_lab(rgb)
    h, s, v = rgb.to_hsv()
    return ColorFeatures(
        L=lab.L / 100.0,
        a=(lab.a + 128.0) / 255.0,
        b=(lab.b + 128.0) / 255.0,
        h=h / 360.0,
        s=s,
        v=v,
    )


def hex_to_vector(hex_color: str, converter: Optional[ColorSpaceConverter] = None) -> Vector:
    return extract_features(hex_color, converter).to_vector()
