"""
Color space conversion between sRGB, CIE XYZ and CIELAB.

All conversions use the D65 reference white. The module-level functions are
pure; ``ColorSpaceConverter`` wraps them with a bounded RGB->LAB cache keyed by
hex string.
"""

import logging
from typing import Dict

import numpy as np

from ..core.types import LABColor, RGBColor
from ..utils.math import clamp_value

logger = logging.getLogger(__name__)

# D65 reference white
REF_X = 95.047
REF_Y = 100.0
REF_Z = 108.883

# Linear sRGB -> XYZ
RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ]
)

# XYZ -> linear sRGB
XYZ_TO_RGB = np.array(
    [
        [3.2404542, -1.5371385, -0.4985314],
        [-0.9692660, 1.8760108, 0.0415560],
        [0.0556434, -0.2040259, 1.0572252],
    ]
)

_DELTA = 6.0 / 29.0
_EPSILON = _DELTA**3  # 0.008856...
_KAPPA_INV = 3.0 * _DELTA**2


def _linearize(channel: float) -> float:
    """sRGB gamma expansion of a channel in [0, 1]."""
    if channel > 0.04045:
        return ((channel + 0.055) / 1.055) ** 2.4
    return channel / 12.92


def _gamma_encode(channel: float) -> float:
    """Inverse of _linearize."""
    if channel > 0.0031308:
        return 1.055 * channel ** (1.0 / 2.4) - 0.055
    return 12.92 * channel


def _lab_f(t: float) -> float:
    if t > _EPSILON:
        return t ** (1.0 / 3.0)
    return t / _KAPPA_INV + 4.0 / 29.0


def _lab_f_inverse(t: float) -> float:
    if t > _DELTA:
        return t**3
    return _KAPPA_INV * (t - 4.0 / 29.0)


def rgb_to_xyz(rgb: RGBColor) -> tuple[float, float, float]:
    """
    Convert an sRGB color to CIE XYZ scaled so that white has Y = 100.

    Args:
        rgb: Source color

    Returns:
        Tuple of (X, Y, Z)
    """
    linear = np.array([_linearize(c) for c in rgb.to_normalized()])
    x, y, z = RGB_TO_XYZ @ linear * 100.0
    return (float(x), float(y), float(z))


def xyz_to_lab(x: float, y: float, z: float) -> LABColor:
    """Convert CIE XYZ (white Y = 100) to CIELAB."""
    fx = _lab_f(x / REF_X)
    fy = _lab_f(y / REF_Y)
    fz = _lab_f(z / REF_Z)
    return LABColor(L=116.0 * fy - 16.0, a=500.0 * (fx - fy), b=200.0 * (fy - fz))


def rgb_to_lab(rgb: RGBColor) -> LABColor:
    """Convert an sRGB color to CIELAB without caching."""
    return xyz_to_lab(*rgb_to_xyz(rgb))


def lab_to_xyz(lab: LABColor) -> tuple[float, float, float]:
    """Convert CIELAB to CIE XYZ (white Y = 100)."""
    fy = (lab.L + 16.0) / 116.0
    fx = lab.a / 500.0 + fy
    fz = fy - lab.b / 200.0
    return (
        REF_X * _lab_f_inverse(fx),
        REF_Y * _lab_f_inverse(fy),
        REF_Z * _lab_f_inverse(fz),
    )


def xyz_to_rgb(x: float, y: float, z: float) -> RGBColor:
    """
    Convert CIE XYZ (white Y = 100) to sRGB.

    Out-of-gamut results are clamped channel by channel.
    """
    linear = XYZ_TO_RGB @ (np.array([x, y, z]) / 100.0)
    channels = [clamp_value(_gamma_encode(float(c)), 0.0, 1.0) * 255.0 for c in linear]
    return RGBColor(*channels)


def lab_to_rgb(lab: LABColor) -> RGBColor:
    """Convert CIELAB to sRGB, clamping out-of-gamut colors."""
    return xyz_to_rgb(*lab_to_xyz(lab))


class ColorSpaceConverter:
    """
    RGB->LAB converter with a bounded cache.

    When the cache is full the oldest quarter of its entries (in insertion
    order) is evicted before the new entry is stored. Results are identical
    with or without the cache.

    Attributes:
        enable_cache: Whether conversions are memoized
        max_cache_size: Entry limit for the cache
    """

    def __init__(self, enable_cache: bool = True, max_cache_size: int = 4096):
        """
        Initialize the converter.

        Args:
            enable_cache: Memoize RGB->LAB conversions by hex key
            max_cache_size: Maximum number of cached entries
        """
        self.enable_cache = enable_cache
        self.max_cache_size = max_cache_size
        self._cache: Dict[str, LABColor] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def rgb_to_lab(self, rgb: RGBColor) -> LABColor:
        """Convert an sRGB color to CIELAB, consulting the cache first."""
        if not self.enable_cache:
            return rgb_to_lab(rgb)

        key = rgb.to_hex()
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        lab = rgb_to_lab(rgb)
        if len(self._cache) >= self.max_cache_size:
            self._evict()
        self._cache[key] = lab
        return lab

    def hex_to_lab(self, hex_color: str) -> LABColor:
        return self.rgb_to_lab(RGBColor.from_hex(hex_color))

    def lab_to_rgb(self, lab: LABColor) -> RGBColor:
        return lab_to_rgb(lab)

    def _evict(self) -> None:
        evict_count = max(1, self.max_cache_size // 4)
        # dicts preserve insertion order, so the first keys are the oldest
        for key in list(self._cache)[:evict_count]:
            del self._cache[key]
        self.logger.debug(f"Evicted {evict_count} LAB cache entries")

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        """Number of entries currently cached."""
        return len(self._cache)
