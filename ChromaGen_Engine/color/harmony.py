"""
Seeded generation of harmonious palettes.

Palettes follow the classic color-wheel rules. Every random draw comes from
``SeededRandom``, a linear congruential generator, so a generator built with
the same seed and asked for the same palettes reproduces them exactly.
"""

import logging
import time
from typing import List, Optional, Sequence, TypeVar, Union

from ..core.exceptions import InvalidInputFormatError
from ..core.types import (
    CONCRETE_HARMONIES,
    ColorPalette,
    PaletteHarmonyType,
    RGBColor,
    coerce_enum,
)
from ..utils.math import clamp_value, wrap_degrees

T = TypeVar("T")

# Hue jitter in degrees around each target hue
HUE_JITTER = {
    PaletteHarmonyType.COMPLEMENTARY: 15.0,
    PaletteHarmonyType.ANALOGOUS: 5.0,
    PaletteHarmonyType.TRIADIC: 10.0,
    PaletteHarmonyType.SPLIT_COMPLEMENTARY: 10.0,
    PaletteHarmonyType.TETRADIC: 10.0,
    PaletteHarmonyType.SQUARE: 10.0,
    PaletteHarmonyType.MONOCHROMATIC: 5.0,
}

SV_JITTER = 0.2
MONOCHROMATIC_SV_JITTER = 0.1
ANALOGOUS_SPREAD = 30.0
SPLIT_ANGLE = 30.0

MIN_SATURATION = 0.1
MIN_VALUE = 0.2


def validate_palette_size(size: int) -> int:
    if isinstance(size, bool) or not isinstance(size, int) or size < 2:
        raise InvalidInputFormatError(f"Palette size must be an integer >= 2, got {size}", size)
    return size


class SeededRandom:
    """
    Linear congruential generator (Numerical Recipes constants).

    Attributes:
        seed: Current internal state, advanced by every draw
    """

    MULTIPLIER = 1664525
    INCREMENT = 1013904223
    MODULUS = 2**32

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: Initial state; the current time in milliseconds when None
        """
        self.seed = int(time.time() * 1000) if seed is None else int(seed)

    def next(self) -> float:
        """Advance the generator and return a float in [0, 1)."""
        self.seed = (self.MULTIPLIER * self.seed + self.INCREMENT) % self.MODULUS
        return self.seed / self.MODULUS

    def uniform(self, low: float, high: float) -> float:
        return self.next() * (high - low) + low

    def randint(self, low: int, high: int) -> int:
        """Random integer in [low, high], both ends inclusive."""
        return int(self.next() * (high - low + 1)) + low

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        return items[int(self.next() * len(items))]


class HarmoniousPaletteGenerator:
    """
    Generates palettes following named harmony rules.

    Each family defines a list of target hues; colors are emitted by cycling
    through those targets, jittering the hue and the saturation/value around
    the requested targets. Analogous palettes spread their hues evenly over a
    30 degree arc and monochromatic palettes keep one hue and walk a
    saturation/value gradient instead.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[SeededRandom] = None):
        """
        Initialize the generator.

        Args:
            seed: Seed for a private SeededRandom (ignored when rng is given)
            rng: Shared generator to draw from
        """
        self.rng = rng if rng is not None else SeededRandom(seed)
        self.logger = logging.getLogger(self.__class__.__name__)

    def _vary_saturation_value(self, saturation: float, value: float) -> tuple[float, float]:
        s = clamp_value(
            saturation + self.rng.uniform(-SV_JITTER, SV_JITTER), MIN_SATURATION, 1.0
        )
        v = clamp_value(value + self.rng.uniform(-SV_JITTER, SV_JITTER), MIN_VALUE, 1.0)
        return s, v

    def _target_hues(self, harmony: PaletteHarmonyType, base_hue: float) -> List[float]:
        if harmony is PaletteHarmonyType.COMPLEMENTARY:
            offsets = [0.0, 180.0]
        elif harmony is PaletteHarmonyType.TRIADIC:
            offsets = [0.0, 120.0, 240.0]
        elif harmony is PaletteHarmonyType.SPLIT_COMPLEMENTARY:
            offsets = [0.0, 180.0 - SPLIT_ANGLE, 180.0 + SPLIT_ANGLE]
        elif harmony is PaletteHarmonyType.TETRADIC:
            offsets = [0.0, 60.0, 180.0, 240.0]
        elif harmony is PaletteHarmonyType.SQUARE:
            offsets = [0.0, 90.0, 180.0, 270.0]
        else:
            raise InvalidInputFormatError(f"{harmony.value} has no fixed target hues")
        return [wrap_degrees(base_hue + offset) for offset in offsets]

    def _generate_cycled(
        self,
        harmony: PaletteHarmonyType,
        base_hue: float,
        size: int,
        saturation: float,
        value: float,
    ) -> ColorPalette:
        hues = self._target_hues(harmony, base_hue)
        jitter = HUE_JITTER[harmony]
        colors = []
        for i in range(size):
            h = hues[i % len(hues)] + self.rng.uniform(-jitter, jitter)
            s, v = self._vary_saturation_value(saturation, value)
            colors.append(RGBColor.from_hsv(wrap_degrees(h), s, v))
        return ColorPalette(tuple(colors), harmony_type=harmony)

    def generate_analogous(
        self, base_hue: float, size: int = 5, saturation: float = 0.7, value: float = 0.8
    ) -> ColorPalette:
        validate_palette_size(size)
        step = ANALOGOUS_SPREAD / (size - 1)
        jitter = HUE_JITTER[PaletteHarmonyType.ANALOGOUS]
        colors = []
        for i in range(size):
            h = base_hue - ANALOGOUS_SPREAD / 2 + i * step
            h += self.rng.uniform(-jitter, jitter)
            s, v = self._vary_saturation_value(saturation, value)
            colors.append(RGBColor.from_hsv(wrap_degrees(h), s, v))
        return ColorPalette(tuple(colors), harmony_type=PaletteHarmonyType.ANALOGOUS)

    def generate_monochromatic(
        self, base_hue: float, size: int = 5, saturation: float = 0.7, value: float = 0.8
    ) -> ColorPalette:
        validate_palette_size(size)
        jitter = HUE_JITTER[PaletteHarmonyType.MONOCHROMATIC]
        colors = []
        for i in range(size):
            ratio = i / (size - 1)
            h = base_hue + self.rng.uniform(-jitter, jitter)
            # Saturation rises while value falls along the palette
            s = clamp_value(
                saturation * (0.3 + 0.7 * ratio)
                + self.rng.uniform(-MONOCHROMATIC_SV_JITTER, MONOCHROMATIC_SV_JITTER),
                MIN_SATURATION,
                1.0,
            )
            v = clamp_value(
                value * (0.4 + 0.6 * (1 - ratio))
                + self.rng.uniform(-MONOCHROMATIC_SV_JITTER, MONOCHROMATIC_SV_JITTER),
                MIN_VALUE,
                1.0,
            )
            colors.append(RGBColor.from_hsv(wrap_degrees(h), s, v))
        return ColorPalette(tuple(colors), harmony_type=PaletteHarmonyType.MONOCHROMATIC)

    def generate_random_harmonious(
        self, size: int = 5, saturation: float = 0.7, value: float = 0.8
    ) -> ColorPalette:
        """Pick a random base hue and a random concrete harmony, then generate."""
        validate_palette_size(size)
        base_hue = self.rng.uniform(0, 360)
        harmony = self.rng.choice(CONCRETE_HARMONIES)
        self.logger.debug(f"Random harmony resolved to {harmony.value} at {base_hue:.1f}")
        return self.generate(harmony, base_hue, size, saturation, value)

    def generate(
        self,
        harmony: Union[PaletteHarmonyType, str],
        base_hue: float,
        size: int = 5,
        saturation: float = 0.7,
        value: float = 0.8,
    ) -> ColorPalette:
        """
        Generate a palette for a harmony family.

        Args:
            harmony: Harmony family (member or string value)
            base_hue: Base hue in degrees; ignored for random_harmonious
            size: Number of colors (at least 2)
            saturation: Target saturation in [0, 1]
            value: Target value in [0, 1]

        Returns:
            ColorPalette tagged with the harmony actually used

        Raises:
            InvalidInputFormatError: If harmony is unknown or size < 2
        """
        harmony = coerce_enum(PaletteHarmonyType, harmony, "harmony type")
        validate_palette_size(size)

        if harmony is PaletteHarmonyType.RANDOM_HARMONIOUS:
            return self.generate_random_harmonious(size, saturation, value)
        if harmony is PaletteHarmonyType.ANALOGOUS:
            return self.generate_analogous(base_hue, size, saturation, value)
        if harmony is PaletteHarmonyType.MONOCHROMATIC:
            return self.generate_monochromatic(base_hue, size, saturation, value)
        return self._generate_cycled(harmony, base_hue, size, saturation, value)
