"""
Type definitions and data structures for ChromaGen.

This module contains the color value objects (RGB, LAB, palettes), the
enumerations naming the supported metrics and harmony rules, and the
dataclasses returned by the generators and the preference learner.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Union

from ..utils.math import clamp_value, round_half_up
from ..utils.validation import normalize_hex_color
from .exceptions import InvalidInputFormatError


class DeltaEMethod(Enum):
    """Supported perceptual color-difference formulas."""

    CIE76 = "cie76"  # Euclidean, fastest
    CIE94 = "cie94"  # Chroma/hue weighted
    CIEDE2000 = "ciede2000"  # Full reference procedure, most accurate


class PaletteDistanceMethod(Enum):
    """Aggregations of per-color distances into one palette distance."""

    HAUSDORFF = "hausdorff"
    AVERAGE_MIN = "average_min"
    WEIGHTED_AVERAGE = "weighted_average"
    BIDIRECTIONAL_HAUSDORFF = "bidirectional"


class PaletteHarmonyType(Enum):
    """Named rules relating hues on the color wheel."""

    COMPLEMENTARY = "complementary"
    ANALOGOUS = "analogous"
    TRIADIC = "triadic"
    SPLIT_COMPLEMENTARY = "split_complementary"
    TETRADIC = "tetradic"
    SQUARE = "square"
    MONOCHROMATIC = "monochromatic"
    RANDOM_HARMONIOUS = "random_harmonious"


# Concrete harmonies a random-harmonious request may resolve to
CONCRETE_HARMONIES = (
    PaletteHarmonyType.COMPLEMENTARY,
    PaletteHarmonyType.ANALOGOUS,
    PaletteHarmonyType.TRIADIC,
    PaletteHarmonyType.SPLIT_COMPLEMENTARY,
    PaletteHarmonyType.TETRADIC,
    PaletteHarmonyType.SQUARE,
    PaletteHarmonyType.MONOCHROMATIC,
)


class SampleSource(Enum):
    """Where a preference sample came from."""

    SAVED = "saved"
    GENERATED = "generated"
    ANTI_PALETTE = "antiPalette"
    CLICKED = "clicked"
    EXPLICIT = "explicit"


class PreferenceClass(Enum):
    """Three-way classification of a predicted preference score."""

    PREFERRED = "preferred"
    NEUTRAL = "neutral"
    DISLIKED = "disliked"


def coerce_enum(enum_cls, value, param_name: str):
    """
    Convert an enum member or its string value into the enum member.

    Raises:
        InvalidInputFormatError: If value names no member of enum_cls
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError as e:
        valid = [member.value for member in enum_cls]
        raise InvalidInputFormatError(
            f"Unknown {param_name}: {value!r}. Must be one of: {valid}", value
        ) from e


@dataclass(frozen=True)
class RGBColor:
    """
    An sRGB color with integer channels in [0, 255].

    Channel values are rounded (halves up) and clamped on construction, so
    ``RGBColor(300, -4, 12.5)`` is ``RGBColor(255, 0, 13)``.

    Attributes:
        r: Red channel
        g: Green channel
        b: Blue channel
    """

    r: int
    g: int
    b: int

    def __post_init__(self):
        """Round and clamp channels after initialization."""
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputFormatError(
                    f"{name} must be a finite number. Got: {value!r}", value
                )
            if value != value or value in (float("inf"), float("-inf")):
                raise InvalidInputFormatError(
                    f"{name} must be a finite number. Got: {value}", value
                )
            object.__setattr__(
                self, name, round_half_up(clamp_value(float(value), 0.0, 255.0))
            )

    @classmethod
    def from_hex(cls, hex_color: str) -> "RGBColor":
        """
        Create a color from a ``#RRGGBB`` string (the '#' is optional).

        Raises:
            InvalidInputFormatError: If hex_color is not a valid hex color string
        """
        clean = normalize_hex_color(hex_color)
        return cls(int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16))

    @classmethod
    def from_hsv(cls, h: float, s: float, v: float) -> "RGBColor":
        """
        Create a color from HSV components.

        Args:
            h: Hue in degrees (any value, wrapped into [0, 360))
            s: Saturation, clamped to [0, 1]
            v: Value, clamped to [0, 1]
        """
        h_normalized = ((h % 360) + 360) % 360 / 360
        s = clamp_value(s, 0.0, 1.0)
        v = clamp_value(v, 0.0, 1.0)

        i = int(h_normalized * 6)
        f = h_normalized * 6 - i
        p = v * (1 - s)
        q = v * (1 - f * s)
        t = v * (1 - (1 - f) * s)

        sector = i % 6
        if sector == 0:
            r, g, b = v, t, p
        elif sector == 1:
            r, g, b = q, v, p
        elif sector == 2:
            r, g, b = p, v, t
        elif sector == 3:
            r, g, b = p, q, v
        elif sector == 4:
            r, g, b = t, p, v
        else:
            r, g, b = v, p, q

        return cls(r * 255, g * 255, b * 255)

    def to_hex(self) -> str:
        """Return the color as a lower-case ``#rrggbb`` string."""
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_normalized(self) -> tuple[float, float, float]:
        """Return channels scaled to [0, 1]."""
        return (self.r / 255.0, self.g / 255.0, self.b / 255.0)

    def to_hsv(self) -> tuple[float, float, float]:
        """
        Convert to HSV.

        Returns:
            Tuple of (hue in [0, 360), saturation in [0, 1], value in [0, 1])
        """
        r, g, b = self.to_normalized()
        max_c = max(r, g, b)
        min_c = min(r, g, b)
        delta = max_c - min_c

        h = 0.0
        s = 0.0 if max_c == 0 else delta / max_c
        v = max_c

        if delta != 0:
            if max_c == r:
                h = ((g - b) / delta + (6 if g < b else 0)) / 6
            elif max_c == g:
                h = ((b - r) / delta + 2) / 6
            else:
                h = ((r - g) / delta + 4) / 6

        return (h * 360, s, v)

    def to_rgb_string(self) -> str:
        """Return a CSS ``rgb(r, g, b)`` string."""
        return f"rgb({self.r}, {self.g}, {self.b})"


@dataclass(frozen=True)
class LABColor:
    """
    A color in CIELAB space (D65 white point).

    Attributes:
        L: Lightness in [0, 100]
        a: Green-red axis, typically in [-128, 127]
        b: Blue-yellow axis, typically in [-128, 127]
    """

    L: float
    a: float
    b: float

    def to_key(self) -> str:
        """Stable string key with four decimals per component."""
        return f"{self.L:.4f}_{self.a:.4f}_{self.b:.4f}"


ColorLike = Union[RGBColor, str]


def to_rgb(color: ColorLike) -> RGBColor:
    """Accept an RGBColor or a hex string and return an RGBColor."""
    if isinstance(color, RGBColor):
        return color
    return RGBColor.from_hex(color)


def dominant_hue(colors: Sequence[RGBColor]) -> float:
    """Arithmetic mean of the HSV hues of colors (not a circular mean)."""
    if not colors:
        raise InvalidInputFormatError("Cannot compute dominant hue of no colors")
    return sum(c.to_hsv()[0] for c in colors) / len(colors)


@dataclass(frozen=True)
class ColorPalette:
    """
    An ordered, immutable set of at least two colors.

    Attributes:
        colors: The palette colors in order
        name: Optional display name
        harmony_type: Harmony rule the palette was generated with, if any
    """

    colors: tuple[RGBColor, ...]
    name: str = ""
    harmony_type: Optional[PaletteHarmonyType] = None

    def __post_init__(self):
        """Freeze the color sequence and validate its length."""
        colors = tuple(self.colors)
        if len(colors) < 2:
            raise InvalidInputFormatError("Palette must contain at least 2 colors")
        if not all(isinstance(c, RGBColor) for c in colors):
            raise InvalidInputFormatError("Palette colors must be RGBColor instances")
        object.__setattr__(self, "colors", colors)

    @classmethod
    def from_hex_list(
        cls,
        hex_colors: Sequence[str],
        name: str = "",
        harmony_type: Optional[PaletteHarmonyType] = None,
    ) -> "ColorPalette":
        """Build a palette from hex strings."""
        return cls(tuple(RGBColor.from_hex(h) for h in hex_colors), name, harmony_type)

    def __len__(self) -> int:
        return len(self.colors)

    def to_hex_list(self) -> list[str]:
        return [c.to_hex() for c in self.colors]

    def dominant_hue(self) -> float:
        return dominant_hue(self.colors)

    def average_saturation(self) -> float:
        return sum(c.to_hsv()[1] for c in self.colors) / len(self.colors)

    def average_value(self) -> float:
        return sum(c.to_hsv()[2] for c in self.colors) / len(self.colors)


@dataclass(frozen=True)
class AntiPaletteResult:
    """
    Best anti-palette found by the search.

    Attributes:
        palette: The generated palette
        distance: Its distance to the preferred colors
        harmony_method: Harmony rule of the palette ("random" if untagged)
    """

    palette: ColorPalette
    distance: float
    harmony_method: str

    def to_dict(self) -> dict:
        return {
            "palette": self.palette.to_hex_list(),
            "distance": self.distance,
            "harmonyMethod": self.harmony_method,
        }


@dataclass(frozen=True)
class ColorSample:
    """A single color tagged as preferred or disliked by a generator."""

    color: RGBColor
    is_preferred: bool
    delta_e_from_nearest_preferred: Optional[float]
    source: str


@dataclass(frozen=True)
class PaletteSample:
    """A palette tagged as preferred or disliked by a generator."""

    palette: ColorPalette
    is_preferred: bool
    distance_from_nearest_preferred: Optional[float]
    source: str
    generation_method: Optional[PaletteHarmonyType]


@dataclass(frozen=True)
class ColorGenerationStatistics:
    """Summary of a disliked-color generation run."""

    preferred_count: int
    disliked_count: int
    ratio: str
    delta_e_method: str
    min_delta_e: float
    max_delta_e: float
    avg_delta_e: float
    candidates_generated: int
    candidates_filtered: int


@dataclass(frozen=True)
class PaletteGenerationStatistics:
    """Summary of a disliked-palette generation run."""

    preferred_count: int
    disliked_count: int
    ratio: str
    delta_e_method: str
    palette_distance_method: str
    min_distance: float
    max_distance: float
    avg_distance: float
    generation_attempts: int
    palette_size: int
    harmony_distribution: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ColorGenerationResult:
    preferred_colors: list[ColorSample]
    disliked_colors: list[ColorSample]
    statistics: ColorGenerationStatistics


@dataclass(frozen=True)
class PaletteGenerationResult:
    preferred_palettes: list[PaletteSample]
    disliked_palettes: list[PaletteSample]
    statistics: PaletteGenerationStatistics
