"""
Unified color math engine.

``ColorMathEngine`` owns the configuration, the shared LAB converter and the
generators built from that configuration. Configuration is immutable: every
update produces a new config object and all dependent components are rebuilt
from it, so no component ever sees a half-applied change.
"""

import logging
from dataclasses import replace
from typing import Any, Optional, Sequence, Union

from ..color.conversion import ColorSpaceConverter
from ..color.delta_e import create_delta_e_calculator
from ..color.harmony import HarmoniousPaletteGenerator
from ..color.palette_distance import PaletteDistanceCalculator
from ..config import EngineConfig
from ..core.types import (
    AntiPaletteResult,
    ColorGenerationResult,
    ColorLike,
    ColorPalette,
    DeltaEMethod,
    LABColor,
    PaletteDistanceMethod,
    PaletteGenerationResult,
    PaletteHarmonyType,
    RGBColor,
    coerce_enum,
    to_rgb,
)
from .anti_palette import DislikedPaletteGenerator
from .disliked_colors import DislikedColorGenerator

PaletteInput = Union[ColorPalette, Sequence[ColorLike]]


class ColorMathEngine:
    """
    Entry point for all color operations.

    Attributes:
        config: Current engine configuration
        converter: RGB->LAB converter shared by every generator
        color_generator: Single-color disliked generator
        palette_generator: Anti-palette and disliked-palette generator
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Engine configuration; defaults are used when omitted
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._apply_config(config or EngineConfig())

    def _apply_config(self, config: EngineConfig) -> None:
        """Install config and rebuild every component that depends on it."""
        previous = getattr(self, "config", None)
        if (
            previous is None
            or previous.enable_cache != config.enable_cache
            or previous.cache_size != config.cache_size
        ):
            self.converter = ColorSpaceConverter(config.enable_cache, config.cache_size)

        self.config = config
        self.color_generator = DislikedColorGenerator(config.color, self.converter)
        self.palette_generator = DislikedPaletteGenerator(config.palette, self.converter)

    # Configuration

    def update_color_config(self, **updates: Any) -> None:
        """
        Merge updates into the color configuration.

        Raises:
            ValueError: If the merged configuration is invalid; the live
                configuration is left unchanged
        """
        color = replace(self.config.color, **updates)
        self._apply_config(replace(self.config, color=color))
        self.logger.debug(f"Color configuration updated: {sorted(updates)}")

    def update_palette_config(self, **updates: Any) -> None:
        """
        Merge updates into the palette configuration.

        Raises:
            ValueError: If the merged configuration is invalid; the live
                configuration is left unchanged
        """
        palette = replace(self.config.palette, **updates)
        self._apply_config(replace(self.config, palette=palette))
        self.logger.debug(f"Palette configuration updated: {sorted(updates)}")

    def update_config(self, **updates: Any) -> None:
        """Merge top-level updates (color, palette, enable_cache, cache_size)."""
        self._apply_config(replace(self.config, **updates))
        self.logger.debug(f"Engine configuration updated: {sorted(updates)}")

    def get_config(self) -> EngineConfig:
        return self.config

    def reset_config(self) -> None:
        self._apply_config(EngineConfig())

    # Generation

    def generate_disliked_colors(self, preferred: Sequence[ColorLike]) -> ColorGenerationResult:
        return self.color_generator.generate(preferred)

    def generate_disliked_palettes(
        self, preferred_palettes: Sequence[ColorPalette]
    ) -> PaletteGenerationResult:
        return self.palette_generator.generate(preferred_palettes)

    def generate_anti_palette(self, hex_colors: Sequence[ColorLike]) -> Optional[AntiPaletteResult]:
        """
        Find the palette most perceptually opposed to hex_colors.

        Returns:
            AntiPaletteResult, or None for empty input
        """
        return self.palette_generator.generate_anti_palette(hex_colors)

    def generate_harmonious_palette(
        self,
        harmony: Union[PaletteHarmonyType, str],
        base_hue: float,
        size: int = 5,
        saturation: float = 0.7,
        value: float = 0.8,
    ) -> ColorPalette:
        generator = HarmoniousPaletteGenerator(self.config.palette.random_seed)
        return generator.generate(harmony, base_hue, size, saturation, value)

    # Conversion and measurement

    def rgb_to_lab(self, rgb: RGBColor) -> LABColor:
        return self.converter.rgb_to_lab(rgb)

    def hex_to_lab(self, hex_color: str) -> LABColor:
        return self.converter.hex_to_lab(hex_color)

    def lab_to_rgb(self, lab: LABColor) -> RGBColor:
        return self.converter.lab_to_rgb(lab)

    def calculate_delta_e(
        self,
        color1: ColorLike,
        color2: ColorLike,
        method: Union[DeltaEMethod, str] = DeltaEMethod.CIEDE2000,
    ) -> float:
        """
        DeltaE between two colors given as RGBColor or hex strings.

        Raises:
            InvalidInputFormatError: If a color or the method name is invalid
        """
        calculator = create_delta_e_calculator(method)
        lab1 = self.converter.rgb_to_lab(to_rgb(color1))
        lab2 = self.converter.rgb_to_lab(to_rgb(color2))
        return calculator.calculate(lab1, lab2)

    def calculate_palette_distance(
        self,
        palette1: PaletteInput,
        palette2: PaletteInput,
        method: Optional[Union[PaletteDistanceMethod, str]] = None,
    ) -> float:
        """
        Distance from palette1 to palette2.

        Palettes may be ColorPalette objects or sequences of hex strings.
        Per-color distances use the palette configuration's DeltaE method.

        Args:
            palette1: Palette being measured
            palette2: Reference palette
            method: Aggregation; defaults to the configured method
        """
        method = coerce_enum(
            PaletteDistanceMethod,
            method if method is not None else self.config.palette.palette_distance_method,
            "palette_distance_method",
        )
        calculator = PaletteDistanceCalculator(
            create_delta_e_calculator(self.config.palette.delta_e_method),
            self.converter,
            method,
        )
        return calculator.calculate(self._as_colors(palette1), self._as_colors(palette2))

    @staticmethod
    def _as_colors(palette: PaletteInput):
        if isinstance(palette, ColorPalette):
            return palette
        return [to_rgb(c) for c in palette]

    def create_palette(
        self,
        hex_colors: Sequence[str],
        name: str = "",
        harmony: Optional[Union[PaletteHarmonyType, str]] = None,
    ) -> ColorPalette:
        if harmony is not None:
            harmony = coerce_enum(PaletteHarmonyType, harmony, "harmony type")
        return ColorPalette.from_hex_list(hex_colors, name, harmony)

    # Cache

    def clear_cache(self) -> None:
        self.converter.clear_cache()

    @property
    def cache_size(self) -> int:
        return self.converter.cache_size
