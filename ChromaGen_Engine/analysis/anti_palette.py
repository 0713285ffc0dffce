"""
Anti-palette search and batch disliked-palette generation.

Both generators draw candidate palettes from the harmonious palette
generator and keep those that are perceptually far from the preferred
colors. Random streams are rebuilt from the configured seed on every call,
so a seeded generator returns the same result each time it is asked.
"""

import logging
import time
from typing import Dict, List, Optional, Sequence

from ..color.conversion import ColorSpaceConverter
from ..color.delta_e import create_delta_e_calculator
from ..color.harmony import HarmoniousPaletteGenerator, SeededRandom
from ..color.palette_distance import PaletteDistanceCalculator, PaletteLike
from ..config import PaletteConfig
from ..core.exceptions import InsufficientDataError
from ..core.types import (
    AntiPaletteResult,
    ColorLike,
    ColorPalette,
    PaletteGenerationResult,
    PaletteGenerationStatistics,
    PaletteSample,
    dominant_hue,
    to_rgb,
)
from ..utils.math import clamp_value, format_time_duration, hue_distance, wrap_degrees

ANTI_HUE_JITTER = 30.0
SV_RANGE = (0.4, 0.9)
HUE_CANDIDATES = 10


class DislikedPaletteGenerator:
    """
    Generates harmonious palettes that are far from preferred colors.

    Attributes:
        config: Palette configuration (frozen)
        converter: Shared RGB->LAB converter
        distance_calculator: Palette distance calculator built from config
    """

    def __init__(self, config: Optional[PaletteConfig] = None,
                 converter: Optional[ColorSpaceConverter] = None):
        """
        Initialize the generator.

        Args:
            config: Palette configuration; defaults are used when omitted
            converter: Converter whose cache is shared with other components
        """
        self.config = config or PaletteConfig()
        self.converter = converter or ColorSpaceConverter()
        self.distance_calculator = PaletteDistanceCalculator(
            create_delta_e_calculator(self.config.delta_e_method),
            self.converter,
            self.config.palette_distance_method,
        )
        self.logger = logging.getLogger(self.__class__.__name__)

    def _new_streams(self) -> tuple[SeededRandom, HarmoniousPaletteGenerator]:
        """Fresh choice stream and palette generator for one run."""
        seed = self.config.random_seed
        if seed is None:
            seed = int(time.time() * 1000)
        return SeededRandom(seed), HarmoniousPaletteGenerator(seed)

    def generate_anti_palette(self, hex_colors: Sequence[ColorLike]) -> Optional[AntiPaletteResult]:
        """
        Find the harmonious palette most perceptually opposed to hex_colors.

        Runs exactly ``generation_attempts`` candidates. A candidate replaces
        the current best only when its distance is strictly greater, so the
        earliest of equally distant candidates is kept.

        Args:
            hex_colors: Preferred colors as hex strings (or RGBColor values)

        Returns:
            The best candidate found, or None when hex_colors is empty

        Raises:
            InvalidInputFormatError: If any color fails to parse
        """
        if not hex_colors:
            return None

        preferred = [to_rgb(c) for c in hex_colors]
        preferred_hue = dominant_hue(preferred)
        rng, palette_generator = self._new_streams()
        palette_size = self.config.min_colors_per_palette

        best_candidate: Optional[ColorPalette] = None
        max_distance = -1.0

        for _ in range(self.config.generation_attempts):
            harmony = rng.choice(self.config.allowed_harmonies)
            candidate_hue = wrap_degrees(
                preferred_hue + 180.0 + rng.uniform(-ANTI_HUE_JITTER, ANTI_HUE_JITTER)
            )
            saturation = rng.uniform(*SV_RANGE)
            value = rng.uniform(*SV_RANGE)

            candidate = palette_generator.generate(
                harmony, candidate_hue, palette_size, saturation, value
            )
            distance = self.distance_calculator.calculate(candidate, preferred)

            if distance > max_distance:
                max_distance = distance
                best_candidate = candidate

        if best_candidate is None:
            return None

        method = best_candidate.harmony_type.value if best_candidate.harmony_type else "random"
        self.logger.info(
            f"Anti-palette found after {self.config.generation_attempts} attempts: "
            f"{method}, distance {max_distance:.2f}"
        )
        return AntiPaletteResult(best_candidate, max_distance, method)

    def _min_distance_to_preferred(
        self, candidate: ColorPalette, preferred: Sequence[PaletteLike]
    ) -> float:
        return min(self.distance_calculator.calculate(candidate, p) for p in preferred)

    def _farthest_hue(self, rng: SeededRandom, preferred_hues: List[float]) -> float:
        """Best of several random hues by angular distance to the preferred hues."""

        def min_hue_distance(h: float) -> float:
            return min(hue_distance(h, ph) for ph in preferred_hues)

        best_hue = rng.uniform(0, 360)
        for _ in range(HUE_CANDIDATES):
            test_hue = rng.uniform(0, 360)
            if min_hue_distance(test_hue) > min_hue_distance(best_hue):
                best_hue = test_hue
        return best_hue

    def generate(self, preferred_palettes: Sequence[ColorPalette]) -> PaletteGenerationResult:
        """
        Generate disliked palettes for a set of preferred palettes.

        Candidates are drawn until ``len(preferred_palettes) * dislike_ratio``
        of them fall within [min_palette_distance, max_palette_distance] of
        their nearest preferred palette, or the attempt budget runs out.

        Args:
            preferred_palettes: Palettes the user likes

        Returns:
            PaletteGenerationResult with farthest-first disliked samples

        Raises:
            InsufficientDataError: If preferred_palettes is empty
        """
        if not preferred_palettes:
            raise InsufficientDataError(
                "At least one preferred palette is required", required=1, available=0
            )

        start_time = time.perf_counter()
        self.logger.info(f"Starting generation for {len(preferred_palettes)} preferred palettes")

        rng, palette_generator = self._new_streams()
        required_count = len(preferred_palettes) * self.config.dislike_ratio
        avg_size = sum(len(p) for p in preferred_palettes) // len(preferred_palettes)
        palette_size = int(
            clamp_value(
                avg_size, self.config.min_colors_per_palette, self.config.max_colors_per_palette
            )
        )
        preferred_hues = [p.dominant_hue() for p in preferred_palettes]

        candidates: List[tuple[ColorPalette, float]] = []
        attempts = 0
        while len(candidates) < required_count and attempts < self.config.generation_attempts:
            attempts += 1
            harmony = rng.choice(self.config.allowed_harmonies)
            base_hue = self._farthest_hue(rng, preferred_hues)
            saturation = rng.uniform(*SV_RANGE)
            value = rng.uniform(*SV_RANGE)

            candidate = palette_generator.generate(
                harmony, base_hue, palette_size, saturation, value
            )
            distance = self._min_distance_to_preferred(candidate, preferred_palettes)
            if self.config.min_palette_distance <= distance <= self.config.max_palette_distance:
                candidates.append((candidate, distance))

        # sorted() is stable, so equally distant candidates keep generation order
        selected = sorted(candidates, key=lambda item: item[1], reverse=True)[:required_count]

        preferred_samples = [
            PaletteSample(p, True, None, "user", p.harmony_type) for p in preferred_palettes
        ]
        disliked_samples = [
            PaletteSample(palette, False, distance, "generated", palette.harmony_type)
            for palette, distance in selected
        ]

        distances = [distance for _, distance in selected]
        harmony_distribution: Dict[str, int] = {}
        for sample in disliked_samples:
            if sample.generation_method is not None:
                key = sample.generation_method.value
                harmony_distribution[key] = harmony_distribution.get(key, 0) + 1

        statistics = PaletteGenerationStatistics(
            preferred_count=len(preferred_palettes),
            disliked_count=len(disliked_samples),
            ratio=f"1:{len(disliked_samples) // max(1, len(preferred_palettes))}",
            delta_e_method=self.config.delta_e_method.value,
            palette_distance_method=self.config.palette_distance_method.value,
            min_distance=min(distances) if distances else 0.0,
            max_distance=max(distances) if distances else 0.0,
            avg_distance=sum(distances) / len(distances) if distances else 0.0,
            generation_attempts=attempts,
            palette_size=palette_size,
            harmony_distribution=harmony_distribution,
        )

        self.logger.info(
            f"Palette generation complete: {statistics.disliked_count} disliked palettes "
            f"from {attempts} attempts in "
            f"{format_time_duration(time.perf_counter() - start_time)}"
        )

        return PaletteGenerationResult(preferred_samples, disliked_samples, statistics)
