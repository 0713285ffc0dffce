"""
Single-color disliked generation.

Scans a regular grid over the RGB cube, plus a seeded random sample for
variety, and keeps the colors whose nearest preferred color lies within a
DeltaE band.
"""

import logging
import time
from typing import List, Optional, Sequence

from ..color.conversion import ColorSpaceConverter
from ..color.delta_e import create_delta_e_calculator
from ..color.harmony import SeededRandom
from ..config import ColorConfig
from ..core.exceptions import InsufficientDataError
from ..core.types import (
    ColorGenerationResult,
    ColorGenerationStatistics,
    ColorLike,
    ColorSample,
    LABColor,
    RGBColor,
    to_rgb,
)
from ..utils.math import format_time_duration


class DislikedColorGenerator:
    """
    Finds single colors far from a set of preferred colors.

    Attributes:
        config: Color configuration (frozen)
        converter: Shared RGB->LAB converter
        delta_e: Calculator selected by config.delta_e_method
    """

    def __init__(self, config: Optional[ColorConfig] = None,
                 converter: Optional[ColorSpaceConverter] = None):
        self.config = config or ColorConfig()
        self.converter = converter or ColorSpaceConverter()
        self.delta_e = create_delta_e_calculator(self.config.delta_e_method)
        self.logger = logging.getLogger(self.__class__.__name__)

    def generate_candidates(self) -> List[RGBColor]:
        """
        Build the candidate list: the grid first, then random extras.

        The grid step is ``256 // color_space_divisions``; the random part
        adds a quarter as many colors as the grid holds.
        """
        step = 256 // self.config.color_space_divisions
        candidates = [
            RGBColor(r, g, b)
            for r in range(0, 256, step)
            for g in range(0, 256, step)
            for b in range(0, 256, step)
        ]

        seed = self.config.random_seed
        rng = SeededRandom(int(time.time() * 1000) if seed is None else seed)
        for _ in range(len(candidates) // 4):
            candidates.append(
                RGBColor(rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255))
            )

        self.logger.debug(f"Generated {len(candidates)} color candidates")
        return candidates

    def _min_delta_e(self, color: RGBColor, preferred_labs: List[LABColor]) -> float:
        lab = self.converter.rgb_to_lab(color)
        return min(self.delta_e.calculate(lab, p) for p in preferred_labs)

    def generate(self, preferred_colors: Sequence[ColorLike]) -> ColorGenerationResult:
        """
        Generate disliked colors for a set of preferred colors.

        Args:
            preferred_colors: Colors the user likes (RGBColor or hex strings)

        Returns:
            ColorGenerationResult with up to ``len(preferred) * dislike_ratio``
            disliked colors, farthest first

        Raises:
            InsufficientDataError: If preferred_colors is empty
            InvalidInputFormatError: If a hex string fails to parse
        """
        if not preferred_colors:
            raise InsufficientDataError(
                "At least one preferred color is required", required=1, available=0
            )

        start_time = time.perf_counter()
        preferred = [to_rgb(c) for c in preferred_colors]
        self.logger.info(f"Starting generation for {len(preferred)} preferred colors")

        preferred_labs = [self.converter.rgb_to_lab(c) for c in preferred]
        candidates = self.generate_candidates()

        scored = []
        for candidate in candidates:
            min_delta = self._min_delta_e(candidate, preferred_labs)
            if self.config.min_delta_e_threshold <= min_delta <= self.config.max_delta_e_threshold:
                scored.append((candidate, min_delta))

        scored.sort(key=lambda item: item[1], reverse=True)
        required = len(preferred) * self.config.dislike_ratio
        disliked = [
            ColorSample(color, False, delta, "generated") for color, delta in scored[:required]
        ]
        preferred_samples = [ColorSample(c, True, None, "user") for c in preferred]

        deltas = [s.delta_e_from_nearest_preferred for s in disliked]
        statistics = ColorGenerationStatistics(
            preferred_count=len(preferred),
            disliked_count=len(disliked),
            ratio=f"1:{len(disliked) // max(1, len(preferred))}",
            delta_e_method=self.config.delta_e_method.value,
            min_delta_e=min(deltas) if deltas else 0.0,
            max_delta_e=max(deltas) if deltas else 0.0,
            avg_delta_e=sum(deltas) / len(deltas) if deltas else 0.0,
            candidates_generated=len(candidates),
            candidates_filtered=len(scored),
        )

        self.logger.info(
            f"Color generation complete: {statistics.disliked_count} of "
            f"{statistics.candidates_filtered} in-band candidates kept in "
            f"{format_time_duration(time.perf_counter() - start_time)}"
        )
        return ColorGenerationResult(preferred_samples, disliked, statistics)
