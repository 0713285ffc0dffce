"""
Palette-to-palette distance aggregation.

A palette distance reduces the pairwise DeltaE matrix between two palettes
to a single number. Apart from the bidirectional Hausdorff variant, every
method is directional: it measures how far the colors of the first palette
are from the second.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from ..core.exceptions import InvalidInputFormatError
from ..core.types import (
    ColorPalette,
    LABColor,
    PaletteDistanceMethod,
    RGBColor,
    coerce_enum,
)
from .conversion import ColorSpaceConverter
from .delta_e import DeltaE2000Calculator, DeltaECalculator

PaletteLike = Union[ColorPalette, Sequence[RGBColor]]


def _colors_of(palette: PaletteLike) -> Sequence[RGBColor]:
    colors = palette.colors if isinstance(palette, ColorPalette) else palette
    if len(colors) == 0:
        raise InvalidInputFormatError("Cannot measure distance to an empty palette")
    return colors


class PaletteDistanceCalculator:
    """
    Computes distances between palettes from per-color DeltaE values.

    Methods:
        hausdorff: max over A of the nearest distance into B
        bidirectional: max of the two directed Hausdorff distances
        average_min: mean over A of the nearest distance into B
        weighted_average: as average_min, with the i-th color of A weighted
            1 / (i + 1)

    Attributes:
        delta_e: Calculator used for per-color distances
        converter: RGB->LAB converter (shared so its cache is reused)
        method: Default aggregation used by calculate()
    """

    def __init__(
        self,
        delta_e: Optional[DeltaECalculator] = None,
        converter: Optional[ColorSpaceConverter] = None,
        method: Union[PaletteDistanceMethod, str] = PaletteDistanceMethod.AVERAGE_MIN,
    ):
        self.delta_e = delta_e or DeltaE2000Calculator()
        self.converter = converter or ColorSpaceConverter()
        self.method = coerce_enum(PaletteDistanceMethod, method, "palette_distance_method")

    def _to_labs(self, palette: PaletteLike) -> List[LABColor]:
        return [self.converter.rgb_to_lab(c) for c in _colors_of(palette)]

    def _min_distances(self, palette1: PaletteLike, palette2: PaletteLike) -> np.ndarray:
        """Nearest distance from each color of palette1 into palette2."""
        labs1 = self._to_labs(palette1)
        labs2 = self._to_labs(palette2)
        matrix = np.array(
            [[self.delta_e.calculate(lab, other) for other in labs2] for lab in labs1]
        )
        return matrix.min(axis=1)

    def calculate_hausdorff(self, palette1: PaletteLike, palette2: PaletteLike) -> float:
        return float(self._min_distances(palette1, palette2).max())

    def calculate_bidirectional_hausdorff(
        self, palette1: PaletteLike, palette2: PaletteLike
    ) -> float:
        return max(
            self.calculate_hausdorff(palette1, palette2),
            self.calculate_hausdorff(palette2, palette1),
        )

    def calculate_average_min(self, palette1: PaletteLike, palette2: PaletteLike) -> float:
        return float(self._min_distances(palette1, palette2).mean())

    def calculate_weighted_average(
        self, palette1: PaletteLike, palette2: PaletteLike
    ) -> float:
        distances = self._min_distances(palette1, palette2)
        weights = 1.0 / np.arange(1, len(distances) + 1)
        return float(np.dot(weights, distances) / weights.sum())

    def calculate(
        self,
        palette1: PaletteLike,
        palette2: PaletteLike,
        method: Optional[Union[PaletteDistanceMethod, str]] = None,
    ) -> float:
        """
        Distance from palette1 to palette2.

        Args:
            palette1: Palette (or plain color sequence) being measured
            palette2: Reference palette (or plain color sequence)
            method: Aggregation to use; defaults to the calculator's method

        Returns:
            Non-negative distance in DeltaE units

        Raises:
            InvalidInputFormatError: If method is unknown or a palette is empty
        """
        method = (
            self.method
            if method is None
            else coerce_enum(PaletteDistanceMethod, method, "palette_distance_method")
        )

        if method is PaletteDistanceMethod.HAUSDORFF:
            return self.calculate_hausdorff(palette1, palette2)
        if method is PaletteDistanceMethod.BIDIRECTIONAL_HAUSDORFF:
            return self.calculate_bidirectional_hausdorff(palette1, palette2)
        if method is PaletteDistanceMethod.WEIGHTED_AVERAGE:
            return self.calculate_weighted_average(palette1, palette2)
        return self.calculate_average_min(palette1, palette2)
