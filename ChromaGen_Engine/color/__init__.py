"""
Color science components for ChromaGen.

Modules:
    conversion: sRGB <-> XYZ <-> CIELAB conversion and the LAB cache
    delta_e: CIE76, CIE94 and CIEDE2000 color-difference calculators
    palette_distance: Palette-to-palette distance aggregation
    harmony: Seeded harmonious palette generation
"""

from .conversion import ColorSpaceConverter, lab_to_rgb, rgb_to_lab
from .delta_e import (
    DeltaE76Calculator,
    DeltaE94Calculator,
    DeltaE2000Calculator,
    DeltaECalculator,
    calculate_delta_e,
    create_delta_e_calculator,
)
from .harmony import HarmoniousPaletteGenerator, SeededRandom
from .palette_distance import PaletteDistanceCalculator

__all__ = [
    "ColorSpaceConverter",
    "lab_to_rgb",
    "rgb_to_lab",
    "DeltaECalculator",
    "DeltaE76Calculator",
    "DeltaE94Calculator",
    "DeltaE2000Calculator",
    "calculate_delta_e",
    "create_delta_e_calculator",
    "PaletteDistanceCalculator",
    "HarmoniousPaletteGenerator",
    "SeededRandom",
]
