"""
Palette analysis components for ChromaGen.

Modules:
    anti_palette: Anti-palette search and batch disliked-palette generation
    disliked_colors: Single-color disliked generation over the RGB grid
    color_math: ColorMathEngine, the configuration-owning entry point
"""

from .anti_palette import DislikedPaletteGenerator
from .color_math import ColorMathEngine
from .disliked_colors import DislikedColorGenerator

__all__ = [
    "ColorMathEngine",
    "DislikedColorGenerator",
    "DislikedPaletteGenerator",
]
