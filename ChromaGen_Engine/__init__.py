"""
ChromaGen Color Engine Package

Perceptual color mathematics and on-device preference learning for
generating palettes a user is likely to dislike.

This package provides:
- sRGB / XYZ / CIELAB conversion with a bounded cache
- CIE76, CIE94 and CIEDE2000 color differences
- Palette distances and seeded harmonious palette generation
- Anti-palette search and disliked color / palette generation
- A small neural network that learns color preferences from samples

Modules:
    config: Configuration management and validation
    color: Color conversion, DeltaE, palette distance and harmony generation
    analysis: Anti-palette search and the ColorMathEngine entry point
    learning: Preference network and PreferenceLearner
    data: Checkpoint persistence
    utils: Shared validation and math helpers

Example:
    >>> from ChromaGen_Engine import ColorMathEngine
    >>> engine = ColorMathEngine()
    >>> result = engine.generate_anti_palette(["#ff0000", "#ff8800"])
    >>> result.palette.to_hex_list()
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .analysis import ColorMathEngine, DislikedColorGenerator, DislikedPaletteGenerator
from .config import (
    ChromaGenConfig,
    ColorConfig,
    EngineConfig,
    LearningConfig,
    PaletteConfig,
    get_configuration_manager,
    load_config_from_dict,
)
from .core.exceptions import (
    ChromaGenError,
    InsufficientDataError,
    InvalidInputFormatError,
    ModelStateMismatchError,
)
from .core.types import (
    AntiPaletteResult,
    ColorPalette,
    DeltaEMethod,
    LABColor,
    PaletteDistanceMethod,
    PaletteHarmonyType,
    PreferenceClass,
    RGBColor,
    SampleSource,
)
from .learning import ModelState, NeuralNetwork, PreferenceLearner

__all__ = [
    "__version__",
    # Entry points
    "ColorMathEngine",
    "DislikedColorGenerator",
    "DislikedPaletteGenerator",
    "PreferenceLearner",
    "NeuralNetwork",
    "ModelState",
    # Configuration
    "ChromaGenConfig",
    "ColorConfig",
    "EngineConfig",
    "LearningConfig",
    "PaletteConfig",
    "get_configuration_manager",
    "load_config_from_dict",
    # Errors
    "ChromaGenError",
    "InsufficientDataError",
    "InvalidInputFormatError",
    "ModelStateMismatchError",
    # Value types
    "AntiPaletteResult",
    "ColorPalette",
    "DeltaEMethod",
    "LABColor",
    "PaletteDistanceMethod",
    "PaletteHarmonyType",
    "PreferenceClass",
    "RGBColor",
    "SampleSource",
]
