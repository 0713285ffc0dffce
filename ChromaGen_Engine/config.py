"""
Configuration management module for ChromaGen.

This module provides centralized configuration with validation, default
values and clear error messages for the color engine and the preference
learner, plus JSON file loading and command-line overrides.
"""

import argparse
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .core.types import (
    DeltaEMethod,
    PaletteDistanceMethod,
    PaletteHarmonyType,
    coerce_enum,
)
from .utils.validation import (
    validate_non_negative_number,
    validate_optional_seed,
    validate_positive_integer,
    validate_positive_number,
    validate_range,
)


@dataclass(frozen=True)
class ColorConfig:
    """Configuration for single-color disliked generation."""

    dislike_ratio: int = 7
    min_delta_e_threshold: float = 30.0
    max_delta_e_threshold: float = 100.0
    delta_e_method: DeltaEMethod = DeltaEMethod.CIEDE2000
    color_space_divisions: int = 16
    random_seed: Optional[int] = None

    def __post_init__(self):
        """Validate color configuration after initialization."""
        object.__setattr__(
            self, "delta_e_method", coerce_enum(DeltaEMethod, self.delta_e_method, "delta_e_method")
        )
        validate_positive_integer(self.dislike_ratio, "dislike_ratio")
        validate_non_negative_number(self.min_delta_e_threshold, "min_delta_e_threshold")
        validate_positive_number(self.max_delta_e_threshold, "max_delta_e_threshold")
        if self.min_delta_e_threshold >= self.max_delta_e_threshold:
            raise ValueError("min_delta_e_threshold must be less than max_delta_e_threshold")
        validate_positive_integer(self.color_space_divisions, "color_space_divisions")
        if self.color_space_divisions > 256:
            raise ValueError("color_space_divisions cannot exceed 256")
        validate_optional_seed(self.random_seed, "random_seed")


@dataclass(frozen=True)
class PaletteConfig:
    """Configuration for palette generation and the anti-palette search."""

    dislike_ratio: int = 7
    min_palette_distance: float = 25.0
    max_palette_distance: float = 150.0
    delta_e_method: DeltaEMethod = DeltaEMethod.CIEDE2000
    palette_distance_method: PaletteDistanceMethod = PaletteDistanceMethod.AVERAGE_MIN
    min_colors_per_palette: int = 3
    max_colors_per_palette: int = 7
    default_palette_size: int = 5
    generation_attempts: int = 200
    random_seed: Optional[int] = None
    allowed_harmonies: Tuple[PaletteHarmonyType, ...] = tuple(PaletteHarmonyType)

    def __post_init__(self):
        """Validate palette configuration after initialization."""
        object.__setattr__(
            self, "delta_e_method", coerce_enum(DeltaEMethod, self.delta_e_method, "delta_e_method")
        )
        object.__setattr__(
            self,
            "palette_distance_method",
            coerce_enum(
                PaletteDistanceMethod, self.palette_distance_method, "palette_distance_method"
            ),
        )
        if isinstance(self.allowed_harmonies, (str, PaletteHarmonyType)):
            raise ValueError("allowed_harmonies must be a sequence of harmony types")
        harmonies = tuple(
            coerce_enum(PaletteHarmonyType, h, "harmony type") for h in self.allowed_harmonies
        )
        if not harmonies:
            raise ValueError("allowed_harmonies cannot be empty")
        object.__setattr__(self, "allowed_harmonies", harmonies)

        validate_positive_integer(self.dislike_ratio, "dislike_ratio")
        validate_non_negative_number(self.min_palette_distance, "min_palette_distance")
        validate_positive_number(self.max_palette_distance, "max_palette_distance")
        if self.min_palette_distance >= self.max_palette_distance:
            raise ValueError("min_palette_distance must be less than max_palette_distance")

        validate_positive_integer(self.min_colors_per_palette, "min_colors_per_palette")
        validate_positive_integer(self.max_colors_per_palette, "max_colors_per_palette")
        if self.min_colors_per_palette < 2:
            raise ValueError("min_colors_per_palette must be at least 2")
        if self.max_colors_per_palette < self.min_colors_per_palette:
            raise ValueError("max_colors_per_palette must be >= min_colors_per_palette")
        validate_positive_integer(self.default_palette_size, "default_palette_size")
        if not (self.min_colors_per_palette <= self.default_palette_size <= self.max_colors_per_palette):
            raise ValueError(
                "default_palette_size must be between min_colors_per_palette "
                "and max_colors_per_palette"
            )
        validate_positive_integer(self.generation_attempts, "generation_attempts")
        validate_optional_seed(self.random_seed, "random_seed")


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for the color math engine."""

    color: ColorConfig = field(default_factory=ColorConfig)
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    enable_cache: bool = True
    cache_size: int = 4096

    def __post_init__(self):
        """Validate engine configuration after initialization."""
        if not isinstance(self.color, ColorConfig):
            raise ValueError(f"color must be a ColorConfig, got {type(self.color)}")
        if not isinstance(self.palette, PaletteConfig):
            raise ValueError(f"palette must be a PaletteConfig, got {type(self.palette)}")
        validate_positive_integer(self.cache_size, "cache_size")


@dataclass(frozen=True)
class LearningConfig:
    """Configuration for the preference learner and its network."""

    min_samples_for_training: int = 20
    auto_train_threshold: int = 50
    max_stored_samples: int = 1000
    training_epochs: int = 100
    batch_size: int = 16
    learning_rate: float = 0.001
    confidence_threshold: float = 0.7
    validation_split: float = 0.2
    early_stopping_patience: int = 10
    min_delta: float = 0.001
    l2_lambda: float = 1e-4
    dropout_rates: Tuple[float, ...] = (0.1, 0.1, 0.0)
    preference_weight: float = 0.3
    random_seed: Optional[int] = None
    storage_path: Optional[str] = None

    def __post_init__(self):
        """Validate learning configuration after initialization."""
        validate_positive_integer(self.min_samples_for_training, "min_samples_for_training")
        validate_positive_integer(self.auto_train_threshold, "auto_train_threshold")
        validate_positive_integer(self.max_stored_samples, "max_stored_samples")
        validate_positive_integer(self.training_epochs, "training_epochs")
        validate_positive_integer(self.batch_size, "batch_size")
        validate_positive_number(self.learning_rate, "learning_rate")
        validate_range(self.confidence_threshold, "confidence_threshold", 0.5, 1.0)
        validate_range(self.validation_split, "validation_split", 0.0, 0.9)
        validate_positive_integer(self.early_stopping_patience, "early_stopping_patience")
        validate_non_negative_number(self.min_delta, "min_delta")
        validate_non_negative_number(self.l2_lambda, "l2_lambda")
        validate_range(self.preference_weight, "preference_weight", 0.0, 1.0)
        validate_optional_seed(self.random_seed, "random_seed")

        rates = tuple(self.dropout_rates)
        if len(rates) != 3:
            raise ValueError("dropout_rates must contain one rate per hidden layer (3)")
        for rate in rates:
            if not isinstance(rate, (int, float)) or isinstance(rate, bool) or not 0 <= rate < 1:
                raise ValueError("dropout_rates must be numbers in [0, 1)")
        object.__setattr__(self, "dropout_rates", tuple(float(r) for r in rates))

        if self.storage_path is not None and not isinstance(self.storage_path, str):
            raise ValueError("storage_path must be a string path or None")


@dataclass(frozen=True)
class ChromaGenConfig:
    """Main configuration class containing all ChromaGen settings."""

    engine: EngineConfig = field(default_factory=EngineConfig)
    learning: LearningConfig = field(default_factory=LearningConfig)

    def __post_init__(self):
        """Validate main configuration after initialization."""
        if not isinstance(self.engine, EngineConfig):
            raise ValueError(f"engine must be an EngineConfig, got {type(self.engine)}")
        if not isinstance(self.learning, LearningConfig):
            raise ValueError(f"learning must be a LearningConfig, got {type(self.learning)}")


def load_config_from_dict(config_dict: Dict[str, Any]) -> ChromaGenConfig:
    """
    Creates a ChromaGenConfig instance from a dictionary.

    Enum fields accept their string values, so the output of
    ``ConfigurationManager.save_configuration`` loads back unchanged.

    Args:
        config_dict: Nested configuration dictionary with optional "engine"
            and "learning" sections.

    Returns:
        ChromaGenConfig: Validated configuration instance.

    Raises:
        ValueError: If configuration validation fails.
    """
    try:
        engine_dict = dict(config_dict.get("engine", {}))
        color_dict = engine_dict.pop("color", {})
        palette_dict = dict(engine_dict.pop("palette", {}))
        learning_dict = dict(config_dict.get("learning", {}))

        if "allowed_harmonies" in palette_dict:
            palette_dict["allowed_harmonies"] = tuple(palette_dict["allowed_harmonies"])
        if "dropout_rates" in learning_dict:
            learning_dict["dropout_rates"] = tuple(learning_dict["dropout_rates"])

        engine_config = EngineConfig(
            color=ColorConfig(**color_dict),
            palette=PaletteConfig(**palette_dict),
            **engine_dict,
        )
        learning_config = LearningConfig(**learning_dict)

        return ChromaGenConfig(engine=engine_config, learning=learning_config)

    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}") from e


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def serialize_config(config: Any) -> Dict[str, Any]:
    """Serialize any configuration dataclass to a JSON-compatible dictionary."""
    return _to_jsonable(asdict(config))


class ConfigurationManager:
    """
    Configuration management with validation and merging capabilities.

    This class provides:
    - Loading from JSON files and CLI arguments
    - Configuration merging with proper precedence (defaults < file < CLI)
    - CLI argument parsing with argparse
    - Saving configuration back to JSON
    """

    def __init__(self):
        """Initialize the configuration manager."""
        self.logger = logging.getLogger(__name__)

    def load_configuration(
        self, config_file: Optional[str] = None, cli_args: Optional[Dict] = None
    ) -> ChromaGenConfig:
        """
        Load configuration from file and CLI arguments with validation.

        Args:
            config_file: Optional path to configuration file
            cli_args: Optional dictionary of CLI argument overrides

        Returns:
            ChromaGenConfig: Validated configuration instance

        Raises:
            ValueError: If configuration validation fails
            FileNotFoundError: If config file doesn't exist
        """
        base_config = self._serialize_configuration(ChromaGenConfig())

        if config_file:
            if not os.path.exists(config_file):
                raise FileNotFoundError(f"Configuration file not found: {config_file}")

            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    file_config = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in configuration file {config_file}: {e}") from e

            if not isinstance(file_config, dict):
                raise ValueError(f"Configuration file {config_file} must contain a JSON object")
            base_config = self._merge_configurations(base_config, file_config)

        if cli_args:
            base_config = self._merge_configurations(base_config, cli_args)

        return load_config_from_dict(base_config)

    def create_cli_parser(self) -> argparse.ArgumentParser:
        """
        Create the command-line argument parser.

        Returns:
            argparse.ArgumentParser: Parser with one subcommand per operation
        """
        parser = argparse.ArgumentParser(
            prog="chromagen",
            description="ChromaGen anti-palette and color-difference tool",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  chromagen anti-palette "#ff0000" "#00ff00" --seed 42
  chromagen delta-e "#ff0000" "#00ff00" --method cie94
  chromagen palette-distance --a "#ff0000" "#00ff00" --b "#0000ff" "#ffff00"
  chromagen --config my_config.json disliked-colors "#336699"
            """,
        )
        parser.add_argument(
            "--config", dest="config_file", help="Path to JSON configuration file"
        )
        parser.add_argument(
            "-v", "--verbose", action="store_true", help="Enable debug logging"
        )

        subparsers = parser.add_subparsers(dest="command", required=True)

        anti = subparsers.add_parser(
            "anti-palette", help="Find the palette most opposed to the given colors"
        )
        anti.add_argument("colors", nargs="+", help="Preferred colors as #RRGGBB")
        anti.add_argument("--seed", type=int, help="Random seed for reproducible output")
        anti.add_argument(
            "--attempts", type=int, dest="generation_attempts", help="Number of candidates to try"
        )
        anti.add_argument(
            "--distance-method",
            dest="palette_distance_method",
            choices=[m.value for m in PaletteDistanceMethod],
            help="Palette distance aggregation",
        )

        delta = subparsers.add_parser("delta-e", help="Color difference between two colors")
        delta.add_argument("color_a", help="First color as #RRGGBB")
        delta.add_argument("color_b", help="Second color as #RRGGBB")
        delta.add_argument(
            "--method",
            choices=[m.value for m in DeltaEMethod],
            default=DeltaEMethod.CIEDE2000.value,
            help="DeltaE formula (default: ciede2000)",
        )

        distance = subparsers.add_parser(
            "palette-distance", help="Distance from palette A to palette B"
        )
        distance.add_argument("--a", nargs="+", required=True, dest="palette_a")
        distance.add_argument("--b", nargs="+", required=True, dest="palette_b")
        distance.add_argument(
            "--method",
            choices=[m.value for m in PaletteDistanceMethod],
            help="Palette distance aggregation (default: from configuration)",
        )

        disliked = subparsers.add_parser(
            "disliked-colors", help="Generate single colors far from the given colors"
        )
        disliked.add_argument("colors", nargs="+", help="Preferred colors as #RRGGBB")
        disliked.add_argument("--seed", type=int, help="Random seed for reproducible output")

        create = subparsers.add_parser(
            "create-config", help="Write the default configuration to a JSON file"
        )
        create.add_argument("path", help="Destination file")

        return parser

    def overrides_from_args(self, parsed_args: argparse.Namespace) -> Dict[str, Any]:
        """
        Convert parsed arguments into configuration overrides.

        Args:
            parsed_args: Namespace produced by the CLI parser

        Returns:
            Dict[str, Any]: Nested configuration overrides
        """
        palette: Dict[str, Any] = {}
        color: Dict[str, Any] = {}

        seed = getattr(parsed_args, "seed", None)
        if seed is not None:
            palette["random_seed"] = seed
            color["random_seed"] = seed

        for attr in ["generation_attempts", "palette_distance_method"]:
            value = getattr(parsed_args, attr, None)
            if value is not None:
                palette[attr] = value

        engine: Dict[str, Any] = {}
        if palette:
            engine["palette"] = palette
        if color:
            engine["color"] = color
        return {"engine": engine} if engine else {}

    def parse_cli_args(self, args: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Parse command-line arguments into configuration dictionary.

        Args:
            args: Optional list of arguments (uses sys.argv if None)

        Returns:
            Dict[str, Any]: Configuration overrides from CLI
        """
        parsed_args = self.create_cli_parser().parse_args(args)
        return self.overrides_from_args(parsed_args)

    def save_configuration(self, config: ChromaGenConfig, file_path: str) -> None:
        """
        Save configuration to JSON file.

        Args:
            config: Configuration instance to save
            file_path: Path to save configuration file
        """
        config_dict = self._serialize_configuration(config)

        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(config_dict, f, indent=2, ensure_ascii=False)

        self.logger.info(f"Configuration saved to {file_path}")

    def _merge_configurations(self, base_config: Dict, overrides: Dict) -> Dict:
        """
        Merge configuration dictionaries with proper precedence.

        Args:
            base_config: Base configuration dictionary
            overrides: Override configuration dictionary

        Returns:
            Dict: Merged configuration dictionary
        """
        merged = base_config.copy()

        for key, value in overrides.items():
            if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
                merged[key] = self._merge_configurations(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _serialize_configuration(self, config: ChromaGenConfig) -> Dict[str, Any]:
        """
        Serialize configuration to JSON-compatible dictionary.

        Args:
            config: Configuration instance to serialize

        Returns:
            Dict[str, Any]: JSON-serializable configuration dictionary
        """
        return serialize_config(config)


def get_configuration_manager() -> ConfigurationManager:
    """
    Get a configured instance of ConfigurationManager.

    Returns:
        ConfigurationManager: Ready-to-use configuration manager
    """
    return ConfigurationManager()


def load_config_from_file(file_path: str) -> ChromaGenConfig:
    """
    Load configuration from a JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If configuration is invalid
    """
    return get_configuration_manager().load_configuration(config_file=file_path)


def create_default_config_file(file_path: str) -> None:
    """
    Create a default configuration file with every option present.

    Args:
        file_path: Path where to create the configuration file
    """
    get_configuration_manager().save_configuration(ChromaGenConfig(), file_path)
