"""
Entry point for running ChromaGen_Engine as a module.

This allows the package to be executed with:
    python -m ChromaGen_Engine anti-palette "#ff0000" "#ffaa00" --seed 42
"""

import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .analysis.color_math import ColorMathEngine
from .config import ChromaGenConfig, get_configuration_manager
from .core.exceptions import ChromaGenError
from .core.types import ColorGenerationResult


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _color_result_to_dict(result: ColorGenerationResult) -> Dict[str, Any]:
    return {
        "dislikedColors": [
            {"hex": s.color.to_hex(), "deltaE": s.delta_e_from_nearest_preferred}
            for s in result.disliked_colors
        ],
        "statistics": asdict(result.statistics),
    }


def run_command(args: Any, config: ChromaGenConfig) -> Dict[str, Any]:
    """
    Execute one parsed subcommand against an engine built from config.

    Returns:
        JSON-compatible result of the command
    """
    engine = ColorMathEngine(config.engine)

    if args.command == "anti-palette":
        result = engine.generate_anti_palette(args.colors)
        return result.to_dict()

    if args.command == "delta-e":
        distance = engine.calculate_delta_e(args.color_a, args.color_b, args.method)
        return {"method": args.method, "deltaE": distance}

    if args.command == "palette-distance":
        method = args.method or config.engine.palette.palette_distance_method.value
        distance = engine.calculate_palette_distance(args.palette_a, args.palette_b, method)
        return {"method": method, "distance": distance}

    if args.command == "disliked-colors":
        return _color_result_to_dict(engine.generate_disliked_colors(args.colors))

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (uses sys.argv if None)

    Returns:
        Process exit code: 0 on success, 1 on handled errors
    """
    config_manager = get_configuration_manager()
    args = config_manager.create_cli_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        if args.command == "create-config":
            config_manager.save_configuration(ChromaGenConfig(), args.path)
            print(json.dumps({"created": args.path}))
            return 0

        config = config_manager.load_configuration(
            config_file=args.config_file,
            cli_args=config_manager.overrides_from_args(args),
        )
        print(json.dumps(run_command(args, config), indent=2))
        return 0

    except (ChromaGenError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
