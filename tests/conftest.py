"""
Pytest configuration and shared fixtures for ChromaGen tests.

This module provides common fixtures, test configuration, and utilities
used across the test suite.
"""

import random
from typing import Callable, List, Tuple

import pytest

from ChromaGen_Engine.analysis.color_math import ColorMathEngine
from ChromaGen_Engine.color.conversion import rgb_to_lab
from ChromaGen_Engine.config import ColorConfig, EngineConfig, LearningConfig, PaletteConfig
from ChromaGen_Engine.core.types import RGBColor
from ChromaGen_Engine.learning.preference import PreferenceLearner


def pytest_configure(config):
    """Register the custom markers used across the suite."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "core: value types and errors")
    config.addinivalue_line("markers", "color: color science components")
    config.addinivalue_line("markers", "analysis: palette generators and the engine")
    config.addinivalue_line("markers", "learning: preference network and learner")
    config.addinivalue_line("markers", "data: persistence")
    config.addinivalue_line("markers", "cli: command-line interface")


@pytest.fixture
def seeded_engine_config() -> EngineConfig:
    """Engine configuration with fixed seeds and a reduced search budget."""
    return EngineConfig(
        color=ColorConfig(random_seed=42, color_space_divisions=8),
        palette=PaletteConfig(random_seed=42, generation_attempts=60),
    )


@pytest.fixture
def seeded_engine(seeded_engine_config) -> ColorMathEngine:
    """ColorMathEngine producing reproducible output."""
    return ColorMathEngine(seeded_engine_config)


@pytest.fixture
def fast_learning_config() -> LearningConfig:
    """Learner configuration that trains quickly and never auto-trains."""
    return LearningConfig(
        min_samples_for_training=4,
        auto_train_threshold=10_000,
        training_epochs=30,
        learning_rate=0.01,
        validation_split=0.0,
        random_seed=7,
    )


@pytest.fixture
def seeded_learner(fast_learning_config) -> PreferenceLearner:
    """In-memory learner with a fixed seed."""
    return PreferenceLearner(fast_learning_config)


@pytest.fixture
def temp_checkpoint_path(tmp_path) -> str:
    """Path for a checkpoint file inside the test's temporary directory."""
    return str(tmp_path / "checkpoints" / "preferences.pkl")


@pytest.fixture
def lightness_dataset() -> Callable[..., List[Tuple[str, bool]]]:
    """
    Factory for a linearly separable color dataset.

    Colors are labelled preferred when their CIELAB lightness exceeds 50.
    By default colors with lightness in (40, 60) are skipped so the classes
    are separated by a margin; pass margin=0.0 to keep every draw.
    """

    def build(count: int, seed: int, margin: float = 10.0) -> List[Tuple[str, bool]]:
        rng = random.Random(seed)
        dataset: List[Tuple[str, bool]] = []
        seen = set()
        while len(dataset) < count:
            color = RGBColor(rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255))
            lightness = rgb_to_lab(color).L
            if abs(lightness - 50.0) < margin or color.to_hex() in seen:
                continue
            seen.add(color.to_hex())
            dataset.append((color.to_hex(), lightness > 50.0))
        return dataset

    return build
