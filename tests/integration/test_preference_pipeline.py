"""
Integration tests for the color engine feeding the preference learner.

Anti-palette and disliked-color output becomes disliked samples, the learner
trains on them alongside the user's preferred colors, and its state survives
a round trip through a checkpoint.
"""

from dataclasses import replace

import pytest

pytestmark = [pytest.mark.integration, pytest.mark.slow]
from ChromaGen_Engine.core.types import SampleSource
from ChromaGen_Engine.learning.preference import PreferenceLearner

PREFERRED = ["#ff0000", "#ff4400", "#ff8800", "#ffaa00", "#ee2200", "#dd5500"]


@pytest.fixture
def engine_trained_learner(seeded_engine, fast_learning_config, temp_checkpoint_path):
    """Learner trained on preferred warm colors and engine-generated dislikes."""
    config = replace(
        fast_learning_config, training_epochs=60, storage_path=temp_checkpoint_path
    )
    learner = PreferenceLearner(config)
    learner.add_preferred_colors(PREFERRED)

    anti = seeded_engine.generate_anti_palette(PREFERRED)
    learner.add_disliked_colors(anti.palette.to_hex_list())

    disliked = seeded_engine.generate_disliked_colors(PREFERRED)
    learner.add_disliked_colors(
        [s.color.to_hex() for s in disliked.disliked_colors[:6]], source=SampleSource.GENERATED
    )

    learner.train()
    return learner


class TestEngineToLearner:
    """Test engine output as learner training data."""

    def test_sources_recorded(self, engine_trained_learner):
        """Test samples carry the source of the component that produced them."""
        sources = {s.source for s in engine_trained_learner.samples}
        assert SampleSource.SAVED in sources
        assert SampleSource.ANTI_PALETTE in sources

    def test_training_separates_preferred_from_disliked(self, engine_trained_learner):
        """Test preferred colors outscore the generated dislikes on average."""
        samples = engine_trained_learner.samples
        liked = [engine_trained_learner.predict_preference(s.hex) for s in samples if s.is_preferred]
        disliked = [
            engine_trained_learner.predict_preference(s.hex) for s in samples if not s.is_preferred
        ]
        assert sum(liked) / len(liked) > sum(disliked) / len(disliked)

    def test_enhancement_ranks_candidates(self, seeded_engine, engine_trained_learner):
        """Test new anti-palette candidates are ordered most-disliked first."""
        candidates = seeded_engine.generate_harmonious_palette("triadic", 200.0, size=5)
        ordered = engine_trained_learner.enhance_anti_palette_generation(
            candidates.to_hex_list()
        )
        scores = [engine_trained_learner.predict_preference(h) for h in ordered]

        assert sorted(ordered) == sorted(candidates.to_hex_list())
        assert scores == sorted(scores)


class TestCheckpointRoundTrip:
    """Test a learner resumes from its checkpoint."""

    def test_restored_learner_matches(self, engine_trained_learner):
        """Test a new learner on the same storage path predicts identically."""
        restored = PreferenceLearner(engine_trained_learner.get_config())

        assert restored.is_trained
        assert restored.samples == engine_trained_learner.samples
        for hex_color in PREFERRED + ["#0000ff", "#808080"]:
            assert restored.predict_preference(hex_color) == (
                engine_trained_learner.predict_preference(hex_color)
            )

    def test_export_into_in_memory_learner(self, engine_trained_learner, fast_learning_config):
        """Test JSON export moves the whole state to a learner without storage."""
        target = PreferenceLearner(fast_learning_config)
        target.import_data(engine_trained_learner.export_json())

        assert target.model_state == engine_trained_learner.model_state
        assert target.classify_color("#ff2200") is engine_trained_learner.classify_color("#ff2200")
