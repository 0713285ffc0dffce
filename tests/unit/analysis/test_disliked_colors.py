"""
Unit tests for single-color disliked generation.
"""

import pytest

pytestmark = [pytest.mark.unit, pytest.mark.analysis]
from ChromaGen_Engine.analysis.disliked_colors import DislikedColorGenerator
from ChromaGen_Engine.config import ColorConfig
from ChromaGen_Engine.core.exceptions import InsufficientDataError, InvalidInputFormatError
from ChromaGen_Engine.core.types import RGBColor


@pytest.fixture
def generator():
    """Seeded generator over a coarse 8-division grid."""
    return DislikedColorGenerator(ColorConfig(random_seed=42, color_space_divisions=8))


class TestCandidates:
    """Test candidate generation."""

    def test_grid_plus_random_quarter(self, generator):
        """Test an 8-division grid (512 colors) plus 128 random extras."""
        candidates = generator.generate_candidates()
        assert len(candidates) == 512 + 128

    def test_grid_comes_first(self, generator):
        """Test the grid is laid out with step 256 // divisions from black."""
        candidates = generator.generate_candidates()
        assert candidates[0] == RGBColor(0, 0, 0)
        assert candidates[1] == RGBColor(0, 0, 32)
        assert candidates[511] == RGBColor(224, 224, 224)

    def test_random_part_is_seeded(self, generator):
        """Test the random extras repeat for the same seed."""
        assert generator.generate_candidates() == generator.generate_candidates()


class TestGenerate:
    """Test disliked color generation."""

    def test_empty_input_raises(self, generator):
        """Test at least one preferred color is required."""
        with pytest.raises(InsufficientDataError) as exc_info:
            generator.generate([])
        assert exc_info.value.required == 1

    def test_invalid_hex_raises(self, generator):
        """Test malformed colors are rejected."""
        with pytest.raises(InvalidInputFormatError):
            generator.generate(["#zzzzzz"])

    def test_count_is_ratio_times_preferred(self, generator):
        """Test dislike_ratio colors are returned per preferred color."""
        result = generator.generate(["#ff0000", "#00aa00"])
        assert len(result.disliked_colors) == 2 * generator.config.dislike_ratio

    def test_deltas_within_thresholds_and_sorted(self, generator):
        """Test kept colors lie in the DeltaE band, farthest first."""
        result = generator.generate(["#336699"])
        deltas = [s.delta_e_from_nearest_preferred for s in result.disliked_colors]
        assert deltas == sorted(deltas, reverse=True)
        for delta in deltas:
            assert generator.config.min_delta_e_threshold <= delta
            assert delta <= generator.config.max_delta_e_threshold

    def test_samples_are_labelled(self, generator):
        """Test preferred and disliked samples carry their labels."""
        result = generator.generate([RGBColor(10, 200, 30)])
        assert [s.color for s in result.preferred_colors] == [RGBColor(10, 200, 30)]
        assert all(s.is_preferred for s in result.preferred_colors)
        assert not any(s.is_preferred for s in result.disliked_colors)

    def test_statistics(self, generator):
        """Test the summary statistics."""
        result = generator.generate(["#ff0000"])
        stats = result.statistics
        assert stats.preferred_count == 1
        assert stats.disliked_count == 7
        assert stats.ratio == "1:7"
        assert stats.delta_e_method == "ciede2000"
        assert stats.candidates_generated == 640
        assert stats.candidates_filtered >= stats.disliked_count
        assert stats.max_delta_e >= stats.avg_delta_e >= stats.min_delta_e

    def test_unreachable_band_returns_nothing(self):
        """Test an impossible DeltaE band yields no colors, not an error."""
        generator = DislikedColorGenerator(
            ColorConfig(
                random_seed=1,
                color_space_divisions=4,
                min_delta_e_threshold=500.0,
                max_delta_e_threshold=600.0,
            )
        )
        result = generator.generate(["#808080"])
        assert result.disliked_colors == []
        assert result.statistics.min_delta_e == 0.0
