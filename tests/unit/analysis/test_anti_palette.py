"""
Unit tests for the anti-palette search and batch disliked-palette generation.
"""

import statistics
from unittest.mock import patch

import pytest

pytestmark = [pytest.mark.unit, pytest.mark.analysis]
from ChromaGen_Engine.analysis.anti_palette import DislikedPaletteGenerator
from ChromaGen_Engine.color.harmony import HarmoniousPaletteGenerator, SeededRandom
from ChromaGen_Engine.config import PaletteConfig
from ChromaGen_Engine.core.exceptions import InsufficientDataError, InvalidInputFormatError
from ChromaGen_Engine.core.types import ColorPalette, PaletteHarmonyType, RGBColor

WARM_COLORS = ["#ff0000", "#ff8800", "#ffcc00"]


@pytest.fixture
def generator():
    """Seeded generator with a small attempt budget."""
    return DislikedPaletteGenerator(PaletteConfig(random_seed=42, generation_attempts=60))


@pytest.fixture
def stub_palettes():
    """Three distinct untagged palettes."""
    return [
        ColorPalette.from_hex_list(["#000000", "#111111", "#222222"]),
        ColorPalette.from_hex_list(["#333333", "#444444", "#555555"]),
        ColorPalette.from_hex_list(["#666666", "#777777", "#888888"]),
    ]


class TestGenerateAntiPalette:
    """Test the anti-palette search."""

    def test_empty_input_returns_none(self, generator):
        """Test no preferred colors yields no result."""
        assert generator.generate_anti_palette([]) is None

    def test_invalid_hex_raises(self, generator):
        """Test malformed input fails parsing."""
        with pytest.raises(InvalidInputFormatError):
            generator.generate_anti_palette(["#ff0000", "red"])

    def test_single_color_input_allowed(self, generator):
        """Test one preferred color is enough."""
        result = generator.generate_anti_palette(["#3366cc"])
        assert result is not None
        assert result.distance > 0

    def test_palette_size_is_minimum_per_palette(self, generator):
        """Test the anti-palette uses min_colors_per_palette colors."""
        result = generator.generate_anti_palette(WARM_COLORS)
        assert len(result.palette) == generator.config.min_colors_per_palette

    def test_deterministic_for_seed(self, generator):
        """Test repeated calls with a fixed seed return the same palette."""
        first = generator.generate_anti_palette(WARM_COLORS)
        second = generator.generate_anti_palette(WARM_COLORS)
        assert first == second

    def test_distance_matches_reported_palette(self, generator):
        """Test the reported distance is the palette's distance to the input."""
        result = generator.generate_anti_palette(WARM_COLORS)
        preferred = [RGBColor.from_hex(h) for h in WARM_COLORS]
        assert result.distance == pytest.approx(
            generator.distance_calculator.calculate(result.palette, preferred)
        )

    def test_beats_median_random_harmonious_baseline(self, generator):
        """Test the search result is strictly farther than the median random palette."""
        preferred = [RGBColor.from_hex(h) for h in WARM_COLORS]
        seed = generator.config.random_seed
        hue_stream = SeededRandom(seed)
        palette_generator = HarmoniousPaletteGenerator(seed)
        baseline = []
        for _ in range(generator.config.generation_attempts):
            palette = palette_generator.generate(
                PaletteHarmonyType.RANDOM_HARMONIOUS,
                hue_stream.uniform(0.0, 360.0),
                size=generator.config.min_colors_per_palette,
            )
            baseline.append(generator.distance_calculator.calculate(palette, preferred))

        result = generator.generate_anti_palette(WARM_COLORS)
        assert result.distance > statistics.median(baseline)

    def test_harmony_restricted_to_allowed(self):
        """Test only allowed harmonies are used."""
        generator = DislikedPaletteGenerator(
            PaletteConfig(
                random_seed=3, generation_attempts=20, allowed_harmonies=("triadic",)
            )
        )
        result = generator.generate_anti_palette(WARM_COLORS)
        assert result.harmony_method == "triadic"
        assert result.palette.harmony_type is PaletteHarmonyType.TRIADIC

    def test_ties_keep_earliest_candidate(self, stub_palettes):
        """Test only strictly greater distances replace the best candidate."""
        generator = DislikedPaletteGenerator(PaletteConfig(random_seed=1, generation_attempts=3))

        with patch(
            "ChromaGen_Engine.analysis.anti_palette.HarmoniousPaletteGenerator"
        ) as mock_generator_cls, patch.object(
            generator.distance_calculator, "calculate", return_value=5.0
        ):
            mock_generator_cls.return_value.generate.side_effect = stub_palettes
            result = generator.generate_anti_palette(WARM_COLORS)

        assert result.palette is stub_palettes[0]
        assert result.distance == 5.0

    def test_picks_maximum_distance(self, stub_palettes):
        """Test the farthest candidate wins."""
        generator = DislikedPaletteGenerator(PaletteConfig(random_seed=1, generation_attempts=3))

        with patch(
            "ChromaGen_Engine.analysis.anti_palette.HarmoniousPaletteGenerator"
        ) as mock_generator_cls, patch.object(
            generator.distance_calculator, "calculate", side_effect=[1.0, 3.0, 2.0]
        ):
            mock_generator_cls.return_value.generate.side_effect = stub_palettes
            result = generator.generate_anti_palette(WARM_COLORS)

        assert result.palette is stub_palettes[1]
        assert result.distance == 3.0

    def test_untagged_palette_reports_random(self, stub_palettes):
        """Test palettes without a harmony tag report 'random'."""
        generator = DislikedPaletteGenerator(PaletteConfig(random_seed=1, generation_attempts=1))

        with patch(
            "ChromaGen_Engine.analysis.anti_palette.HarmoniousPaletteGenerator"
        ) as mock_generator_cls:
            mock_generator_cls.return_value.generate.side_effect = stub_palettes
            result = generator.generate_anti_palette(WARM_COLORS)

        assert result.harmony_method == "random"
        assert result.to_dict()["harmonyMethod"] == "random"

    def test_runs_exactly_attempt_budget(self, stub_palettes):
        """Test the search draws exactly generation_attempts candidates."""
        generator = DislikedPaletteGenerator(PaletteConfig(random_seed=1, generation_attempts=3))

        with patch(
            "ChromaGen_Engine.analysis.anti_palette.HarmoniousPaletteGenerator"
        ) as mock_generator_cls:
            mock_generator_cls.return_value.generate.side_effect = stub_palettes
            generator.generate_anti_palette(WARM_COLORS)

        assert mock_generator_cls.return_value.generate.call_count == 3


class TestGenerateDislikedPalettes:
    """Test batch disliked-palette generation."""

    @pytest.fixture
    def preferred_palettes(self):
        return [
            ColorPalette.from_hex_list(WARM_COLORS, name="warm"),
            ColorPalette.from_hex_list(["#ff3366", "#cc0044", "#ff99aa", "#990022"]),
        ]

    def test_empty_input_raises(self, generator):
        """Test at least one preferred palette is required."""
        with pytest.raises(InsufficientDataError):
            generator.generate([])

    def test_results_sorted_farthest_first(self, generator, preferred_palettes):
        """Test disliked palettes are ordered by descending distance."""
        result = generator.generate(preferred_palettes)
        distances = [s.distance_from_nearest_preferred for s in result.disliked_palettes]
        assert distances == sorted(distances, reverse=True)

    def test_distances_within_band(self, generator, preferred_palettes):
        """Test every kept palette lies inside the configured distance band."""
        result = generator.generate(preferred_palettes)
        for sample in result.disliked_palettes:
            assert (
                generator.config.min_palette_distance
                <= sample.distance_from_nearest_preferred
                <= generator.config.max_palette_distance
            )

    def test_count_bounded_by_ratio(self, generator, preferred_palettes):
        """Test no more than len(preferred) * dislike_ratio palettes are returned."""
        result = generator.generate(preferred_palettes)
        assert len(result.disliked_palettes) <= len(preferred_palettes) * 7
        assert result.statistics.generation_attempts <= generator.config.generation_attempts

    def test_palette_size_is_mean_preferred_size(self, generator, preferred_palettes):
        """Test generated palettes use the floored mean preferred size."""
        result = generator.generate(preferred_palettes)
        assert result.statistics.palette_size == 3
        for sample in result.disliked_palettes:
            assert len(sample.palette) == 3

    def test_palette_size_clamped_to_minimum(self, generator):
        """Test two-color preferred palettes still yield minimum-size candidates."""
        result = generator.generate([ColorPalette.from_hex_list(["#000000", "#ffffff"])])
        assert result.statistics.palette_size == generator.config.min_colors_per_palette

    def test_statistics(self, generator, preferred_palettes):
        """Test the summary statistics agree with the samples."""
        result = generator.generate(preferred_palettes)
        stats = result.statistics
        assert stats.preferred_count == 2
        assert stats.disliked_count == len(result.disliked_palettes)
        assert sum(stats.harmony_distribution.values()) == stats.disliked_count
        assert stats.delta_e_method == "ciede2000"
        assert stats.palette_distance_method == "average_min"
        if result.disliked_palettes:
            assert stats.max_distance >= stats.avg_distance >= stats.min_distance

    def test_preferred_samples_echo_input(self, generator, preferred_palettes):
        """Test preferred palettes are returned tagged as user samples."""
        result = generator.generate(preferred_palettes)
        assert [s.palette for s in result.preferred_palettes] == preferred_palettes
        assert all(s.is_preferred and s.source == "user" for s in result.preferred_palettes)

    def test_deterministic_for_seed(self, generator, preferred_palettes):
        """Test a seeded generator repeats its output."""
        first = generator.generate(preferred_palettes)
        second = generator.generate(preferred_palettes)
        assert [s.palette for s in first.disliked_palettes] == [
            s.palette for s in second.disliked_palettes
        ]

    def test_stops_when_enough_found(self, preferred_palettes):
        """Test generation stops as soon as the required count is reached."""
        generator = DislikedPaletteGenerator(
            PaletteConfig(
                random_seed=42,
                generation_attempts=500,
                dislike_ratio=1,
                min_palette_distance=0.0,
                max_palette_distance=1000.0,
            )
        )
        result = generator.generate(preferred_palettes)
        assert len(result.disliked_palettes) == 2
        assert result.statistics.generation_attempts == 2
