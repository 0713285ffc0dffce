"""
Unit tests for the command-line entry point.
"""

import json

import pytest

pytestmark = [pytest.mark.unit, pytest.mark.cli]
from ChromaGen_Engine.config import ChromaGenConfig, load_config_from_file
from ChromaGen_Engine.main import main


def _run(capsys, argv):
    exit_code = main(argv)
    return exit_code, capsys.readouterr().out


class TestCommands:
    """Test each subcommand's JSON output."""

    def test_anti_palette(self, capsys):
        """Test a seeded anti-palette run is reproducible."""
        argv = ["anti-palette", "#ff0000", "#ff8800", "--seed", "42", "--attempts", "20"]
        exit_code, out = _run(capsys, argv)
        _, again = _run(capsys, argv)

        assert exit_code == 0
        result = json.loads(out)
        assert set(result) == {"palette", "distance", "harmonyMethod"}
        assert len(result["palette"]) == 3
        assert result == json.loads(again)

    def test_delta_e(self, capsys):
        """Test the CIE76 distance between black and white."""
        exit_code, out = _run(capsys, ["delta-e", "#000000", "#ffffff", "--method", "cie76"])
        assert exit_code == 0
        result = json.loads(out)
        assert result["method"] == "cie76"
        assert result["deltaE"] == pytest.approx(100.0, abs=0.05)

    def test_palette_distance_default_method(self, capsys):
        """Test the configured aggregation is used when none is given."""
        exit_code, out = _run(
            capsys, ["palette-distance", "--a", "#ff0000", "#00ff00", "--b", "#00ff00", "#ff0000"]
        )
        assert exit_code == 0
        result = json.loads(out)
        assert result["method"] == "average_min"
        assert result["distance"] == pytest.approx(0.0, abs=1e-9)

    def test_disliked_colors(self, capsys, tmp_path):
        """Test single-color generation with a reduced grid from a config file."""
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"engine": {"color": {"color_space_divisions": 4}}}))

        exit_code, out = _run(
            capsys, ["--config", str(config_path), "disliked-colors", "#336699", "--seed", "1"]
        )
        assert exit_code == 0
        result = json.loads(out)
        assert result["statistics"]["preferred_count"] == 1
        for entry in result["dislikedColors"]:
            assert 30.0 <= entry["deltaE"] <= 100.0

    def test_create_config(self, capsys, tmp_path):
        """Test the default configuration file is written."""
        path = str(tmp_path / "chromagen.json")
        exit_code, out = _run(capsys, ["create-config", path])

        assert exit_code == 0
        assert json.loads(out) == {"created": path}
        assert load_config_from_file(path) == ChromaGenConfig()


class TestErrors:
    """Test handled failures return exit code 1."""

    def test_invalid_color(self, capsys):
        """Test malformed colors are reported, not raised."""
        exit_code, out = _run(capsys, ["delta-e", "#zzzzzz", "#ffffff"])
        assert exit_code == 1
        assert out == ""

    def test_missing_config_file(self, capsys, tmp_path):
        """Test a missing configuration file fails cleanly."""
        exit_code, _ = _run(
            capsys, ["--config", str(tmp_path / "absent.json"), "delta-e", "#000000", "#ffffff"]
        )
        assert exit_code == 1

    def test_invalid_configuration(self, capsys):
        """Test invalid overrides fail cleanly."""
        exit_code, _ = _run(capsys, ["anti-palette", "#ff0000", "--attempts", "0"])
        assert exit_code == 1
