"""Tests for configuration loading."""

import pytest

from qibla_compass.core.config import CONFIG_ENV_VAR, CompassConfig, load_config


class TestCompassConfig:
    """Tests for CompassConfig defaults and validation."""

    def test_defaults(self):
        """Defaults match the documented tuning."""
        config = CompassConfig()
        assert config.low_pass.alpha == 0.15
        assert config.smoothing.alpha == 0.15
        assert config.smoothing.history_size == 5
        assert config.smoothing.max_heading_jump_deg == 60.0
        assert config.smoothing.spike_threshold == 3
        assert config.smoothing.stabilization_delay_ms == 150.0
        assert config.interference.min_field_ut == 25.0
        assert config.interference.max_field_ut == 65.0
        assert config.emission.interval_ms == 66.0
        assert config.orientation.level_warning_deg == 30.0
        config.validate()

    def test_invalid_alpha(self):
        """Smoothing factor outside (0, 1] is rejected."""
        config = CompassConfig()
        config.smoothing.alpha = 0.0
        with pytest.raises(ValueError):
            config.validate()

    def test_invalid_band(self):
        """An empty interference band is rejected."""
        config = CompassConfig()
        config.interference.min_field_ut = 70.0
        with pytest.raises(ValueError):
            config.validate()

    def test_invalid_history(self):
        """History must hold at least one heading."""
        config = CompassConfig()
        config.smoothing.history_size = 0
        with pytest.raises(ValueError):
            config.validate()


class TestLoadConfig:
    """Tests for load_config."""

    def test_packaged_default(self, monkeypatch):
        """Without arguments the packaged defaults are loaded."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        config = load_config()
        assert config == CompassConfig()

    def test_partial_yaml(self, tmp_path):
        """Missing sections and keys keep their defaults."""
        path = tmp_path / "compass.yaml"
        path.write_text("smoothing:\n  alpha: 0.3\nemission:\n  interval_ms: 100\n")
        config = load_config(str(path))
        assert config.smoothing.alpha == 0.3
        assert config.smoothing.history_size == 5
        assert config.emission.interval_ms == 100
        assert config.interference.min_field_ut == 25.0

    def test_empty_yaml(self, tmp_path):
        """An empty file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == CompassConfig()

    def test_env_var(self, tmp_path, monkeypatch):
        """The environment variable selects the file."""
        path = tmp_path / "env.yaml"
        path.write_text("orientation:\n  level_warning_deg: 20\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert load_config().orientation.level_warning_deg == 20

    def test_missing_file(self, tmp_path):
        """A missing explicit path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_out_of_range_value(self, tmp_path):
        """Loaded values are validated."""
        path = tmp_path / "bad.yaml"
        path.write_text("smoothing:\n  spike_threshold: 0\n")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_unknown_key(self, tmp_path):
        """Unknown keys are rejected."""
        path = tmp_path / "typo.yaml"
        path.write_text("smoothing:\n  alhpa: 0.2\n")
        with pytest.raises(TypeError):
            load_config(str(path))
