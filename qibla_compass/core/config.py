"""Configuration management for compass heading estimation."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os

import yaml


CONFIG_ENV_VAR = "QIBLA_COMPASS_CONFIG"


@dataclass
class LowPassConfig:
    """Low-pass filter applied to raw accelerometer and magnetometer vectors."""
    alpha: float = 0.15


@dataclass
class SmoothingConfig:
    """Heading smoother configuration."""
    alpha: float = 0.15
    history_size: int = 5
    max_heading_jump_deg: float = 60.0
    spike_threshold: int = 3
    stabilization_delay_ms: float = 150.0


@dataclass
class InterferenceConfig:
    """Magnetic interference band (Earth field strength)."""
    min_field_ut: float = 25.0
    max_field_ut: float = 65.0


@dataclass
class EmissionConfig:
    """Outbound event rate limiting."""
    interval_ms: float = 66.0


@dataclass
class OrientationConfig:
    """Orientation output configuration."""
    level_warning_deg: float = 30.0
    min_gravity_ratio: float = 0.1
    min_field_norm_ut: float = 0.1


@dataclass
class MonitoringConfig:
    """Session monitoring configuration."""
    window_size: int = 256
    log_interval_s: float = 10.0


@dataclass
class CompassConfig:
    """Complete configuration for the compass pipeline."""
    low_pass: LowPassConfig = field(default_factory=LowPassConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    interference: InterferenceConfig = field(default_factory=InterferenceConfig)
    emission: EmissionConfig = field(default_factory=EmissionConfig)
    orientation: OrientationConfig = field(default_factory=OrientationConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ValueError: If any setting is out of range.
        """
        if not 0.0 < self.low_pass.alpha <= 1.0:
            raise ValueError(f"low_pass.alpha must be in (0, 1]: {self.low_pass.alpha}")
        if not 0.0 < self.smoothing.alpha <= 1.0:
            raise ValueError(f"smoothing.alpha must be in (0, 1]: {self.smoothing.alpha}")
        if self.smoothing.history_size < 1:
            raise ValueError(f"smoothing.history_size must be >= 1: {self.smoothing.history_size}")
        if not 0.0 < self.smoothing.max_heading_jump_deg <= 180.0:
            raise ValueError(
                f"smoothing.max_heading_jump_deg must be in (0, 180]: "
                f"{self.smoothing.max_heading_jump_deg}"
            )
        if self.smoothing.spike_threshold < 1:
            raise ValueError(f"smoothing.spike_threshold must be >= 1: {self.smoothing.spike_threshold}")
        if self.smoothing.stabilization_delay_ms < 0:
            raise ValueError("smoothing.stabilization_delay_ms must be non-negative")
        if self.interference.min_field_ut >= self.interference.max_field_ut:
            raise ValueError("interference.min_field_ut must be below max_field_ut")
        if self.emission.interval_ms < 0:
            raise ValueError("emission.interval_ms must be non-negative")
        if self.monitoring.window_size < 1:
            raise ValueError("monitoring.window_size must be >= 1")


def load_config(config_path: Optional[str] = None) -> CompassConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file. If None, uses the
            QIBLA_COMPASS_CONFIG environment variable, then the packaged
            default, then built-in defaults.

    Returns:
        Configuration object with all settings.

    Raises:
        FileNotFoundError: If specified config file doesn't exist.
        ValueError: If a setting is out of range.
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = env_path
        else:
            default_path = Path(__file__).parent.parent / "config" / "default.yaml"
            if default_path.exists():
                config_path = str(default_path)
            else:
                return CompassConfig()

    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return CompassConfig()

    config = _build_config(data)
    config.validate()
    return config


def _build_config(data: dict) -> CompassConfig:
    """Build CompassConfig object from dictionary."""
    return CompassConfig(
        low_pass=LowPassConfig(**data.get("low_pass", {})),
        smoothing=SmoothingConfig(**data.get("smoothing", {})),
        interference=InterferenceConfig(**data.get("interference", {})),
        emission=EmissionConfig(**data.get("emission", {})),
        orientation=OrientationConfig(**data.get("orientation", {})),
        monitoring=MonitoringConfig(**data.get("monitoring", {})),
    )
