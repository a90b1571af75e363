"""Input validation for sensor samples."""

import numpy as np

from .types import SensorEvent, SensorKind, ValidationResult
from .config import CompassConfig


class SampleValidator:
    """Validates sensor samples before they reach the heading pipeline."""

    def __init__(self, config: CompassConfig):
        """Initialize validator with configuration.

        Args:
            config: System configuration.
        """
        self._config = config

    def validate_event(self, event: SensorEvent) -> ValidationResult:
        """Validate a sensor sample.

        Args:
            event: Sample to validate.

        Returns:
            ValidationResult with validation status and any errors/warnings.
        """
        result = ValidationResult(is_valid=True)

        if len(event.values) < 3:
            result.add_error(f"Expected at least 3 values, got {len(event.values)}")
            return result

        self._check_finite(event, result)
        if not result.is_valid:
            return result

        if event.kind == SensorKind.ROTATION:
            self._check_rotation_vector(event, result)
        elif event.kind == SensorKind.MAGNETOMETER:
            self._check_magnetometer(event, result)

        return result

    def _check_finite(self, event: SensorEvent, result: ValidationResult) -> None:
        """Check all values are finite (not NaN or Inf)."""
        for i, val in enumerate(event.values):
            if not np.isfinite(val):
                result.add_error(f"Non-finite value at index {i}: {val}")

    def _check_rotation_vector(self, event: SensorEvent, result: ValidationResult) -> None:
        """Validate rotation-vector quaternion components."""
        xyz_norm = float(np.linalg.norm(event.vector[:3]))

        if len(event.values) >= 4:
            q_norm = float(np.linalg.norm(event.vector[:4]))
            if q_norm < 1e-6:
                result.add_error("Rotation vector has zero norm")
            elif abs(q_norm - 1.0) > 0.1:
                result.add_warning(f"Rotation vector norm drift: {q_norm:.4f}")
        elif xyz_norm > 1.0 + 1e-3:
            result.add_warning(f"Rotation vector exceeds unit norm: {xyz_norm:.4f}")

    def _check_magnetometer(self, event: SensorEvent, result: ValidationResult) -> None:
        """Flag readings outside the Earth field band."""
        cfg = self._config.interference
        magnitude = float(np.linalg.norm(event.vector[:3]))

        if magnitude < cfg.min_field_ut:
            result.add_warning(f"Magnetic field too weak: {magnitude:.1f} uT")
        elif magnitude > cfg.max_field_ut:
            result.add_warning(f"Magnetic field too strong: {magnitude:.1f} uT")
