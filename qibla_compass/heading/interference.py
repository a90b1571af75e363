"""Magnetic interference detection.

Flags magnetometer readings whose magnitude falls outside the range of
plausible Earth field strength (motors, speakers, ferrous objects).
The flag is advisory and does not alter the heading.
"""

import logging
from dataclasses import dataclass
from typing import Optional
import numpy as np
from numpy.typing import NDArray

from ..core.config import CompassConfig

logger = logging.getLogger(__name__)


@dataclass
class InterferenceStatus:
    """Result of one interference check."""
    has_interference: bool
    magnitude: float
    failure_reason: Optional[str] = None


class InterferenceDetector:
    """Check raw magnetometer magnitude against the Earth field band."""

    def __init__(self, config: CompassConfig):
        cfg = config.interference
        self.min_field = cfg.min_field_ut
        self.max_field = cfg.max_field_ut

        self.total_checks = 0
        self.failures = 0
        self.has_interference = False

    def check(self, mag: NDArray[np.float64]) -> InterferenceStatus:
        """Check a raw magnetometer reading.

        Args:
            mag: Magnetometer reading [mx, my, mz] in uT.

        Returns:
            InterferenceStatus for this reading.
        """
        self.total_checks += 1
        magnitude = float(np.linalg.norm(mag))

        if not np.isfinite(mag).all():
            status = InterferenceStatus(True, magnitude, "non_finite_values")
        elif magnitude < self.min_field:
            status = InterferenceStatus(True, magnitude, "magnitude_too_low")
        elif magnitude > self.max_field:
            status = InterferenceStatus(True, magnitude, "magnitude_too_high")
        else:
            status = InterferenceStatus(False, magnitude)

        if status.has_interference:
            self.failures += 1
            if not self.has_interference:
                logger.warning(
                    "Magnetic interference detected: %.1f uT (%s)",
                    magnitude, status.failure_reason
                )
        elif self.has_interference:
            logger.info("Magnetic field back in range: %.1f uT", magnitude)

        self.has_interference = status.has_interference
        return status

    def get_stats(self) -> dict:
        """Get interference check statistics."""
        return {
            'total_checks': self.total_checks,
            'failures': self.failures,
            'failure_rate': self.failures / max(1, self.total_checks),
            'has_interference': self.has_interference,
        }

    def reset(self) -> None:
        """Reset detector state."""
        self.total_checks = 0
        self.failures = 0
        self.has_interference = False
