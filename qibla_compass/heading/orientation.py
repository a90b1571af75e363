"""Orientation resolution from rotation-vector or raw sensor samples.

Turns a fused rotation sample, or a pair of low-pass filtered gravity
and magnetic field vectors, into azimuth/pitch/roll for the current
screen rotation.
"""

import logging
from typing import Callable, Optional
import numpy as np
from numpy.typing import NDArray

from ..core.config import CompassConfig
from ..core.rotation import RotationOps
from ..core.types import (
    FusedRotation,
    Orientation,
    OrientationInput,
    RawPair,
    ScreenRotation,
)

logger = logging.getLogger(__name__)

RotationProvider = Callable[[], ScreenRotation]


class LowPassFilter:
    """First-order low-pass filter applied per axis.

    The first sample seeds the output directly.
    """

    def __init__(self, alpha: float = 0.15):
        self.alpha = alpha
        self._output: Optional[NDArray[np.float64]] = None

    def update(self, sample: NDArray[np.float64]) -> NDArray[np.float64]:
        """Blend a new sample into the filtered output.

        Args:
            sample: Raw 3-axis vector.

        Returns:
            Filtered vector (a copy).
        """
        sample = np.asarray(sample, dtype=np.float64)
        if self._output is None:
            self._output = sample.copy()
        else:
            self._output += self.alpha * (sample - self._output)
        return self._output.copy()

    @property
    def value(self) -> Optional[NDArray[np.float64]]:
        """Current filtered output, or None before the first sample."""
        if self._output is None:
            return None
        return self._output.copy()

    def reset(self) -> None:
        """Forget the baseline."""
        self._output = None


class OrientationResolver:
    """Resolve device orientation for the current screen rotation."""

    def __init__(
        self,
        config: CompassConfig,
        rotation_provider: Optional[RotationProvider] = None
    ):
        """Initialize resolver.

        Args:
            config: System configuration.
            rotation_provider: Callable returning the current screen
                rotation. Defaults to the natural orientation.
        """
        self._cfg = config.orientation
        self._rotation_provider = rotation_provider
        self._gravity = LowPassFilter(config.low_pass.alpha)
        self._geomagnetic = LowPassFilter(config.low_pass.alpha)

    def update_gravity(self, acc: NDArray[np.float64]) -> None:
        """Feed an accelerometer sample into the gravity filter."""
        self._gravity.update(acc)

    def update_geomagnetic(self, mag: NDArray[np.float64]) -> None:
        """Feed a magnetometer sample into the geomagnetic filter."""
        self._geomagnetic.update(mag)

    def raw_pair(self) -> Optional[RawPair]:
        """Filtered gravity/field pair, or None until both have a baseline."""
        gravity = self._gravity.value
        geomagnetic = self._geomagnetic.value
        if gravity is None or geomagnetic is None:
            return None
        return RawPair(gravity=gravity, geomagnetic=geomagnetic)

    def screen_rotation(self) -> ScreenRotation:
        """Query the screen rotation, falling back to the natural orientation."""
        if self._rotation_provider is None:
            return ScreenRotation.ROTATION_0

        try:
            return ScreenRotation(self._rotation_provider())
        except Exception:
            logger.warning(
                "Screen rotation query failed, using default axes",
                exc_info=True
            )
            return ScreenRotation.ROTATION_0

    def resolve(self, sample: OrientationInput) -> Optional[Orientation]:
        """Compute orientation for a sample.

        Args:
            sample: Fused rotation or filtered raw pair.

        Returns:
            Orientation in degrees, or None if the raw pair does not
            define a rotation (free fall, field parallel to gravity).
        """
        if isinstance(sample, FusedRotation):
            R = RotationOps.from_rotation_vector(sample.rotation_vector)
        elif isinstance(sample, RawPair):
            R = RotationOps.from_gravity_and_geomagnetic(
                sample.gravity,
                sample.geomagnetic,
                min_gravity_ratio=self._cfg.min_gravity_ratio,
                min_field_norm=self._cfg.min_field_norm_ut,
            )
            if R is None:
                logger.debug("Raw pair does not define a rotation, skipping sample")
                return None
        else:
            raise TypeError(f"Unsupported orientation input: {type(sample).__name__}")

        adjusted = RotationOps.remap_axes(R, self.screen_rotation())
        return RotationOps.to_orientation(adjusted)

    def needs_level_warning(self, orientation: Orientation) -> bool:
        """Whether the device is tilted too far for a reliable heading."""
        limit = self._cfg.level_warning_deg
        return abs(orientation.pitch_deg) > limit or abs(orientation.roll_deg) > limit

    def reset(self) -> None:
        """Clear filtered vectors."""
        self._gravity.reset()
        self._geomagnetic.reset()
