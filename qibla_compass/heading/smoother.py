"""Heading stabilization with spike rejection and circular smoothing.

Raw headings pass through a short history used for median-based spike
suppression. A large jump is treated as noise until it repeats on
enough consecutive samples, at which point it is accepted as a real
fast rotation and the smoother is re-seeded. Smoothing is an
exponential moving average in sine/cosine space so that the 0/360
boundary does not pull the output towards 180.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from ..core.angles import angular_difference, normalize_360
from ..core.config import CompassConfig

logger = logging.getLogger(__name__)

NO_BASELINE = -1.0


class HeadingHistory:
    """Fixed-capacity ring buffer of raw headings."""

    def __init__(self, capacity: int = 5):
        self.capacity = capacity
        self._buffer: List[float] = [0.0] * capacity
        self._index = 0
        self._filled = False

    def push(self, heading: float) -> None:
        """Store a heading, overwriting the oldest once full."""
        self._buffer[self._index] = heading
        self._index = (self._index + 1) % self.capacity
        if self._index == 0:
            self._filled = True

    def __len__(self) -> int:
        return self.capacity if self._filled else self._index

    def values(self) -> List[float]:
        """Filled slots in storage order."""
        return self._buffer[:len(self)]

    def median(self) -> Optional[float]:
        """Upper median of the filled slots, or None when empty."""
        count = len(self)
        if count == 0:
            return None
        return sorted(self.values())[count // 2]

    def clear(self) -> None:
        """Drop all stored headings."""
        self._buffer = [0.0] * self.capacity
        self._index = 0
        self._filled = False


class CircularSmoother:
    """Exponential moving average of angles in sin/cos space.

    The running (sin, cos) vector is not renormalized.
    """

    def __init__(self, alpha: float = 0.15):
        self.alpha = alpha
        self.smoothed_sin = 0.0
        self.smoothed_cos = 1.0
        self.initialized = False

    def update(self, heading_deg: float) -> float:
        """Blend a heading into the running mean.

        Args:
            heading_deg: Heading in degrees.

        Returns:
            Smoothed heading in [0, 360).
        """
        radians = math.radians(heading_deg)
        s = math.sin(radians)
        c = math.cos(radians)

        if not self.initialized:
            self.smoothed_sin = s
            self.smoothed_cos = c
            self.initialized = True
        else:
            self.smoothed_sin = self.alpha * s + (1 - self.alpha) * self.smoothed_sin
            self.smoothed_cos = self.alpha * c + (1 - self.alpha) * self.smoothed_cos

        return normalize_360(math.degrees(math.atan2(self.smoothed_sin, self.smoothed_cos)))

    def reset(self) -> None:
        """Forget the running mean."""
        self.smoothed_sin = 0.0
        self.smoothed_cos = 1.0
        self.initialized = False


@dataclass
class SpikeTracker:
    """Spike confirmation and shake state."""
    last_heading: float = NO_BASELINE
    spike_count: int = 0
    is_shaking: bool = False
    last_stable_time: float = 0.0

    @property
    def has_baseline(self) -> bool:
        return self.last_heading >= 0


@dataclass(frozen=True)
class SmoothedHeading:
    """Output of one smoother step."""
    heading: float
    is_stabilizing: bool
    spike_suppressed: bool = False
    fast_rotation: bool = False


class HeadingSmoother:
    """Turn raw true headings into a stable display heading."""

    def __init__(self, config: CompassConfig):
        """Initialize smoother.

        The stable time is anchored on the first processed heading.

        Args:
            config: System configuration with smoothing settings.
        """
        cfg = config.smoothing
        self.max_jump = cfg.max_heading_jump_deg
        self.spike_threshold = cfg.spike_threshold
        self.stabilization_delay_ms = cfg.stabilization_delay_ms

        self.history = HeadingHistory(cfg.history_size)
        self.smoother = CircularSmoother(cfg.alpha)
        self.tracker = SpikeTracker()

    def is_spike(self, heading: float) -> bool:
        """Whether a heading jumps too far from the accepted baseline."""
        if not self.tracker.has_baseline:
            return False
        return angular_difference(heading, self.tracker.last_heading) > self.max_jump

    def process(self, raw_heading: float, now_ms: float) -> SmoothedHeading:
        """Run one raw heading through spike rejection and smoothing.

        Args:
            raw_heading: Declination-corrected heading in [0, 360).
            now_ms: Current time in milliseconds.

        Returns:
            Smoothed heading and stabilizing flag.
        """
        tracker = self.tracker
        if not tracker.has_baseline:
            tracker.last_stable_time = now_ms
        self.history.push(raw_heading)

        if self.is_spike(raw_heading):
            tracker.spike_count += 1

            if tracker.spike_count >= self.spike_threshold:
                logger.debug(
                    "Fast rotation confirmed: %.1f -> %.1f deg",
                    tracker.last_heading, raw_heading
                )
                self.history.clear()
                self.smoother.reset()
                self.tracker = SpikeTracker(
                    last_heading=raw_heading,
                    spike_count=0,
                    is_shaking=True,
                    last_stable_time=now_ms,
                )
                return SmoothedHeading(
                    heading=self.smoother.update(raw_heading),
                    is_stabilizing=True,
                    fast_rotation=True,
                )

            median = self.history.median()
            substitute = median if median is not None else tracker.last_heading
            return SmoothedHeading(
                heading=self.smoother.update(substitute),
                is_stabilizing=tracker.is_shaking,
                spike_suppressed=True,
            )

        tracker.spike_count = 0

        if tracker.is_shaking and now_ms - tracker.last_stable_time > self.stabilization_delay_ms:
            tracker.is_shaking = False
            logger.debug("Heading stabilized after %.0f ms", now_ms - tracker.last_stable_time)

        tracker.last_heading = raw_heading
        return SmoothedHeading(
            heading=self.smoother.update(raw_heading),
            is_stabilizing=tracker.is_shaking,
        )

    @property
    def is_stabilizing(self) -> bool:
        return self.tracker.is_shaking

    def reset(self) -> None:
        """Clear history, smoothing and spike state."""
        self.history.clear()
        self.smoother.reset()
        self.tracker = SpikeTracker()
