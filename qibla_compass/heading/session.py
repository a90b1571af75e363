"""Per-session heading state.

One HeadingSession holds every piece of mutable state a watching
session needs. The pipeline builds a new one on each start or resume
instead of resetting fields one by one.
"""

import logging
from typing import Optional

from ..core.config import CompassConfig
from ..core.types import FusedRotation, HeadingEvent, Orientation, SensorEvent, SensorKind
from ..monitoring.metrics import SessionMonitor
from .declination import DeclinationCorrector
from .emission import EmissionGate
from .interference import InterferenceDetector
from .orientation import OrientationResolver, RotationProvider
from .smoother import HeadingSmoother

logger = logging.getLogger(__name__)


class HeadingSession:
    """Sensor samples in, rate-limited heading events out."""

    def __init__(
        self,
        config: CompassConfig,
        declination: DeclinationCorrector,
        rotation_provider: Optional[RotationProvider] = None
    ):
        """Initialize session state.

        Args:
            config: System configuration.
            declination: Shared declination corrector (outlives sessions).
            rotation_provider: Screen rotation query.
        """
        self.resolver = OrientationResolver(config, rotation_provider)
        self.smoother = HeadingSmoother(config)
        self.interference = InterferenceDetector(config)
        self.gate = EmissionGate(config.emission.interval_ms)
        self.monitor = SessionMonitor(config)
        self._declination = declination
        self.last_event: Optional[HeadingEvent] = None

    def handle(self, event: SensorEvent) -> Optional[HeadingEvent]:
        """Process one sensor sample.

        Args:
            event: Validated sensor sample.

        Returns:
            Heading event to deliver, or None if the sample produced no
            heading or the emission gate suppressed it.
        """
        vector = event.vector

        if event.kind == SensorKind.ROTATION:
            orientation = self.resolver.resolve(FusedRotation(rotation_vector=vector))
        elif event.kind == SensorKind.ACCELEROMETER:
            self.resolver.update_gravity(vector[:3])
            return None
        elif event.kind == SensorKind.MAGNETOMETER:
            self.resolver.update_geomagnetic(vector[:3])
            self.interference.check(vector[:3])
            pair = self.resolver.raw_pair()
            if pair is None:
                return None
            orientation = self.resolver.resolve(pair)
        else:
            raise ValueError(f"Unsupported sensor kind: {event.kind}")

        if orientation is None:
            return None

        heading_event = self._process_orientation(orientation, event)
        self.last_event = heading_event

        if not self.gate.try_pass(event.timestamp_ms):
            self.monitor.record_drop()
            return None

        self.monitor.record_emission(event.timestamp_ms)
        return heading_event

    def _process_orientation(self, orientation: Orientation, event: SensorEvent) -> HeadingEvent:
        """Correct, smooth and package one orientation."""
        raw_heading = self._declination.correct(orientation.azimuth_deg)
        result = self.smoother.process(raw_heading, event.timestamp_ms)

        self.monitor.record_sample(event.timestamp_ms)
        if result.fast_rotation:
            self.monitor.record_spike(confirmed=True)
        elif result.spike_suppressed:
            self.monitor.record_spike(confirmed=False)

        return HeadingEvent(
            heading=result.heading,
            accuracy=int(event.accuracy),
            pitch=orientation.pitch_deg,
            roll=orientation.roll_deg,
            needs_level_warning=self.resolver.needs_level_warning(orientation),
            is_stabilizing=result.is_stabilizing,
            has_magnetic_interference=self.interference.has_interference,
            timestamp_ms=event.timestamp_ms,
        )
