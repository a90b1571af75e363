"""Compass pipeline: the watching lifecycle and listener interface.

Main interface combining:
- OrientationResolver for azimuth/pitch/roll from sensor samples
- DeclinationCorrector for true-north headings
- InterferenceDetector for magnetic interference flags
- HeadingSmoother for spike rejection and circular smoothing
- EmissionGate for outbound rate limiting

Usage:
    pipeline = CompassPipeline(source)
    pipeline.add_listener(CompassPipeline.HEADING_CHANGED, on_heading)
    pipeline.set_location(21.42, 39.83, 277.0)
    pipeline.start_watching()
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from ..core.config import CompassConfig
from ..core.types import (
    AccuracyWarning,
    HeadingEvent,
    SensorAccuracy,
    SensorEvent,
    SensorKind,
    SessionStats,
    UserLocation,
)
from ..core.validation import SampleValidator
from ..sensors.source import SensorSource, SensorUnavailableError
from .declination import DeclinationCorrector, DeclinationModel, wmm_declination
from .orientation import RotationProvider
from .session import HeadingSession

logger = logging.getLogger(__name__)

MODE_FUSED = "fused"
MODE_RAW = "raw"


class CompassPipeline:
    """Heading estimation bound to a sensor source.

    Sensor callbacks are expected one at a time. Lifecycle calls and
    set_location may come from other threads; session swaps happen
    under a lock so no state leaks across a stop/start boundary.
    """

    HEADING_CHANGED = "headingChanged"
    ACCURACY_WARNING = "accuracyWarning"

    def __init__(
        self,
        source: SensorSource,
        config: Optional[CompassConfig] = None,
        rotation_provider: Optional[RotationProvider] = None,
        declination_model: DeclinationModel = wmm_declination,
        wall_clock: Callable[[], float] = time.time
    ):
        """Initialize pipeline.

        Args:
            source: Sensor source to subscribe to.
            config: System configuration. Defaults are used if None.
            rotation_provider: Screen rotation query.
            declination_model: Callable (lat, lon, alt_m, time_ms) -> degrees.
            wall_clock: Returns Unix time in seconds (declination date).
        """
        if config is None:
            config = CompassConfig()
        config.validate()

        self._config = config
        self._source = source
        self._rotation_provider = rotation_provider
        self._declination = DeclinationCorrector(declination_model, wall_clock)
        self._validator = SampleValidator(config)

        self._lock = threading.RLock()
        self._session: Optional[HeadingSession] = None
        self._mode: Optional[str] = None
        self._is_watching = False
        self._is_paused = False

        self._listeners: Dict[str, List[Callable]] = {
            self.HEADING_CHANGED: [],
            self.ACCURACY_WARNING: [],
        }

    # Lifecycle

    def start_watching(self) -> None:
        """Subscribe to the best available orientation source.

        Prefers the fused rotation sensor and falls back to the
        accelerometer + magnetometer pair. Any previous session state
        is discarded.

        Raises:
            SensorUnavailableError: If no compatible sensor exists.
        """
        with self._lock:
            if self._is_watching:
                self._source.unregister(self)
            self._is_watching = False
            self._is_paused = False

            self._subscribe()
            self._is_watching = True
            logger.info("Compass watching started (%s)", self._mode)

    def stop_watching(self) -> None:
        """Unsubscribe and discard session state. Safe to call repeatedly."""
        with self._lock:
            if not self._is_watching:
                return
            self._source.unregister(self)
            self._is_watching = False
            self._is_paused = False
            self._session = None
            self._mode = None
            logger.info("Compass watching stopped")

    def pause(self) -> None:
        """Unsubscribe while keeping the intent to watch."""
        with self._lock:
            if not self._is_watching or self._is_paused:
                return
            self._source.unregister(self)
            self._is_paused = True
            logger.info("Compass paused")

    def resume(self) -> None:
        """Re-subscribe after pause with fresh session state."""
        with self._lock:
            if not self._is_watching or not self._is_paused:
                return
            self._is_paused = False
            try:
                self._subscribe()
            except SensorUnavailableError:
                logger.error("Compass sensors unavailable on resume")
                self._is_watching = False
                return
            logger.info("Compass resumed (%s)", self._mode)

    def _subscribe(self) -> None:
        """Build a new session and register for sensor samples."""
        self._session = HeadingSession(
            self._config,
            self._declination,
            self._rotation_provider,
        )

        source = self._source
        if source.has_sensor(SensorKind.ROTATION) and source.register(self, SensorKind.ROTATION):
            self._mode = MODE_FUSED
            return

        if source.has_sensor(SensorKind.MAGNETOMETER) and source.has_sensor(SensorKind.ACCELEROMETER):
            mag_ok = source.register(self, SensorKind.MAGNETOMETER)
            acc_ok = source.register(self, SensorKind.ACCELEROMETER)
            if mag_ok and acc_ok:
                self._mode = MODE_RAW
                return
            source.unregister(self)

        self._session = None
        self._mode = None
        raise SensorUnavailableError("No compass sensors available")

    def set_location(self, latitude: float, longitude: float, altitude: float = 0.0) -> None:
        """Set the observer location used for declination."""
        self._declination.set_location(latitude, longitude, altitude)

    # Sensor callbacks

    def on_sensor_event(self, event: SensorEvent) -> None:
        """Handle one sensor sample."""
        with self._lock:
            session = self._session
            if session is None or self._is_paused:
                return

            validation = self._validator.validate_event(event)
            if not validation.is_valid:
                session.monitor.record_rejected()
                logger.debug("Rejected %s sample: %s", event.kind.value, "; ".join(validation.errors))
                return

            heading_event = session.handle(event)

        if heading_event is not None:
            self._notify(self.HEADING_CHANGED, heading_event)

    def on_accuracy_changed(self, kind: SensorKind, accuracy: int) -> None:
        """Forward a calibration advisory when accuracy drops to LOW or below."""
        if not self._is_watching or accuracy > SensorAccuracy.LOW:
            return
        logger.info("Sensor accuracy degraded: %s=%d", kind.value, accuracy)
        self._notify(self.ACCURACY_WARNING, AccuracyWarning(sensor_accuracy=int(accuracy)))

    # Listeners

    def add_listener(self, event_name: str, callback: Callable) -> Callable:
        """Register a callback for headingChanged or accuracyWarning.

        Returns:
            The callback, for use with remove_listener().

        Raises:
            ValueError: If the event name is unknown.
        """
        if event_name not in self._listeners:
            raise ValueError(f"Unknown event: {event_name}")
        self._listeners[event_name].append(callback)
        return callback

    def remove_listener(self, event_name: str, callback: Callable) -> None:
        listeners = self._listeners.get(event_name, [])
        if callback in listeners:
            listeners.remove(callback)

    def remove_all_listeners(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()

    def _notify(self, event_name: str, payload) -> None:
        """Deliver a payload to listeners; a failing listener is logged."""
        for callback in list(self._listeners[event_name]):
            try:
                callback(payload)
            except Exception:
                logger.exception("Listener for %s failed", event_name)

    # State

    @property
    def is_watching(self) -> bool:
        return self._is_watching

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def mode(self) -> Optional[str]:
        """'fused', 'raw', or None when not subscribed."""
        return self._mode

    @property
    def location(self) -> Optional[UserLocation]:
        return self._declination.location

    @property
    def session(self) -> Optional[HeadingSession]:
        return self._session

    @property
    def last_event(self) -> Optional[HeadingEvent]:
        """Most recent computed heading, delivered or not."""
        if self._session is None:
            return None
        return self._session.last_event

    def get_stats(self) -> SessionStats:
        """Counters for the current session."""
        if self._session is None:
            return SessionStats()
        return self._session.monitor.get_stats()
