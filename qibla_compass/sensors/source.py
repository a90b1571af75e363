"""Sensor source interface and in-process simulation.

A sensor source delivers samples to registered listeners, one callback
at a time. Platform bindings implement the same protocol.
"""

import logging
from typing import Dict, Iterable, List, Optional, Protocol, Tuple
import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

from ..core.rotation import STANDARD_GRAVITY
from ..core.types import SensorAccuracy, SensorEvent, SensorKind

logger = logging.getLogger(__name__)


class SensorUnavailableError(RuntimeError):
    """No compatible orientation sensor on this device."""


class SensorListener(Protocol):
    """Receiver of sensor callbacks."""

    def on_sensor_event(self, event: SensorEvent) -> None:
        ...

    def on_accuracy_changed(self, kind: SensorKind, accuracy: int) -> None:
        ...


class SensorSource(Protocol):
    """Provider of orientation sensor streams."""

    def has_sensor(self, kind: SensorKind) -> bool:
        ...

    def register(self, listener: SensorListener, kind: SensorKind) -> bool:
        ...

    def unregister(self, listener: SensorListener) -> None:
        ...


def rotation_vector_for(heading_deg: float, pitch_deg: float = 0.0) -> Tuple[float, float, float, float]:
    """Rotation-vector sample [x, y, z, w] for a heading and pitch."""
    rotation = Rotation.from_euler("ZX", [-heading_deg, -pitch_deg], degrees=True)
    x, y, z, w = rotation.as_quat()
    return (float(x), float(y), float(z), float(w))


def raw_vectors_for(
    heading_deg: float,
    horizontal_ut: float = 20.0,
    vertical_ut: float = 42.0
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Accelerometer and magnetometer vectors for a level device.

    Args:
        heading_deg: Magnetic heading of the device's top edge.
        horizontal_ut: Horizontal field strength.
        vertical_ut: Downward field strength.

    Returns:
        (gravity, geomagnetic) in device coordinates.
    """
    h = np.deg2rad(heading_deg)
    gravity = np.array([0.0, 0.0, STANDARD_GRAVITY])
    geomagnetic = np.array([
        -horizontal_ut * np.sin(h),
        horizontal_ut * np.cos(h),
        -vertical_ut,
    ])
    return gravity, geomagnetic


class SimulatedSensorSource:
    """In-process sensor source for tests and development.

    Samples are pushed with emit(); registered listeners receive them
    synchronously.
    """

    def __init__(
        self,
        available: Iterable[SensorKind] = (
            SensorKind.ROTATION,
            SensorKind.ACCELEROMETER,
            SensorKind.MAGNETOMETER,
        ),
        failing: Iterable[SensorKind] = (),
        seed: Optional[int] = None
    ):
        """Initialize simulated source.

        Args:
            available: Sensor kinds present on the simulated device.
            failing: Sensor kinds whose registration is refused.
            seed: Seed for sample noise.
        """
        self._available = set(available)
        self._failing = set(failing)
        self._listeners: Dict[SensorKind, List[SensorListener]] = {}
        self._rng = np.random.default_rng(seed)
        self.registration_count = 0

    def has_sensor(self, kind: SensorKind) -> bool:
        return kind in self._available

    def register(self, listener: SensorListener, kind: SensorKind) -> bool:
        if kind not in self._available or kind in self._failing:
            return False
        listeners = self._listeners.setdefault(kind, [])
        if listener not in listeners:
            listeners.append(listener)
        self.registration_count += 1
        logger.debug("Listener registered for %s", kind.value)
        return True

    def unregister(self, listener: SensorListener) -> None:
        for listeners in self._listeners.values():
            if listener in listeners:
                listeners.remove(listener)

    def registered_kinds(self, listener: SensorListener) -> List[SensorKind]:
        """Kinds the listener is currently registered for."""
        return [kind for kind, listeners in self._listeners.items() if listener in listeners]

    def emit(self, event: SensorEvent) -> None:
        """Deliver a sample to listeners registered for its kind."""
        for listener in list(self._listeners.get(event.kind, [])):
            listener.on_sensor_event(event)

    def change_accuracy(self, kind: SensorKind, accuracy: int) -> None:
        """Deliver an accuracy change to listeners registered for kind."""
        for listener in list(self._listeners.get(kind, [])):
            listener.on_accuracy_changed(kind, accuracy)

    def emit_heading(
        self,
        heading_deg: float,
        timestamp_ms: float,
        pitch_deg: float = 0.0,
        noise_deg: float = 0.0,
        accuracy: int = SensorAccuracy.HIGH
    ) -> None:
        """Emit a rotation-vector sample for a heading."""
        if noise_deg > 0:
            heading_deg += float(self._rng.normal(0, noise_deg))
        self.emit(SensorEvent(
            kind=SensorKind.ROTATION,
            values=rotation_vector_for(heading_deg, pitch_deg),
            timestamp_ms=timestamp_ms,
            accuracy=accuracy,
        ))

    def emit_raw_heading(
        self,
        heading_deg: float,
        timestamp_ms: float,
        horizontal_ut: float = 20.0,
        vertical_ut: float = 42.0,
        accuracy: int = SensorAccuracy.HIGH
    ) -> None:
        """Emit an accelerometer sample followed by a magnetometer sample."""
        gravity, geomagnetic = raw_vectors_for(heading_deg, horizontal_ut, vertical_ut)
        self.emit(SensorEvent(
            kind=SensorKind.ACCELEROMETER,
            values=tuple(float(v) for v in gravity),
            timestamp_ms=timestamp_ms,
            accuracy=accuracy,
        ))
        self.emit(SensorEvent(
            kind=SensorKind.MAGNETOMETER,
            values=tuple(float(v) for v in geomagnetic),
            timestamp_ms=timestamp_ms,
            accuracy=accuracy,
        ))
