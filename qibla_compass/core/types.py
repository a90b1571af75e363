"""Data types for compass heading estimation."""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Tuple, Union
import numpy as np
from numpy.typing import NDArray


class SensorKind(str, Enum):
    """Sensor streams a source can deliver."""
    ROTATION = "rotation"
    ACCELEROMETER = "accelerometer"
    MAGNETOMETER = "magnetometer"


class SensorAccuracy(IntEnum):
    """Sensor accuracy levels as reported by the platform."""
    NO_CONTACT = -1
    UNRELIABLE = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3


class ScreenRotation(IntEnum):
    """Display rotation relative to the device's natural orientation."""
    ROTATION_0 = 0
    ROTATION_90 = 90
    ROTATION_180 = 180
    ROTATION_270 = 270


@dataclass(frozen=True)
class SensorEvent:
    """Single sample delivered by a sensor source.

    Vectors use platform units:
    - Rotation: rotation vector [x, y, z(, w)] (unit quaternion components)
    - Accelerometer: m/s^2
    - Magnetometer: uT (microtesla)
    """
    kind: SensorKind
    values: Tuple[float, ...]
    timestamp_ms: float
    accuracy: int = SensorAccuracy.HIGH

    @property
    def vector(self) -> NDArray[np.float64]:
        """Sample values as a numpy array."""
        return np.asarray(self.values, dtype=np.float64)


@dataclass(frozen=True)
class FusedRotation:
    """Orientation input from a fused rotation-vector sensor."""
    rotation_vector: NDArray[np.float64]


@dataclass(frozen=True)
class RawPair:
    """Orientation input from low-pass filtered gravity and field vectors."""
    gravity: NDArray[np.float64]
    geomagnetic: NDArray[np.float64]


OrientationInput = Union[FusedRotation, RawPair]


@dataclass(frozen=True)
class Orientation:
    """Device orientation in degrees.

    Azimuth is not normalized; pitch and roll follow the platform's
    orientation convention.
    """
    azimuth_deg: float
    pitch_deg: float
    roll_deg: float


@dataclass(frozen=True)
class UserLocation:
    """Observer location used for declination."""
    latitude: float
    longitude: float
    altitude: float = 0.0  # metres


@dataclass(frozen=True)
class HeadingEvent:
    """Outbound heading notification."""
    heading: float
    accuracy: int
    pitch: float
    roll: float
    needs_level_warning: bool
    is_stabilizing: bool
    has_magnetic_interference: bool
    timestamp_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "heading": self.heading,
            "accuracy": self.accuracy,
            "pitch": self.pitch,
            "roll": self.roll,
            "needsLevelWarning": self.needs_level_warning,
            "isStabilizing": self.is_stabilizing,
            "hasMagneticInterference": self.has_magnetic_interference,
        }


@dataclass(frozen=True)
class AccuracyWarning:
    """Outbound calibration advisory."""
    sensor_accuracy: int
    needs_calibration: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "needsCalibration": self.needs_calibration,
            "sensorAccuracy": self.sensor_accuracy,
        }


@dataclass
class ValidationResult:
    """Result of sensor sample validation."""
    is_valid: bool
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)


@dataclass
class SessionStats:
    """Counters for one watching session."""
    samples_processed: int = 0
    samples_rejected: int = 0
    spikes_suppressed: int = 0
    fast_rotations: int = 0
    events_emitted: int = 0
    events_dropped: int = 0
    mean_emit_interval_ms: Optional[float] = None

    @property
    def drop_rate(self) -> float:
        """Fraction of computed headings not delivered."""
        total = self.events_emitted + self.events_dropped
        if total == 0:
            return 0.0
        return self.events_dropped / total

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "samples_processed": self.samples_processed,
            "samples_rejected": self.samples_rejected,
            "spikes_suppressed": self.spikes_suppressed,
            "fast_rotations": self.fast_rotations,
            "events_emitted": self.events_emitted,
            "events_dropped": self.events_dropped,
            "drop_rate": self.drop_rate,
            "mean_emit_interval_ms": self.mean_emit_interval_ms,
        }
