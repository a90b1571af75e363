"""Core module for compass heading estimation."""

from .types import (
    SensorKind,
    SensorAccuracy,
    ScreenRotation,
    SensorEvent,
    FusedRotation,
    RawPair,
    OrientationInput,
    Orientation,
    UserLocation,
    HeadingEvent,
    AccuracyWarning,
    ValidationResult,
    SessionStats,
)
from .angles import normalize_360, angular_difference, signed_angular_difference
from .rotation import RotationOps
from .validation import SampleValidator
from .config import CompassConfig, load_config

__all__ = [
    "SensorKind",
    "SensorAccuracy",
    "ScreenRotation",
    "SensorEvent",
    "FusedRotation",
    "RawPair",
    "OrientationInput",
    "Orientation",
    "UserLocation",
    "HeadingEvent",
    "AccuracyWarning",
    "ValidationResult",
    "SessionStats",
    "normalize_360",
    "angular_difference",
    "signed_angular_difference",
    "RotationOps",
    "SampleValidator",
    "CompassConfig",
    "load_config",
]
