"""Sensor sources feeding the compass pipeline."""

from .source import (
    SensorListener,
    SensorSource,
    SensorUnavailableError,
    SimulatedSensorSource,
    raw_vectors_for,
    rotation_vector_for,
)
from .recording import AccuracyChange, RecordingSensorSource, SensorRecording

__all__ = [
    "SensorListener",
    "SensorSource",
    "SensorUnavailableError",
    "SimulatedSensorSource",
    "raw_vectors_for",
    "rotation_vector_for",
    "AccuracyChange",
    "RecordingSensorSource",
    "SensorRecording",
]
