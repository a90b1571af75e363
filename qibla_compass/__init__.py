"""Qibla compass heading estimation."""

from .core import CompassConfig, HeadingEvent, ScreenRotation, load_config
from .heading import CompassPipeline, qibla_bearing
from .sensors import SensorUnavailableError

__version__ = "0.1.0"

__all__ = [
    "CompassConfig",
    "CompassPipeline",
    "HeadingEvent",
    "ScreenRotation",
    "SensorUnavailableError",
    "load_config",
    "qibla_bearing",
]
