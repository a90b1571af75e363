"""Pytest fixtures for compass heading tests."""

from typing import List

import pytest

from qibla_compass.core.config import CompassConfig
from qibla_compass.core.types import AccuracyWarning, HeadingEvent, SensorKind
from qibla_compass.heading.pipeline import CompassPipeline
from qibla_compass.sensors.source import SimulatedSensorSource


def no_declination(latitude, longitude, altitude, time_ms):
    """Declination model returning zero everywhere."""
    return 0.0


@pytest.fixture
def config() -> CompassConfig:
    """Create default configuration for tests."""
    return CompassConfig()


@pytest.fixture
def source() -> SimulatedSensorSource:
    """Simulated device with every sensor present."""
    return SimulatedSensorSource(seed=42)


@pytest.fixture
def raw_source() -> SimulatedSensorSource:
    """Simulated device without a fused rotation sensor."""
    return SimulatedSensorSource(
        available=(SensorKind.ACCELEROMETER, SensorKind.MAGNETOMETER),
        seed=42,
    )


@pytest.fixture
def pipeline(source, config) -> CompassPipeline:
    """Pipeline bound to the simulated source, without declination."""
    return CompassPipeline(source, config=config, declination_model=no_declination)


@pytest.fixture
def headings(pipeline) -> List[HeadingEvent]:
    """Collects delivered heading events."""
    received: List[HeadingEvent] = []
    pipeline.add_listener(CompassPipeline.HEADING_CHANGED, received.append)
    return received


@pytest.fixture
def accuracy_warnings(pipeline) -> List[AccuracyWarning]:
    """Collects delivered accuracy warnings."""
    received: List[AccuracyWarning] = []
    pipeline.add_listener(CompassPipeline.ACCURACY_WARNING, received.append)
    return received


@pytest.fixture
def make_pipeline(config):
    """Factory for pipelines on other sources, without declination by default."""
    def factory(sensor_source, **kwargs):
        kwargs.setdefault("declination_model", no_declination)
        return CompassPipeline(sensor_source, config=config, **kwargs)
    return factory
